"""Repository branches."""

import logging
from typing import Any

from gh_cmdlets.github.http import GitHubHTTPError
from gh_cmdlets.github.rest import RestClient
from gh_cmdlets.github.uri import (
    RepositoryElementsParams,
    RepositoryReference,
    join_github_uri,
    resolve_repository_elements,
)
from gh_cmdlets.resources.common import (
    add_additional_properties,
    path_segment,
    repo_path,
    telemetry_properties,
    with_query,
)

logger = logging.getLogger(__name__)


class BranchNotFoundError(GitHubHTTPError):
    """Raised when the branch a new branch should start from does not exist."""


def _branch_properties(reference: RepositoryReference, rest_client: RestClient):
    repository_url = join_github_uri(reference.owner_name, reference.repository_name, rest_client.config)

    def properties(item: dict[str, Any]) -> dict[str, Any]:
        if "ref" in item:
            # Git reference returned when a branch is created
            return {
                "RepositoryUrl": repository_url,
                "BranchName": item["ref"].removeprefix("refs/heads/"),
                "Sha": (item.get("object") or {}).get("sha"),
            }
        return {
            "RepositoryUrl": repository_url,
            "BranchName": item.get("name"),
            "Sha": (item.get("commit") or {}).get("sha"),
        }

    return properties


def get_branches(
    rest_client: RestClient,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    branch_name: str | None = None,
    protected_only: bool = False,
    access_token: str | None = None,
) -> Any:
    """List the branches of a repository, or get one by name.

    Returns:
        A list of branches, or a single branch when ``branch_name`` is given.
    """
    config = rest_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    properties = telemetry_properties(reference, config, ProtectedOnly=protected_only)
    properties_fn = _branch_properties(reference, rest_client)

    if branch_name:
        result = rest_client.get(
            f"{repo_path(reference)}/branches/{path_segment(branch_name)}",
            description=f"Getting branch {branch_name} for {reference.repository_name}",
            access_token=access_token,
            telemetry_event_name="GetBranch",
            telemetry_properties=properties,
        )
        return add_additional_properties(result, config, properties_fn)

    results = rest_client.invoke_multiple_result(
        with_query(f"{repo_path(reference)}/branches", protected="true" if protected_only else None),
        description=f"Getting branches for {reference.repository_name}",
        access_token=access_token,
        telemetry_event_name="GetBranches",
        telemetry_properties=properties,
    )
    return add_additional_properties(results, config, properties_fn)


def new_branch(
    rest_client: RestClient,
    target_branch_name: str,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    branch_name: str | None = None,
    sha: str | None = None,
    access_token: str | None = None,
) -> dict[str, Any]:
    """Create a branch.

    Args:
        target_branch_name: Name of the branch to create.
        branch_name: Branch to start from; defaults to the repository's
            default branch. Ignored when ``sha`` is given.
        sha: Commit to start from.

    Raises:
        BranchNotFoundError: If ``branch_name`` does not exist.
    """
    config = rest_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    properties = telemetry_properties(reference, config)

    if sha is None:
        if branch_name is None:
            repository = rest_client.get(
                repo_path(reference),
                description=f"Getting default branch of {reference.repository_name}",
                access_token=access_token,
            )
            branch_name = repository["default_branch"]

        msg = f"Origin branch '{branch_name}' not found in {reference.owner_name}/{reference.repository_name}"
        try:
            origin = rest_client.get(
                f"{repo_path(reference)}/git/refs/heads/{path_segment(branch_name)}",
                description=f"Getting reference for branch {branch_name}",
                access_token=access_token,
            )
        except GitHubHTTPError as e:
            if e.status_code == 404:
                logger.error(msg)
                raise BranchNotFoundError(msg, status_code=404, request_id=e.request_id) from e
            raise

        # A prefix match returns a list of references
        if isinstance(origin, list):
            origin = next((ref for ref in origin if ref["ref"] == f"refs/heads/{branch_name}"), None)
            if origin is None:
                logger.error(msg)
                raise BranchNotFoundError(msg, status_code=404)
        sha = origin["object"]["sha"]

    result = rest_client.post(
        f"{repo_path(reference)}/git/refs",
        body={"ref": f"refs/heads/{target_branch_name}", "sha": sha},
        description=f"Creating branch {target_branch_name} for {reference.repository_name}",
        access_token=access_token,
        telemetry_event_name="NewBranch",
        telemetry_properties=properties,
    )
    return add_additional_properties(result, config, _branch_properties(reference, rest_client))


def remove_branch(
    rest_client: RestClient,
    branch_name: str,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    access_token: str | None = None,
) -> None:
    """Delete a branch."""
    config = rest_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    rest_client.delete(
        f"{repo_path(reference)}/git/refs/heads/{path_segment(branch_name)}",
        description=f"Deleting branch {branch_name} from {reference.repository_name}",
        access_token=access_token,
        telemetry_event_name="RemoveBranch",
        telemetry_properties=telemetry_properties(reference, config),
    )
