"""Classic projects of repositories, organizations and users."""

import logging
from typing import Any

from gh_cmdlets.config import Configuration
from gh_cmdlets.github.constants import INERTIA_ACCEPT_HEADER
from gh_cmdlets.github.http import RequestValidationError
from gh_cmdlets.github.rest import RestClient
from gh_cmdlets.github.uri import (
    RepositoryElementsParams,
    join_github_uri,
    resolve_repository_elements,
    split_github_uri,
)
from gh_cmdlets.resources.common import (
    add_additional_properties,
    path_segment,
    repo_path,
    telemetry_properties,
    validate_choice,
    with_query,
)
from gh_cmdlets.telemetry import get_pii_safe_string

logger = logging.getLogger(__name__)

STATE_CHOICES = ("open", "closed", "all")
ORGANIZATION_PERMISSION_CHOICES = ("read", "write", "admin", "none")


def _project_properties(config: Configuration):
    def properties(item: dict[str, Any]) -> dict[str, Any]:
        added: dict[str, Any] = {"ProjectId": item.get("id")}
        owner_url = item.get("owner_url") or ""
        if "/repos/" in owner_url:
            reference = split_github_uri(owner_url, config)
            if reference.owner_name and reference.repository_name:
                added["RepositoryUrl"] = join_github_uri(reference.owner_name, reference.repository_name, config)
        return added

    return properties


def _scope(
    config: Configuration,
    owner_name: str | None,
    repository_name: str | None,
    uri: str | None,
    organization_name: str | None,
    user_name: str | None,
) -> tuple[str, str, dict[str, Any]]:
    """Collection path, description and telemetry properties for the chosen owner."""
    if sum(value is not None for value in (uri or owner_name or repository_name, organization_name, user_name)) > 1:
        raise RequestValidationError("Specify only one of a repository, organization_name or user_name.")

    if organization_name is not None:
        return (
            f"orgs/{path_segment(organization_name)}/projects",
            f"organization {organization_name}",
            {"OrganizationName": get_pii_safe_string(organization_name, config)},
        )
    if user_name is not None:
        return (
            f"users/{path_segment(user_name)}/projects",
            f"user {user_name}",
            {"UserName": get_pii_safe_string(user_name, config)},
        )

    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    return f"{repo_path(reference)}/projects", reference.repository_name, telemetry_properties(reference, config)


def get_projects(
    rest_client: RestClient,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    organization_name: str | None = None,
    user_name: str | None = None,
    project: int | None = None,
    state: str | None = None,
    access_token: str | None = None,
) -> Any:
    """List the projects of a repository, organization or user, or get one by id.

    Args:
        project: Project id; the owner parameters are not used with it.
        state: Filter listings by open, closed or all.
    """
    config = rest_client.config
    state = validate_choice("state", state, STATE_CHOICES)
    properties_fn = _project_properties(config)

    if project is not None:
        result = rest_client.get(
            f"projects/{project}",
            description=f"Getting project {project}",
            accept_header=INERTIA_ACCEPT_HEADER,
            access_token=access_token,
            telemetry_event_name="GetProject",
            telemetry_properties=telemetry_properties(None, config),
        )
        return add_additional_properties(result, config, properties_fn)

    uri_fragment, owner_description, properties = _scope(
        config, owner_name, repository_name, uri, organization_name, user_name
    )
    results = rest_client.invoke_multiple_result(
        with_query(uri_fragment, state=state),
        description=f"Getting projects for {owner_description}",
        accept_header=INERTIA_ACCEPT_HEADER,
        access_token=access_token,
        telemetry_event_name="GetProject",
        telemetry_properties=properties,
    )
    return add_additional_properties(results, config, properties_fn)


def new_project(
    rest_client: RestClient,
    name: str,
    description: str | None = None,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    organization_name: str | None = None,
    user_project: bool = False,
    access_token: str | None = None,
) -> dict[str, Any]:
    """Create a project for a repository, an organization or the current user."""
    config = rest_client.config
    if user_project:
        if any(value is not None for value in (owner_name, repository_name, uri, organization_name)):
            raise RequestValidationError("user_project cannot be combined with a repository or organization.")
        uri_fragment, owner_description = "user/projects", "current user"
        properties = telemetry_properties(None, config)
    else:
        uri_fragment, owner_description, properties = _scope(
            config, owner_name, repository_name, uri, organization_name, None
        )

    body: dict[str, Any] = {"name": name}
    if description is not None:
        body["body"] = description

    result = rest_client.post(
        uri_fragment,
        body=body,
        description=f"Creating project {name} for {owner_description}",
        accept_header=INERTIA_ACCEPT_HEADER,
        access_token=access_token,
        telemetry_event_name="NewProject",
        telemetry_properties=properties,
    )
    return add_additional_properties(result, config, _project_properties(config))


def set_project(
    rest_client: RestClient,
    project: int,
    description: str | None = None,
    state: str | None = None,
    organization_permission: str | None = None,
    private: bool | None = None,
    access_token: str | None = None,
) -> dict[str, Any]:
    """Update a project.

    Raises:
        RequestValidationError: If a choice is invalid or nothing would change.
    """
    config = rest_client.config
    state = validate_choice("state", state, ("open", "closed"))
    organization_permission = validate_choice(
        "organization_permission", organization_permission, ORGANIZATION_PERMISSION_CHOICES
    )

    body: dict[str, Any] = {}
    if description is not None:
        body["body"] = description
    if state is not None:
        body["state"] = state
    if organization_permission is not None:
        body["organization_permission"] = organization_permission
    if private is not None:
        body["private"] = private
    if not body:
        raise RequestValidationError("Nothing to change for project.")

    result = rest_client.patch(
        f"projects/{project}",
        body=body,
        description=f"Updating project {project}",
        accept_header=INERTIA_ACCEPT_HEADER,
        access_token=access_token,
        telemetry_event_name="SetProject",
        telemetry_properties=telemetry_properties(None, config),
    )
    return add_additional_properties(result, config, _project_properties(config))


def remove_project(rest_client: RestClient, project: int, access_token: str | None = None) -> None:
    rest_client.delete(
        f"projects/{project}",
        description=f"Deleting project {project}",
        accept_header=INERTIA_ACCEPT_HEADER,
        access_token=access_token,
        telemetry_event_name="RemoveProject",
        telemetry_properties=telemetry_properties(None, rest_client.config),
    )
