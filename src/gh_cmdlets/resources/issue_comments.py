"""Comments on issues and pull requests."""

import logging
from datetime import date, datetime
from typing import Any

from gh_cmdlets.github.http import RequestValidationError
from gh_cmdlets.github.rest import RestClient
from gh_cmdlets.github.uri import (
    RepositoryElementsParams,
    RepositoryReference,
    join_github_uri,
    resolve_repository_elements,
)
from gh_cmdlets.resources.common import (
    add_additional_properties,
    format_timestamp,
    media_type_accept_header,
    repo_path,
    telemetry_properties,
    validate_choice,
    with_query,
)

logger = logging.getLogger(__name__)

SORT_CHOICES = ("created", "updated")
DIRECTION_CHOICES = ("asc", "desc")


def _issue_number(issue_url: str | None) -> int | None:
    if not issue_url:
        return None
    tail = issue_url.rstrip("/").rsplit("/", 1)[-1]
    return int(tail) if tail.isdigit() else None


def _comment_properties(reference: RepositoryReference, rest_client: RestClient):
    repository_url = join_github_uri(reference.owner_name, reference.repository_name, rest_client.config)

    def properties(item: dict[str, Any]) -> dict[str, Any]:
        return {
            "RepositoryUrl": repository_url,
            "CommentId": item.get("id"),
            "IssueNumber": _issue_number(item.get("issue_url")),
        }

    return properties


def get_issue_comments(
    rest_client: RestClient,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    issue: int | None = None,
    comment_id: int | None = None,
    since: datetime | date | str | None = None,
    sort: str | None = None,
    direction: str | None = None,
    media_type: str = "raw",
    access_token: str | None = None,
) -> Any:
    """Get issue comments.

    Lists every comment in the repository, the comments of one issue when
    ``issue`` is given, or a single comment when ``comment_id`` is given.
    ``sort`` and ``direction`` only apply to the repository-wide listing.

    Raises:
        RequestValidationError: If both ``issue`` and ``comment_id`` are
            given, or a choice is not recognized.
    """
    if issue is not None and comment_id is not None:
        raise RequestValidationError("Specify either issue or comment_id, not both.")
    sort = validate_choice("sort", sort, SORT_CHOICES)
    direction = validate_choice("direction", direction, DIRECTION_CHOICES)
    if (sort or direction) and (issue is not None or comment_id is not None):
        raise RequestValidationError("sort and direction apply only to repository-wide comment listing.")

    config = rest_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    accept_header = media_type_accept_header(media_type)
    properties = telemetry_properties(reference, config)
    properties_fn = _comment_properties(reference, rest_client)

    if comment_id is not None:
        result = rest_client.get(
            f"{repo_path(reference)}/issues/comments/{comment_id}",
            description=f"Getting comment {comment_id} for {reference.repository_name}",
            accept_header=accept_header,
            access_token=access_token,
            telemetry_event_name="GetIssueComment",
            telemetry_properties=properties,
        )
        return add_additional_properties(result, config, properties_fn)

    since_value = format_timestamp(since) if since is not None else None
    if issue is not None:
        uri_fragment = with_query(f"{repo_path(reference)}/issues/{issue}/comments", since=since_value)
        description = f"Getting comments for issue {issue} in {reference.repository_name}"
    else:
        uri_fragment = with_query(
            f"{repo_path(reference)}/issues/comments", since=since_value, sort=sort, direction=direction
        )
        description = f"Getting comments for {reference.repository_name}"

    results = rest_client.invoke_multiple_result(
        uri_fragment,
        description=description,
        accept_header=accept_header,
        access_token=access_token,
        telemetry_event_name="GetIssueComments",
        telemetry_properties=properties,
    )
    return add_additional_properties(results, config, properties_fn)


def new_issue_comment(
    rest_client: RestClient,
    issue: int,
    body: str,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    media_type: str = "raw",
    access_token: str | None = None,
) -> dict[str, Any]:
    config = rest_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    result = rest_client.post(
        f"{repo_path(reference)}/issues/{issue}/comments",
        body={"body": body},
        description=f"Creating comment under issue {issue} for {reference.repository_name}",
        accept_header=media_type_accept_header(media_type),
        access_token=access_token,
        telemetry_event_name="NewIssueComment",
        telemetry_properties=telemetry_properties(reference, config),
    )
    return add_additional_properties(result, config, _comment_properties(reference, rest_client))


def set_issue_comment(
    rest_client: RestClient,
    comment_id: int,
    body: str,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    media_type: str = "raw",
    access_token: str | None = None,
) -> dict[str, Any]:
    config = rest_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    result = rest_client.patch(
        f"{repo_path(reference)}/issues/comments/{comment_id}",
        body={"body": body},
        description=f"Updating comment {comment_id} for {reference.repository_name}",
        accept_header=media_type_accept_header(media_type),
        access_token=access_token,
        telemetry_event_name="SetIssueComment",
        telemetry_properties=telemetry_properties(reference, config),
    )
    return add_additional_properties(result, config, _comment_properties(reference, rest_client))


def remove_issue_comment(
    rest_client: RestClient,
    comment_id: int,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    access_token: str | None = None,
) -> None:
    config = rest_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    rest_client.delete(
        f"{repo_path(reference)}/issues/comments/{comment_id}",
        description=f"Removing comment {comment_id} from {reference.repository_name}",
        access_token=access_token,
        telemetry_event_name="RemoveIssueComment",
        telemetry_properties=telemetry_properties(reference, config),
    )
