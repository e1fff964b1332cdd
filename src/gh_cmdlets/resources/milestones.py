"""Repository milestones."""

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
    repo_path,
    telemetry_properties,
    validate_choice,
    with_query,
)

logger = logging.getLogger(__name__)

STATE_CHOICES = ("open", "closed", "all")
SORT_CHOICES = ("due_on", "completeness")
DIRECTION_CHOICES = ("asc", "desc")


def format_due_on(value: datetime | date | str) -> str:
    """Format a due date as midnight UTC of its date.

    The API stores only the date, and applies a time zone offset to any time
    given, which can move the milestone to the previous day.

    Raises:
        RequestValidationError: If a string is not an ISO-8601 date.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            msg = f"Invalid due_on '{value}'. Expected an ISO-8601 date such as 2024-06-30."
            raise RequestValidationError(msg) from e
    return value.strftime("%Y-%m-%dT00:00:00Z")


def _milestone_properties(reference: RepositoryReference, rest_client: RestClient):
    repository_url = join_github_uri(reference.owner_name, reference.repository_name, rest_client.config)

    def properties(item: dict[str, Any]) -> dict[str, Any]:
        return {
            "RepositoryUrl": repository_url,
            "MilestoneId": item.get("id"),
            "MilestoneNumber": item.get("number"),
        }

    return properties


def _milestone_body(
    title: str | None,
    state: str | None,
    description: str | None,
    due_on: datetime | date | str | None,
) -> dict[str, Any]:
    body: dict[str, Any] = {}
    if title is not None:
        body["title"] = title
    if state is not None:
        body["state"] = validate_choice("state", state, ("open", "closed"))
    if description is not None:
        body["description"] = description
    if due_on is not None:
        body["due_on"] = format_due_on(due_on)
    return body


def get_milestones(
    rest_client: RestClient,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    milestone: int | None = None,
    state: str | None = None,
    sort: str | None = None,
    direction: str | None = None,
    access_token: str | None = None,
) -> Any:
    """List the milestones of a repository, or get one by number.

    Raises:
        RequestValidationError: If a choice is invalid or filters are
            combined with ``milestone``.
    """
    state = validate_choice("state", state, STATE_CHOICES)
    sort = validate_choice("sort", sort, SORT_CHOICES)
    direction = validate_choice("direction", direction, DIRECTION_CHOICES)
    if milestone is not None and (state or sort or direction):
        raise RequestValidationError("state, sort and direction cannot be used with a milestone number.")

    config = rest_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    properties = telemetry_properties(reference, config)
    properties_fn = _milestone_properties(reference, rest_client)

    if milestone is not None:
        result = rest_client.get(
            f"{repo_path(reference)}/milestones/{milestone}",
            description=f"Getting milestone {milestone} for {reference.repository_name}",
            access_token=access_token,
            telemetry_event_name="GetMilestone",
            telemetry_properties=properties,
        )
        return add_additional_properties(result, config, properties_fn)

    results = rest_client.invoke_multiple_result(
        with_query(f"{repo_path(reference)}/milestones", state=state, sort=sort, direction=direction),
        description=f"Getting milestones for {reference.repository_name}",
        access_token=access_token,
        telemetry_event_name="GetMilestones",
        telemetry_properties=properties,
    )
    return add_additional_properties(results, config, properties_fn)


def new_milestone(
    rest_client: RestClient,
    title: str,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    state: str | None = None,
    description: str | None = None,
    due_on: datetime | date | str | None = None,
    access_token: str | None = None,
) -> dict[str, Any]:
    config = rest_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    result = rest_client.post(
        f"{repo_path(reference)}/milestones",
        body=_milestone_body(title, state, description, due_on),
        description=f"Creating milestone {title} for {reference.repository_name}",
        access_token=access_token,
        telemetry_event_name="NewMilestone",
        telemetry_properties=telemetry_properties(reference, config),
    )
    return add_additional_properties(result, config, _milestone_properties(reference, rest_client))


def set_milestone(
    rest_client: RestClient,
    milestone: int,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    title: str | None = None,
    state: str | None = None,
    description: str | None = None,
    due_on: datetime | date | str | None = None,
    access_token: str | None = None,
) -> dict[str, Any]:
    body = _milestone_body(title, state, description, due_on)
    if not body:
        raise RequestValidationError("Nothing to change for milestone.")

    config = rest_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    result = rest_client.patch(
        f"{repo_path(reference)}/milestones/{milestone}",
        body=body,
        description=f"Updating milestone {milestone} for {reference.repository_name}",
        access_token=access_token,
        telemetry_event_name="SetMilestone",
        telemetry_properties=telemetry_properties(reference, config),
    )
    return add_additional_properties(result, config, _milestone_properties(reference, rest_client))


def remove_milestone(
    rest_client: RestClient,
    milestone: int,
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
        f"{repo_path(reference)}/milestones/{milestone}",
        description=f"Deleting milestone {milestone} from {reference.repository_name}",
        access_token=access_token,
        telemetry_event_name="RemoveMilestone",
        telemetry_properties=telemetry_properties(reference, config),
    )
