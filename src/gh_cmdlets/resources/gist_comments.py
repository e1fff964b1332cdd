"""Comments on gists."""

import logging
from typing import Any

from gh_cmdlets.github.rest import RestClient
from gh_cmdlets.resources.common import (
    add_additional_properties,
    media_type_accept_header,
    path_segment,
    telemetry_properties,
)

logger = logging.getLogger(__name__)


def _comment_properties(gist: str):
    def properties(item: dict[str, Any]) -> dict[str, Any]:
        return {"GistId": gist, "CommentId": item.get("id")}

    return properties


def get_gist_comments(
    rest_client: RestClient,
    gist: str,
    comment_id: int | None = None,
    media_type: str = "full",
    access_token: str | None = None,
) -> Any:
    """List the comments of a gist, or get one by id.

    Args:
        media_type: How comment bodies are returned: raw, text, html or full.
    """
    config = rest_client.config
    accept_header = media_type_accept_header(media_type)
    properties = telemetry_properties(None, config)
    base = f"gists/{path_segment(gist)}/comments"

    if comment_id is not None:
        result = rest_client.get(
            f"{base}/{comment_id}",
            description=f"Getting comment {comment_id} for gist {gist}",
            accept_header=accept_header,
            access_token=access_token,
            telemetry_event_name="GetGistComment",
            telemetry_properties=properties,
        )
        return add_additional_properties(result, config, _comment_properties(gist))

    results = rest_client.invoke_multiple_result(
        base,
        description=f"Getting comments for gist {gist}",
        accept_header=accept_header,
        access_token=access_token,
        telemetry_event_name="GetGistComments",
        telemetry_properties=properties,
    )
    return add_additional_properties(results, config, _comment_properties(gist))


def new_gist_comment(
    rest_client: RestClient,
    gist: str,
    body: str,
    media_type: str = "full",
    access_token: str | None = None,
) -> dict[str, Any]:
    config = rest_client.config
    result = rest_client.post(
        f"gists/{path_segment(gist)}/comments",
        body={"body": body},
        description=f"Creating comment on gist {gist}",
        accept_header=media_type_accept_header(media_type),
        access_token=access_token,
        telemetry_event_name="NewGistComment",
        telemetry_properties=telemetry_properties(None, config),
    )
    return add_additional_properties(result, config, _comment_properties(gist))


def set_gist_comment(
    rest_client: RestClient,
    gist: str,
    comment_id: int,
    body: str,
    media_type: str = "full",
    access_token: str | None = None,
) -> dict[str, Any]:
    config = rest_client.config
    result = rest_client.patch(
        f"gists/{path_segment(gist)}/comments/{comment_id}",
        body={"body": body},
        description=f"Updating comment {comment_id} on gist {gist}",
        accept_header=media_type_accept_header(media_type),
        access_token=access_token,
        telemetry_event_name="SetGistComment",
        telemetry_properties=telemetry_properties(None, config),
    )
    return add_additional_properties(result, config, _comment_properties(gist))


def remove_gist_comment(
    rest_client: RestClient,
    gist: str,
    comment_id: int,
    access_token: str | None = None,
) -> None:
    rest_client.delete(
        f"gists/{path_segment(gist)}/comments/{comment_id}",
        description=f"Removing comment {comment_id} from gist {gist}",
        access_token=access_token,
        telemetry_event_name="RemoveGistComment",
        telemetry_properties=telemetry_properties(None, rest_client.config),
    )
