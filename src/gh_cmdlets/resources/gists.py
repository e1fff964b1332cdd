"""Gists, their files, forks, history and stars."""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from gh_cmdlets.github.http import GitHubHTTPError, RequestValidationError
from gh_cmdlets.github.rest import RestClient
from gh_cmdlets.resources.common import (
    add_additional_properties,
    format_timestamp,
    path_segment,
    telemetry_properties,
    with_query,
)
from gh_cmdlets.telemetry import get_pii_safe_string

logger = logging.getLogger(__name__)


def _gist_properties(gist: str | None = None):
    def properties(item: dict[str, Any]) -> dict[str, Any]:
        # History entries carry a version, not the gist id
        return {"GistId": gist if "version" in item and gist else item.get("id", gist)}

    return properties


def get_gists(
    rest_client: RestClient,
    gist: str | None = None,
    sha: str | None = None,
    forks: bool = False,
    commits: bool = False,
    user_name: str | None = None,
    public: bool = False,
    starred: bool = False,
    since: datetime | date | str | None = None,
    access_token: str | None = None,
) -> Any:
    """Get one gist, or list gists.

    Without arguments, lists the gists of the authenticated user.

    Args:
        gist: Gist id. Combine with ``sha`` for a revision, ``forks`` to list
            its forks or ``commits`` to list its history.
        user_name: List the public gists of this user.
        public: List all public gists.
        starred: List the gists starred by the authenticated user.
        since: Only gists updated at or after this time (list forms only).

    Returns:
        A single gist when ``gist`` is given without ``forks``/``commits``,
        otherwise a list.

    Raises:
        RequestValidationError: For combinations that select more than one form.
    """
    config = rest_client.config
    selected = [bool(gist), bool(user_name), public, starred]
    if sum(selected) > 1:
        raise RequestValidationError("Specify only one of gist, user_name, public or starred.")
    if not gist and (sha or forks or commits):
        raise RequestValidationError("sha, forks and commits require a gist id.")
    if sum([bool(sha), forks, commits]) > 1:
        raise RequestValidationError("Specify only one of sha, forks or commits.")

    properties = telemetry_properties(None, config, Public=public, Starred=starred)
    since_value = format_timestamp(since) if since is not None else None

    if gist:
        base = f"gists/{path_segment(gist)}"
        if forks or commits:
            suffix = "forks" if forks else "commits"
            results = rest_client.invoke_multiple_result(
                f"{base}/{suffix}",
                description=f"Getting {suffix} of gist {gist}",
                access_token=access_token,
                telemetry_event_name=f"GetGist{suffix.capitalize()}",
                telemetry_properties=properties,
            )
            return add_additional_properties(results, config, _gist_properties(gist))

        result = rest_client.get(
            f"{base}/{path_segment(sha)}" if sha else base,
            description=f"Getting gist {gist}",
            access_token=access_token,
            telemetry_event_name="GetGist",
            telemetry_properties=properties,
        )
        return add_additional_properties(result, config, _gist_properties(gist))

    if user_name:
        uri_fragment, description = f"users/{path_segment(user_name)}/gists", f"Getting public gists of {user_name}"
        properties["UserName"] = get_pii_safe_string(user_name, config)
    elif public:
        uri_fragment, description = "gists/public", "Getting public gists"
    elif starred:
        uri_fragment, description = "gists/starred", "Getting starred gists for current authenticated user"
    else:
        uri_fragment, description = "gists", "Getting gists for current authenticated user"

    results = rest_client.invoke_multiple_result(
        with_query(uri_fragment, since=since_value),
        description=description,
        access_token=access_token,
        telemetry_event_name="GetGist",
        telemetry_properties=properties,
    )
    return add_additional_properties(results, config, _gist_properties())


def new_gist(
    rest_client: RestClient,
    files: dict[str, str] | None = None,
    paths: list[Path] | None = None,
    description: str | None = None,
    public: bool = False,
    access_token: str | None = None,
) -> dict[str, Any]:
    """Create a gist from file contents and/or local files.

    Raises:
        RequestValidationError: If no file is given.
    """
    gist_files = {name: {"content": content} for name, content in (files or {}).items()}
    for path in paths or []:
        gist_files[Path(path).name] = {"content": Path(path).read_text(encoding="utf-8")}

    if not gist_files:
        raise RequestValidationError("A gist needs at least one file.")

    body: dict[str, Any] = {"files": gist_files, "public": public}
    if description is not None:
        body["description"] = description

    config = rest_client.config
    result = rest_client.post(
        "gists",
        body=body,
        description="Creating a new gist",
        access_token=access_token,
        telemetry_event_name="NewGist",
        telemetry_properties=telemetry_properties(None, config, Public=public),
    )
    return add_additional_properties(result, config, _gist_properties())


def set_gist(
    rest_client: RestClient,
    gist: str,
    description: str | None = None,
    update: dict[str, dict[str, str]] | None = None,
    delete: list[str] | None = None,
    access_token: str | None = None,
) -> dict[str, Any]:
    """Edit the description and files of a gist.

    Args:
        update: File name to ``{"content": ...}`` and/or ``{"filename": ...}``.
        delete: Names of files to remove.

    Raises:
        RequestValidationError: If a file is both updated and deleted, or
            nothing would change.
    """
    update = update or {}
    delete = delete or []
    conflicting = set(update) & set(delete)
    if conflicting:
        msg = f"Cannot update and delete the same file(s): {', '.join(sorted(conflicting))}"
        raise RequestValidationError(msg)

    files: dict[str, Any] = {name: dict(changes) for name, changes in update.items()}
    files.update({name: None for name in delete})

    body: dict[str, Any] = {}
    if description is not None:
        body["description"] = description
    if files:
        body["files"] = files
    if not body:
        raise RequestValidationError("Nothing to change: pass a description, files to update or files to delete.")

    config = rest_client.config
    result = rest_client.patch(
        f"gists/{path_segment(gist)}",
        body=body,
        description=f"Updating gist {gist}",
        access_token=access_token,
        telemetry_event_name="SetGist",
        telemetry_properties=telemetry_properties(None, config),
    )
    return add_additional_properties(result, config, _gist_properties(gist))


def set_gist_file(
    rest_client: RestClient,
    gist: str,
    file_name: str,
    content: str,
    access_token: str | None = None,
) -> dict[str, Any]:
    """Add a file to a gist, or replace the content of an existing one."""
    return set_gist(rest_client, gist, update={file_name: {"content": content}}, access_token=access_token)


add_gist_file = set_gist_file


def rename_gist_file(
    rest_client: RestClient,
    gist: str,
    file_name: str,
    new_name: str,
    access_token: str | None = None,
) -> dict[str, Any]:
    return set_gist(rest_client, gist, update={file_name: {"filename": new_name}}, access_token=access_token)


def remove_gist_file(
    rest_client: RestClient,
    gist: str,
    file_names: list[str],
    access_token: str | None = None,
) -> dict[str, Any]:
    return set_gist(rest_client, gist, delete=file_names, access_token=access_token)


def remove_gist(rest_client: RestClient, gist: str, access_token: str | None = None) -> None:
    rest_client.delete(
        f"gists/{path_segment(gist)}",
        description=f"Removing gist {gist}",
        access_token=access_token,
        telemetry_event_name="RemoveGist",
        telemetry_properties=telemetry_properties(None, rest_client.config),
    )


def copy_gist(rest_client: RestClient, gist: str, access_token: str | None = None) -> dict[str, Any]:
    """Fork a gist into the authenticated user's account."""
    config = rest_client.config
    result = rest_client.post(
        f"gists/{path_segment(gist)}/forks",
        description=f"Forking gist {gist}",
        access_token=access_token,
        telemetry_event_name="CopyGist",
        telemetry_properties=telemetry_properties(None, config),
    )
    return add_additional_properties(result, config, _gist_properties())


def add_gist_star(rest_client: RestClient, gist: str, access_token: str | None = None) -> None:
    rest_client.put(
        f"gists/{path_segment(gist)}/star",
        description=f"Starring gist {gist}",
        access_token=access_token,
        telemetry_event_name="AddGistStar",
        telemetry_properties=telemetry_properties(None, rest_client.config),
    )


def remove_gist_star(rest_client: RestClient, gist: str, access_token: str | None = None) -> None:
    rest_client.delete(
        f"gists/{path_segment(gist)}/star",
        description=f"Unstarring gist {gist}",
        access_token=access_token,
        telemetry_event_name="RemoveGistStar",
        telemetry_properties=telemetry_properties(None, rest_client.config),
    )


def set_gist_star(rest_client: RestClient, gist: str, star: bool, access_token: str | None = None) -> None:
    if star:
        add_gist_star(rest_client, gist, access_token)
    else:
        remove_gist_star(rest_client, gist, access_token)


def test_gist_star(rest_client: RestClient, gist: str, access_token: str | None = None) -> bool:
    """Whether the authenticated user has starred a gist."""
    try:
        rest_client.get(
            f"gists/{path_segment(gist)}/star",
            description=f"Checking if gist {gist} is starred",
            access_token=access_token,
            telemetry_event_name="TestGistStar",
            telemetry_properties=telemetry_properties(None, rest_client.config),
            expected_status_codes=frozenset({404}),
        )
    except GitHubHTTPError as e:
        if e.status_code == 404:
            return False
        raise
    return True


test_gist_star.__test__ = False  # type: ignore[attr-defined]
