"""Helpers shared by the resource functions."""

from collections.abc import Callable, Iterable
from datetime import UTC, date, datetime
from typing import Any, TypeVar
from urllib.parse import quote, urlencode

from gh_cmdlets.config import Configuration
from gh_cmdlets.github.constants import MEDIA_TYPES
from gh_cmdlets.github.http import RequestValidationError
from gh_cmdlets.github.uri import RepositoryReference
from gh_cmdlets.telemetry import get_pii_safe_string

T = TypeVar("T", dict[str, Any], list[dict[str, Any]])


def telemetry_properties(
    reference: RepositoryReference | None,
    config: Configuration,
    **extra: Any,
) -> dict[str, Any]:
    """Telemetry properties for a resource call, hashing owner and repository."""
    properties: dict[str, Any] = {}
    if reference is not None:
        properties["OwnerName"] = get_pii_safe_string(reference.owner_name, config)
        properties["RepositoryName"] = get_pii_safe_string(reference.repository_name, config)
    properties.update({key: value for key, value in extra.items() if value is not None})
    return properties


def repo_path(reference: RepositoryReference) -> str:
    return f"repos/{reference.owner_name}/{reference.repository_name}"


def path_segment(value: str | int) -> str:
    """Quote a value for use as one URI path segment (keeps '/' for branch names)."""
    return quote(str(value), safe="/")


def with_query(uri_fragment: str, **params: Any) -> str:
    """Append the non-None parameters as a query string."""
    present = {key: value for key, value in params.items() if value is not None}
    if not present:
        return uri_fragment
    return f"{uri_fragment}?{urlencode(present)}"


def format_timestamp(value: datetime | date | str) -> str:
    """Format a value for GitHub's ISO-8601 query and body parameters."""
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    return value.strftime("%Y-%m-%dT00:00:00Z")


def validate_choice(name: str, value: str | None, choices: Iterable[str]) -> str | None:
    """Lower-case a value and check it against the allowed choices.

    Raises:
        RequestValidationError: If the value is not one of the choices.
    """
    if value is None:
        return None
    allowed = tuple(choices)
    normalized = value.lower()
    if normalized not in allowed:
        msg = f"Invalid value '{value}' for {name}. Expected one of: {', '.join(allowed)}"
        raise RequestValidationError(msg)
    return normalized


def media_type_accept_header(media_type: str) -> str:
    """Accept header selecting how body text is returned (raw, text, html or full)."""
    normalized = validate_choice("media_type", media_type, MEDIA_TYPES)
    assert normalized is not None
    return MEDIA_TYPES[normalized]


def add_additional_properties(
    items: T,
    config: Configuration,
    properties: Callable[[dict[str, Any]], dict[str, Any]],
) -> T:
    """Decorate one result or a list of results with convenience fields.

    Does nothing when ``disable_pipeline_support`` is set. Non-dict items
    (e.g. raw text) are left untouched.
    """
    if config.disable_pipeline_support:
        return items

    targets = items if isinstance(items, list) else [items]
    for item in targets:
        if isinstance(item, dict):
            item.update({key: value for key, value in properties(item).items() if value is not None})
    return items
