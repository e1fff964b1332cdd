"""Conversion of raw response content into native Python objects.

The output is the plain JSON tree (dict, list, str, int, float, bool, None)
with ISO-8601 strings under well-known date keys upgraded to aware UTC
``datetime`` values. Content that is not JSON is returned as text.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Any

from gh_cmdlets.github.constants import DATE_PROPERTY_NAMES

logger = logging.getLogger(__name__)


class _CaseInsensitiveDuplicateKeyError(ValueError):
    """Raised while parsing when an object has keys that differ only by case."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Duplicate key differing only by case: {key}")


def _reject_case_duplicates(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    seen: set[str] = set()
    for key, _ in pairs:
        folded = key.casefold()
        if folded in seen:
            raise _CaseInsensitiveDuplicateKeyError(key)
        seen.add(folded)
    return dict(pairs)


def parse_json_content(text: str) -> Any:
    """Parse JSON text, falling back to the text itself.

    Args:
        text: Decoded response body.

    Returns:
        The parsed JSON tree, or ``text`` unchanged when it is not JSON or
        contains an object with keys differing only by case.
    """
    try:
        return json.loads(text, object_pairs_hook=_reject_case_duplicates)
    except _CaseInsensitiveDuplicateKeyError as e:
        logger.warning(
            "Response contains the key '%s' more than once (differing only by case). "
            "Returning the raw content instead of an object.",
            e.key,
        )
        return text
    except json.JSONDecodeError:
        logger.debug("Response content is not JSON; returning it as text")
        return text


def parse_date(value: str) -> datetime | None:
    """Parse a GitHub ISO-8601 timestamp (e.g. "2025-01-15T10:30:00Z") to UTC."""
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        logger.debug("Unable to convert '%s' to a datetime: %s", value, e)
        return None
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)


def convert_to_smarter_object(value: Any) -> Any:
    """Return a copy of a JSON tree with date-bearing fields as datetimes.

    Only string values under keys in ``DATE_PROPERTY_NAMES`` are touched;
    values that fail to parse are kept as strings.
    """
    if isinstance(value, list):
        return [convert_to_smarter_object(item) for item in value]

    if not isinstance(value, dict):
        return value

    converted: dict[str, Any] = {}
    for key, item in value.items():
        if key in DATE_PROPERTY_NAMES and isinstance(item, str) and item.strip():
            parsed = parse_date(item)
            converted[key] = parsed if parsed is not None else item
        else:
            converted[key] = convert_to_smarter_object(item)
    return converted


def _is_integer_sequence(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(item, int) and not isinstance(item, bool) for item in value)
    )


def materialize(content: bytes | str | None, smarter_objects: bool = True) -> Any:
    """Convert a raw response body into the most structured value possible.

    Never raises on ambiguous input.

    Args:
        content: Raw response bytes (decoded as UTF-8) or already-decoded text.
        smarter_objects: Upgrade date-bearing fields to datetimes.

    Returns:
        None for an empty body, the JSON tree, or the raw text.
    """
    if not content:
        return None

    text = content.decode("utf-8", errors="replace") if isinstance(content, bytes) else content
    if not text.strip():
        return None

    parsed = parse_json_content(text)
    if not smarter_objects or isinstance(parsed, str) or _is_integer_sequence(parsed):
        return parsed

    return convert_to_smarter_object(parsed)
