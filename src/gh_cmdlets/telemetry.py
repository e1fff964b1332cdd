"""Telemetry sink for named events and exceptions.

Events are recorded in a bounded in-memory buffer and logged at DEBUG level.
Shipping them to a collector is left to the host application, which can drain
``events``; once the buffer is full the oldest events are dropped.
"""

import hashlib
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from gh_cmdlets.config import Configuration, get_configuration

logger = logging.getLogger(__name__)


@dataclass
class TelemetryEvent:
    """A single recorded event or exception."""

    name: str
    properties: dict[str, Any] = field(default_factory=dict)
    metrics: dict[str, float] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    exception: BaseException | None = None


class TelemetryClient:
    """Collects telemetry events unless disabled by configuration."""

    MAX_EVENTS = 1000

    def __init__(self, config: Configuration | None = None, max_events: int = MAX_EVENTS) -> None:
        """Initialize telemetry client.

        Args:
            config: Configuration to consult. If None, the process-wide one is
                read on every call.
            max_events: Number of most recent events kept in ``events``.
        """
        self._config = config
        self.events: deque[TelemetryEvent] = deque(maxlen=max_events)

    @property
    def enabled(self) -> bool:
        config = self._config or get_configuration()
        return not config.disable_telemetry

    def record_event(
        self,
        name: str,
        properties: dict[str, Any] | None = None,
        metrics: dict[str, float] | None = None,
    ) -> None:
        """Record a named event.

        Args:
            name: Event name, e.g. "GetBranches".
            properties: String-like dimensions of the event.
            metrics: Numeric measurements of the event.
        """
        if not self.enabled:
            return

        event = TelemetryEvent(name=name, properties=dict(properties or {}), metrics=dict(metrics or {}))
        self.events.append(event)
        logger.debug("Telemetry event %s: properties=%s metrics=%s", name, event.properties, event.metrics)

    def record_exception(
        self,
        exc: BaseException,
        bucket: str | None = None,
        properties: dict[str, Any] | None = None,
    ) -> None:
        """Record an exception, grouped under an optional bucket name."""
        if not self.enabled:
            return

        name = bucket or type(exc).__name__
        event = TelemetryEvent(name=name, properties=dict(properties or {}), exception=exc)
        self.events.append(event)
        logger.debug("Telemetry exception %s: %s", name, type(exc).__name__)

    def clear(self) -> None:
        self.events.clear()


def get_pii_safe_string(value: str | None, config: Configuration | None = None) -> str | None:
    """Hash a value that may identify a user, unless PII protection is disabled.

    Args:
        value: Owner name, repository name or similar.
        config: Configuration to consult. Defaults to the process-wide one.

    Returns:
        The SHA-256 hex digest of the value, or the value itself when PII
        protection is disabled or the value is empty.
    """
    config = config or get_configuration()
    if not value or config.disable_pii_protection:
        return value
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


_telemetry = TelemetryClient()


def get_telemetry() -> TelemetryClient:
    """Return the process-wide telemetry client."""
    return _telemetry
