"""Configuration loading, validation and the process-wide current configuration."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_API_HOST_NAME = "github.com"
DEFAULT_API_VERSION = "2022-11-28"


class Configuration(BaseModel):
    """Settings consumed by the invocation layer and the resource functions."""

    api_host_name: str = Field(
        default=DEFAULT_API_HOST_NAME,
        min_length=1,
        description="github.com or the hostname of a GitHub Enterprise server",
    )
    api_version: str = Field(
        default=DEFAULT_API_VERSION,
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        description="Value of the X-GitHub-Api-Version header (yyyy-MM-dd)",
    )
    web_request_timeout_sec: float = Field(
        default=0, ge=0, description="Per-request timeout; 0 uses the client default"
    )
    maximum_retries_when_result_not_ready: int = Field(
        default=30, ge=0, description="Retries for a GET answered with 202"
    )
    retry_delay_seconds: float = Field(
        default=30, ge=0, description="Delay between 202 retries; 0 disables retrying"
    )
    state_change_delay_seconds: float = Field(
        default=0, ge=0, description="Sleep after a successful state-changing request"
    )
    multi_request_progress_threshold: int = Field(
        default=10, ge=0, description="Page count from which progress is shown; 0 disables"
    )
    disable_smarter_objects: bool = False
    disable_pipeline_support: bool = False
    disable_telemetry: bool = False
    disable_pii_protection: bool = False
    log_request_body: bool = False
    suppress_no_token_warning: bool = False
    default_owner_name: str | None = None
    default_repository_name: str | None = None
    token_env: str = "GITHUB_TOKEN"

    @field_validator("api_host_name")
    @classmethod
    def validate_host_name(cls, v: str) -> str:
        """Reject values that carry a scheme or a path."""
        if "://" in v or "/" in v:
            msg = f"api_host_name must be a bare hostname, got '{v}'"
            raise ValueError(msg)
        return v.lower()

    @property
    def is_github_dot_com(self) -> bool:
        """True when targeting github.com rather than an enterprise server."""
        return self.api_host_name == DEFAULT_API_HOST_NAME


def load_config(path: Path) -> Configuration:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Validated Configuration object.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValidationError: If the config is invalid.
    """
    if not path.exists():
        msg = f"Config file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open() as f:
        raw_config: dict[str, Any] | None = yaml.safe_load(f)

    return Configuration.model_validate(raw_config or {})


def save_config(config: Configuration, path: Path) -> None:
    """Write configuration to a YAML file, omitting values left at their default."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        yaml.safe_dump(config.model_dump(exclude_defaults=True), f, sort_keys=True)


_current = Configuration()


def get_configuration() -> Configuration:
    """Return the process-wide configuration."""
    return _current


def set_configuration(**changes: Any) -> Configuration:
    """Validate and apply changes to the process-wide configuration.

    Args:
        **changes: Field names and their new values.

    Returns:
        The new current configuration.

    Raises:
        ValidationError: If a value is invalid. The current configuration is kept.
    """
    global _current
    unknown = set(changes) - set(Configuration.model_fields)
    if unknown:
        msg = f"Unknown configuration value(s): {', '.join(sorted(unknown))}"
        raise ValueError(msg)

    _current = Configuration.model_validate({**_current.model_dump(), **changes})
    logger.debug("Configuration updated: %s", ", ".join(sorted(changes)))
    return _current


def use_configuration(config: Configuration) -> None:
    """Replace the process-wide configuration, e.g. with one from load_config()."""
    global _current
    _current = config


def reset_configuration() -> Configuration:
    """Restore every value to its default."""
    global _current
    _current = Configuration()
    return _current
