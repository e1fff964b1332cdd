"""Owner and repository resolution from URLs, explicit values and defaults."""

import logging
import re
from dataclasses import dataclass
from typing import NamedTuple

from gh_cmdlets.config import Configuration, get_configuration

logger = logging.getLogger(__name__)


class RepositoryResolutionError(ValueError):
    """Raised when an owner or repository cannot be determined."""


class RepositoryReference(NamedTuple):
    """Owner and repository names; an absent part is an empty string."""

    owner_name: str
    repository_name: str


@dataclass(frozen=True)
class RepositoryElementsParams:
    """Parameters a caller received for identifying a repository.

    ``None`` means the caller did not supply the value.
    """

    uri: str | None = None
    owner_name: str | None = None
    repository_name: str | None = None


def _uri_patterns(host_name: str) -> list[re.Pattern[str]]:
    host = re.escape(host_name)
    # Enterprise API form first: the web form would read it as owner "api"
    return [
        re.compile(rf"^https?://{host}/api/v3/repos/([^/?#]+)/?([^/?#]+)?(?:[/?#].*)?$", re.IGNORECASE),
        re.compile(rf"^https?://api\.{host}/repos/([^/?#]+)/?([^/?#]+)?(?:[/?#].*)?$", re.IGNORECASE),
        re.compile(rf"^https?://(?:www\.)?{host}/([^/?#]+)/?([^/?#]+)?(?:[/?#].*)?$", re.IGNORECASE),
    ]


def split_github_uri(uri: str, config: Configuration | None = None) -> RepositoryReference:
    """Extract the owner and repository names from a GitHub URL.

    Recognizes ``https://<host>/<owner>/<repo>``,
    ``https://api.<host>/repos/<owner>/<repo>`` and, for enterprise servers,
    ``https://<host>/api/v3/repos/<owner>/<repo>``.

    Args:
        uri: Web or API URL.
        config: Configuration providing the host name.

    Returns:
        The reference; parts that are not present are empty strings.
    """
    config = config or get_configuration()
    for pattern in _uri_patterns(config.api_host_name):
        match = pattern.match(uri.strip())
        if match:
            owner, repository = match.groups()
            return RepositoryReference(owner, repository or "")

    logger.debug("'%s' is not a URL for %s", uri, config.api_host_name)
    return RepositoryReference("", "")


def join_github_uri(owner_name: str, repository_name: str, config: Configuration | None = None) -> str:
    """Build the web URL of a repository on the configured host."""
    config = config or get_configuration()
    return f"https://{config.api_host_name}/{owner_name}/{repository_name}"


def resolve_parameter_with_default_configuration_value(
    name: str,
    value: str | None,
    config_value_name: str,
    non_empty_string_required: bool = True,
    config: Configuration | None = None,
) -> str:
    """Use an explicit value, or fall back to a configured default.

    Args:
        name: Parameter name used in the error message.
        value: The caller's value; None when not supplied.
        config_value_name: Configuration field holding the default.
        non_empty_string_required: Raise when neither yields a non-empty value.
        config: Configuration to consult.

    Raises:
        RepositoryResolutionError: If a value is required and none was found.
    """
    config = config or get_configuration()
    resolved = value if value is not None else getattr(config, config_value_name)
    if non_empty_string_required and not resolved:
        msg = (
            f"A value must be provided for {name} either as a parameter, or as a "
            f"default configuration value ({config_value_name}) via set_configuration()."
        )
        logger.error(msg)
        raise RepositoryResolutionError(msg)
    return resolved or ""


def resolve_repository_elements(
    params: RepositoryElementsParams,
    disable_validation: bool = False,
    config: Configuration | None = None,
) -> RepositoryReference:
    """Determine the owner and repository a request targets.

    Args:
        params: What the caller supplied.
        disable_validation: Allow empty parts instead of raising.
        config: Configuration providing host name and defaults.

    Returns:
        The resolved reference.

    Raises:
        RepositoryResolutionError: If a URI is combined with an owner or
            repository name, or a required part is missing.
    """
    config = config or get_configuration()
    validate = not disable_validation

    if params.uri is not None and (params.owner_name is not None or params.repository_name is not None):
        msg = "Cannot specify a Uri AND individual OwnerName/RepositoryName. Please choose one or the other."
        logger.error(msg)
        raise RepositoryResolutionError(msg)

    if params.uri is not None:
        reference = split_github_uri(params.uri, config)
        for part, label in ((reference.owner_name, "Owner Name"), (reference.repository_name, "Repository Name")):
            if validate and not part:
                msg = f"Provided Uri does not contain enough information: {label}."
                logger.error(msg)
                raise RepositoryResolutionError(msg)
        return reference

    return RepositoryReference(
        resolve_parameter_with_default_configuration_value(
            "OwnerName", params.owner_name, "default_owner_name", validate, config
        ),
        resolve_parameter_with_default_configuration_value(
            "RepositoryName", params.repository_name, "default_repository_name", validate, config
        ),
    )


def resolve_owner_name(
    owner_name: str | None = None,
    uri: str | None = None,
    config: Configuration | None = None,
) -> str:
    """Determine the owner for calls scoped to a user or organization only."""
    config = config or get_configuration()
    if uri is not None and owner_name is not None:
        msg = "Cannot specify a Uri AND an OwnerName. Please choose one or the other."
        logger.error(msg)
        raise RepositoryResolutionError(msg)

    if uri is not None:
        owner = split_github_uri(uri, config).owner_name
        if not owner:
            msg = "Provided Uri does not contain enough information: Owner Name."
            logger.error(msg)
            raise RepositoryResolutionError(msg)
        return owner

    return resolve_parameter_with_default_configuration_value(
        "OwnerName", owner_name, "default_owner_name", True, config
    )
