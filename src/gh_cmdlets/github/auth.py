"""GitHub authentication module.

Resolves the access token used for a request from, in order: an explicit
value, the session token set with ``set_authentication``, the environment
variable named by ``Configuration.token_env``, and the GitHub CLI. Requests
without any token are sent anonymously.
"""

import logging
import os
import re
import subprocess

from gh_cmdlets.config import Configuration, get_configuration

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when a token is required but missing, or has an invalid format."""


_session_token: str | None = None


def set_authentication(token: str) -> None:
    """Cache a token for every later request of this process.

    Raises:
        AuthenticationError: If the token format is invalid.
    """
    global _session_token
    _session_token = GitHubAuth(token).token
    logger.info("Access token cached for this session")


def clear_authentication() -> None:
    """Forget the session token."""
    global _session_token
    _session_token = None


def _get_gh_cli_token() -> str | None:
    """Try to get token from GitHub CLI.

    Returns:
        Token from `gh auth token` or None if not available.
    """
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
        )
        if result.returncode == 0:
            token = result.stdout.strip()
            if token:
                return token
        else:
            logger.debug("gh CLI returned non-zero exit code (%d)", result.returncode)
    except FileNotFoundError:
        logger.debug("gh CLI not found")
    except subprocess.TimeoutExpired:
        logger.debug("gh CLI command timed out after 5 seconds")
    return None


class GitHubAuth:
    """GitHub authentication manager.

    Token prefix formats:
    - ghp_: Personal access token (classic)
    - gho_: OAuth access token
    - ghu_: User-to-server token
    - ghs_: Server-to-server token
    - github_pat_: Fine-grained personal access token
    - Classic tokens: 40 character hex string (no prefix)
    """

    VALID_PREFIXES = ("ghp_", "gho_", "ghu_", "ghs_", "github_pat_")

    CLASSIC_TOKEN_PATTERN = re.compile(r"^[a-f0-9]{40}$")

    def __init__(
        self,
        token: str | None = None,
        required: bool = False,
        config: Configuration | None = None,
    ) -> None:
        """Initialize GitHub authentication.

        Args:
            token: Explicit token. If None, the ambient sources are tried.
            required: Raise instead of falling back to anonymous access.
            config: Configuration naming the token environment variable.

        Raises:
            AuthenticationError: If the token is required but missing, or invalid.
        """
        config = config or get_configuration()
        loaded_token: str | None = None
        token_source: str | None = None

        if token:
            loaded_token, token_source = token, "explicit parameter"
        elif _session_token:
            loaded_token, token_source = _session_token, "session"
        elif os.environ.get(config.token_env):
            loaded_token = os.environ[config.token_env]
            token_source = f"{config.token_env} environment variable"
        else:
            loaded_token = _get_gh_cli_token()
            if loaded_token:
                token_source = "gh CLI"

        if not loaded_token:
            if required:
                raise AuthenticationError(
                    f"GitHub token not found. Pass a token, call set_authentication(), "
                    f"set the {config.token_env} environment variable, "
                    "or authenticate with `gh auth login`."
                )
            self._token: str | None = None
            return

        logger.debug("Using GitHub token from %s", token_source)
        self._token = loaded_token
        self._validate_token()

    def _validate_token(self) -> None:
        """Validate token format.

        Raises:
            AuthenticationError: If token format is invalid.
        """
        token = self._token
        if not token:
            raise AuthenticationError("Token is empty")

        has_valid_prefix = any(token.startswith(prefix) for prefix in self.VALID_PREFIXES)
        is_classic = bool(self.CLASSIC_TOKEN_PATTERN.match(token))

        if not has_valid_prefix and not is_classic:
            raise AuthenticationError(
                f"Invalid token format. Expected prefix {self.VALID_PREFIXES} "
                "or 40-character hex string (classic token)"
            )

        if has_valid_prefix and len(token) < 20:
            raise AuthenticationError("Token appears too short to be valid")

    @property
    def token(self) -> str | None:
        """The validated token, or None for anonymous access."""
        return self._token

    @property
    def is_anonymous(self) -> bool:
        return self._token is None

    def get_authorization_header(self) -> dict[str, str]:
        """Get the Authorization header for API requests.

        Returns:
            Dictionary with the Authorization header, empty when anonymous.
        """
        if self._token is None:
            return {}
        return {"Authorization": f"token {self._token}"}


def load_github_token(token: str | None = None) -> str:
    """Load and validate a GitHub token, requiring one to be found.

    Raises:
        AuthenticationError: If token is missing or invalid.
    """
    auth = GitHubAuth(token, required=True)
    return auth.token  # type: ignore[return-value]
