"""GitHub HTTP request executor.

Synchronous HTTP client for the GitHub API that issues one logical request,
retries GET requests whose result is not ready yet (202), composes readable
errors, and materializes the response body.
"""

import json
import logging
import re
import tempfile
import time
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from gh_cmdlets import __version__
from gh_cmdlets.config import Configuration, get_configuration
from gh_cmdlets.github.auth import GitHubAuth
from gh_cmdlets.github.constants import (
    API_VERSION_HEADER,
    DEFAULT_ACCEPT_HEADER,
    DEFAULT_IN_FILE_CONTENT_TYPE,
    DEFAULT_JSON_BODY_CONTENT_TYPE,
    EXTENSION_TO_CONTENT_TYPE,
    NOT_FOUND_EXPLANATION,
    REQUEST_ID_HEADER,
    STATE_CHANGING_METHODS,
    VALID_METHODS,
)
from gh_cmdlets.github.materialize import materialize
from gh_cmdlets.telemetry import TelemetryClient, get_telemetry

logger = logging.getLogger(__name__)

USER_AGENT = f"gh-cmdlets/{__version__}"


class GitHubError(Exception):
    """Base exception for errors raised by the invocation layer."""


class RequestValidationError(GitHubError, ValueError):
    """Raised before any network call when a request is malformed."""


class ResultNotReadyError(GitHubError):
    """Raised when a GET keeps answering 202 after the configured retries."""

    def __init__(self, url: str, retries: int) -> None:
        self.url = url
        self.retries = retries
        super().__init__(
            f"Request still not ready after {retries} retries: {url}. "
            "Retry limit has been reached as per configuration value "
            "'maximum_retries_when_result_not_ready'."
        )


class GitHubHTTPError(GitHubError):
    """Raised when a request fails at the HTTP or transport level.

    The message is a multi-line narrative meant for display: summary,
    status line, API message and documentation link, details, raw content
    when the body is not JSON, a note for 404, and the request id.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        status_description: str | None = None,
        api_message: str | None = None,
        documentation_url: str | None = None,
        details: Any = None,
        request_id: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.status_description = status_description
        self.api_message = api_message
        self.documentation_url = documentation_url
        self.details = details
        self.request_id = request_id
        super().__init__(message)

    @classmethod
    def from_response(cls, response: httpx.Response, summary: str) -> "GitHubHTTPError":
        """Build the error for a response with a 4xx/5xx status code."""
        lines = [summary, f"{response.status_code} | {response.reason_phrase}"]
        api_message = documentation_url = details = None

        text = response.text
        try:
            payload = json.loads(text) if text else None
        except json.JSONDecodeError:
            payload = None

        if isinstance(payload, dict) and "message" in payload:
            api_message = payload.get("message")
            documentation_url = payload.get("documentation_url")
            lines.append(" | ".join(str(part) for part in (api_message, documentation_url) if part))
            details = payload.get("details") or payload.get("errors")
            if details:
                items = details if isinstance(details, list) else [details]
                lines.extend(_format_error_detail(item) for item in items)
        elif text:
            lines.append(text)

        if response.status_code == 404:
            lines.append(NOT_FOUND_EXPLANATION)

        request_id = response.headers.get(REQUEST_ID_HEADER)
        if request_id:
            lines.append(f"RequestId: {request_id}")

        return cls(
            "\n".join(lines),
            status_code=response.status_code,
            status_description=response.reason_phrase,
            api_message=api_message,
            documentation_url=documentation_url,
            details=details,
            request_id=request_id,
        )

    @classmethod
    def from_transport_error(cls, error: httpx.RequestError, summary: str) -> "GitHubHTTPError":
        """Build the error for a connection failure, timeout or redirect loop."""
        return cls(f"{summary}\n{type(error).__name__}: {error}")


def _format_error_detail(item: Any) -> str:
    if isinstance(item, dict):
        return "  " + ", ".join(f"{key}: {value}" for key, value in item.items())
    return f"  {item}"


class RateLimitInfo(BaseModel):
    """GitHub API rate limit information from response headers."""

    limit: int
    remaining: int
    reset: datetime
    used: int
    resource: str = "core"

    @classmethod
    def from_headers(cls, headers: httpx.Headers) -> Optional["RateLimitInfo"]:
        """Extract rate limit info from response headers.

        Args:
            headers: HTTP response headers.

        Returns:
            RateLimitInfo if headers present, None otherwise.
        """
        if "x-ratelimit-limit" not in headers:
            return None

        reset_timestamp = int(headers.get("x-ratelimit-reset", "0"))
        reset_dt = datetime.fromtimestamp(reset_timestamp, tz=UTC)

        return cls(
            limit=int(headers.get("x-ratelimit-limit", "0")),
            remaining=int(headers.get("x-ratelimit-remaining", "0")),
            reset=reset_dt,
            used=int(headers.get("x-ratelimit-used", "0")),
            resource=headers.get("x-ratelimit-resource", "core"),
        )


@dataclass
class HTTPRateLimitState:
    """Tracks rate limit state across requests of one client."""

    last_rate_limit: RateLimitInfo | None = None
    requests_made: int = 0

    def update(self, rate_limit: RateLimitInfo | None) -> None:
        self.requests_made += 1
        if rate_limit:
            self.last_rate_limit = rate_limit
            if rate_limit.remaining == 0:
                logger.warning(
                    "Rate limit reached. Limit: %d, Reset: %s",
                    rate_limit.limit,
                    rate_limit.reset.isoformat(),
                )


@dataclass
class RestRequest:
    """Everything needed to issue one REST call."""

    uri_fragment: str
    method: str = "GET"
    description: str = ""
    body: Any = None
    in_file: Path | None = None
    accept_header: str = DEFAULT_ACCEPT_HEADER
    additional_headers: dict[str, str] = field(default_factory=dict)
    content_type: str | None = None
    access_token: str | None = None
    telemetry_event_name: str | None = None
    telemetry_properties: dict[str, Any] = field(default_factory=dict)
    telemetry_exception_bucket: str | None = None
    # Error statuses the caller handles itself: raised, but not logged or recorded as failures
    expected_status_codes: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        self.method = self.method.upper()

    def validate(self) -> None:
        """Check the request before anything is sent.

        Raises:
            RequestValidationError: For an unknown method, a body combined
                with a file upload, an upload with a method other than POST,
                or an upload file that does not exist.
        """
        if self.method not in VALID_METHODS:
            msg = f"Unsupported method '{self.method}'. Expected one of {sorted(VALID_METHODS)}"
            raise RequestValidationError(msg)

        if self.in_file is None:
            return

        if self.body is not None:
            raise RequestValidationError("Cannot specify both a body and a file to upload.")
        if self.method != "POST":
            msg = f"A file can only be uploaded with POST, not {self.method}."
            raise RequestValidationError(msg)
        if not Path(self.in_file).is_file():
            msg = f"File to upload not found: {self.in_file}"
            raise RequestValidationError(msg)


@dataclass
class PaginationCursor:
    """Paging state derived from a response's Link header."""

    next_link: str | None = None
    next_page_number: int = 1
    num_pages: int = 1
    since: int = 0


_LINK_PATTERN = re.compile(r'<([^>]+)>;\s*rel="([^"]+)"')
_PAGE_PARAM_PATTERN = re.compile(r"[?&]page=(\d+)")
_SINCE_PARAM_PATTERN = re.compile(r"[?&]since=(\d+)")


def parse_link_header(link_header: str | None) -> PaginationCursor:
    """Parse a Link header into a pagination cursor.

    A ``next`` link carrying ``page=N`` sets the next page number; one carrying
    ``since=N`` (endpoints without a known total, such as user enumeration)
    sets ``since`` and marks the total as unknown with ``num_pages = 0``. A
    ``last`` link carrying ``page=N`` gives the total page count.

    Args:
        link_header: Link header value from response.

    Returns:
        The cursor; ``next_link`` is None on the last page.
    """
    cursor = PaginationCursor()
    if not link_header:
        return cursor

    # Link header format: <url>; rel="next", <url>; rel="last"
    # URLs may contain commas (e.g. labels=bug,ui), so match entries in place
    for match in _LINK_PATTERN.finditer(link_header):
        url, rel = match.groups()
        if rel == "next":
            cursor.next_link = url
            if page := _PAGE_PARAM_PATTERN.search(url):
                cursor.next_page_number = int(page.group(1))
            elif since := _SINCE_PARAM_PATTERN.search(url):
                cursor.since = int(since.group(1))
                cursor.num_pages = 0
            else:
                # Opaque cursor (e.g. after=...), total unknown
                cursor.num_pages = 0
        elif rel == "last" and (page := _PAGE_PARAM_PATTERN.search(url)):
            cursor.num_pages = int(page.group(1))

    return cursor


def _int_header(headers: httpx.Headers, name: str) -> int | None:
    value = headers.get(name)
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


@dataclass
class ExtendedResult:
    """Materialized body plus the response metadata the pagination driver needs."""

    result: Any
    status_code: int
    request_id: str | None = None
    next_link: str | None = None
    next_page_number: int = 1
    num_pages: int = 1
    since: int = 0
    link: str | None = None
    last_modified: str | None = None
    if_modified_since: str | None = None
    etag: str | None = None
    if_none_match: str | None = None
    rate_limit: int | None = None
    rate_limit_remaining: int | None = None
    rate_limit_reset: int | None = None
    rate_limit_info: RateLimitInfo | None = None

    @classmethod
    def from_response(cls, result: Any, response: httpx.Response) -> "ExtendedResult":
        headers = response.headers
        cursor = parse_link_header(headers.get("link"))
        return cls(
            result=result,
            status_code=response.status_code,
            request_id=headers.get(REQUEST_ID_HEADER),
            next_link=cursor.next_link,
            next_page_number=cursor.next_page_number,
            num_pages=cursor.num_pages,
            since=cursor.since,
            link=headers.get("link"),
            last_modified=headers.get("last-modified"),
            if_modified_since=headers.get("if-modified-since"),
            etag=headers.get("etag"),
            if_none_match=headers.get("if-none-match"),
            rate_limit=_int_header(headers, "x-ratelimit-limit"),
            rate_limit_remaining=_int_header(headers, "x-ratelimit-remaining"),
            rate_limit_reset=_int_header(headers, "x-ratelimit-reset"),
            rate_limit_info=RateLimitInfo.from_headers(headers),
        )


def _json_default(value: Any) -> str:
    if isinstance(value, datetime):
        return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


class GitHubClient:
    """HTTP client for the GitHub REST API.

    Features:
    - Ambient or per-call authentication, anonymous access when no token resolves
    - Retry of GET requests answered with 202 (result not ready)
    - Optional delay after state-changing requests
    - Composed, human-readable errors carrying status and request id
    - Materialized, extended-result or save-to-file responses

    Transport settings (TLS, timeouts) live on the underlying ``httpx.Client``
    of this instance; nothing process-wide is changed around a call.
    """

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        auth: GitHubAuth | None = None,
        config: Configuration | None = None,
        telemetry: TelemetryClient | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize GitHub HTTP client.

        Args:
            auth: GitHubAuth instance. If None, the token is resolved from the
                ambient sources on every call.
            config: Configuration. If None, the process-wide one is read on
                every call.
            telemetry: Telemetry sink. Defaults to the process-wide one.
            transport: Optional httpx transport (e.g. for testing or proxies).
        """
        self._auth = auth
        self._config = config
        self._telemetry = telemetry or get_telemetry()
        self._transport = transport
        self._client: httpx.Client | None = None
        self._rate_limit_state = HTTPRateLimitState()
        self._warned_anonymous = False

    @property
    def config(self) -> Configuration:
        return self._config or get_configuration()

    @property
    def telemetry(self) -> TelemetryClient:
        return self._telemetry

    @property
    def rate_limit_state(self) -> HTTPRateLimitState:
        return self._rate_limit_state

    @property
    def graphql_url(self) -> str:
        """GraphQL endpoint for the configured host."""
        config = self.config
        if config.is_github_dot_com:
            return f"https://api.{config.api_host_name}/graphql"
        return f"https://{config.api_host_name}/api/graphql"

    def build_url(self, uri_fragment: str) -> str:
        """Compose the absolute URL for a URI fragment.

        Absolute URLs (such as pagination links) are returned unchanged.
        """
        if uri_fragment.startswith(("http://", "https://")):
            return uri_fragment

        fragment = uri_fragment
        if fragment.startswith("/"):
            fragment = fragment[1:]
        if fragment.endswith("/"):
            fragment = fragment[:-1]

        config = self.config
        if config.is_github_dot_com:
            return f"https://api.{config.api_host_name}/{fragment}"
        return f"https://{config.api_host_name}/api/v3/{fragment}"

    def _resolve_auth(self, access_token: str | None) -> GitHubAuth:
        if access_token:
            return GitHubAuth(access_token, config=self.config)
        if self._auth is not None:
            return self._auth
        # Session token and environment can change between calls
        return GitHubAuth(config=self.config)

    def build_headers(self, request: RestRequest) -> dict[str, str]:
        """Get headers for a request.

        Returns:
            Dictionary of HTTP headers, including Authorization when a token
            resolves.
        """
        headers = {
            "Accept": request.accept_header,
            "User-Agent": USER_AGENT,
            API_VERSION_HEADER: self.config.api_version,
        }
        headers.update(request.additional_headers)

        auth = self._resolve_auth(request.access_token)
        if auth.is_anonymous:
            if not self._warned_anonymous and not self.config.suppress_no_token_warning:
                logger.warning(
                    "No access token found; sending anonymous requests. These are "
                    "limited to 60 per hour and cannot see private resources."
                )
                self._warned_anonymous = True
        else:
            headers.update(auth.get_authorization_header())
        return headers

    def _encode_body(
        self,
        request: RestRequest,
        telemetry_properties: dict[str, Any],
    ) -> tuple[bytes | None, str | None]:
        """Return the request content and its content type."""
        if request.method not in STATE_CHANGING_METHODS:
            return None, None

        if request.in_file is not None:
            path = Path(request.in_file)
            content_type = request.content_type
            if content_type is None:
                extension = path.suffix.lower()
                content_type = EXTENSION_TO_CONTENT_TYPE.get(extension)
                if content_type is None:
                    logger.debug(
                        "Unknown extension '%s' for %s; uploading as %s",
                        extension,
                        path.name,
                        DEFAULT_IN_FILE_CONTENT_TYPE,
                    )
                    content_type = DEFAULT_IN_FILE_CONTENT_TYPE
                    telemetry_properties["UnknownExtension"] = extension
            return path.read_bytes(), content_type

        if request.body is None:
            return None, None

        body = request.body
        if not isinstance(body, (str, bytes)):
            body = json.dumps(body, default=_json_default)
        content = body.encode("utf-8") if isinstance(body, str) else body
        return content, request.content_type or DEFAULT_JSON_BODY_CONTENT_TYPE

    def _ensure_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                follow_redirects=True,
                timeout=self.DEFAULT_TIMEOUT,
                transport=self._transport,
            )
        return self._client

    def send(
        self,
        request: RestRequest,
        url: str | None = None,
        telemetry_properties: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Issue exactly one HTTP call.

        Args:
            request: The request descriptor.
            url: Absolute URL overriding the one built from the fragment.
            telemetry_properties: Mutable properties collected for this call.

        Returns:
            The response, whose status code is below 400.

        Raises:
            GitHubHTTPError: On a 4xx/5xx response or a transport failure.
        """
        url = url or self.build_url(request.uri_fragment)
        telemetry_properties = telemetry_properties if telemetry_properties is not None else {}
        headers = self.build_headers(request)
        content, content_type = self._encode_body(request, telemetry_properties)
        if content_type:
            headers["Content-Type"] = content_type

        config = self.config
        timeout = config.web_request_timeout_sec or self.DEFAULT_TIMEOUT

        logger.debug("%s %s%s", request.method, url, f" ({request.description})" if request.description else "")
        if config.log_request_body and content is not None and request.in_file is None:
            logger.debug("Request body: %s", content.decode("utf-8", errors="replace"))

        client = self._ensure_client()
        summary = f"{request.method} {url} failed"
        try:
            response = client.request(request.method, url, headers=headers, content=content, timeout=timeout)
        except httpx.RequestError as e:
            error = GitHubHTTPError.from_transport_error(e, summary)
            self._report_failure(error, request, telemetry_properties)
            raise error from e
        except Exception:
            logger.exception("Unexpected error during %s %s", request.method, url)
            raise

        self._rate_limit_state.update(RateLimitInfo.from_headers(response.headers))

        if response.is_error:
            error = GitHubHTTPError.from_response(response, summary)
            if response.status_code in request.expected_status_codes:
                logger.debug("%s %s returned %d", request.method, url, response.status_code)
            else:
                self._report_failure(error, request, telemetry_properties)
            raise error

        return response

    def _report_failure(
        self,
        error: GitHubError,
        request: RestRequest,
        telemetry_properties: dict[str, Any],
    ) -> None:
        logger.error("%s", error)
        self._telemetry.record_exception(
            error,
            bucket=request.telemetry_exception_bucket or request.telemetry_event_name,
            properties=telemetry_properties,
        )

    def invoke(
        self,
        request: RestRequest,
        extended_result: bool = False,
        save_to_file: bool = False,
    ) -> Any:
        """Perform a REST call and return its result.

        Args:
            request: The request descriptor.
            extended_result: Return an ExtendedResult with response metadata.
            save_to_file: Write the raw body to a temporary file and return its path.

        Returns:
            The materialized body, an ExtendedResult, or a Path.

        Raises:
            RequestValidationError: If the request is malformed (nothing is sent).
            GitHubHTTPError: On HTTP or transport failure.
            ResultNotReadyError: If a GET still answers 202 after the configured
                number of retries.
        """
        request.validate()
        config = self.config
        url = self.build_url(request.uri_fragment)
        telemetry_properties = dict(request.telemetry_properties)
        start = time.monotonic()
        retries = 0

        while True:
            response = self.send(request, url, telemetry_properties)
            if response.status_code != 202:
                break

            if request.method != "GET":
                logger.warning("Unexpected response of 202 while performing %s %s", request.method, url)
                break

            if config.retry_delay_seconds <= 0:
                logger.warning(
                    "The server indicated that the result of %s is not yet ready (202). "
                    "Returning it as-is because retry_delay_seconds is 0.",
                    url,
                )
                break

            if retries >= config.maximum_retries_when_result_not_ready:
                error = ResultNotReadyError(url, retries)
                self._report_failure(error, request, telemetry_properties)
                raise error

            retries += 1
            delay = max(config.retry_delay_seconds, _int_header(response.headers, "retry-after") or 0)
            logger.info(
                "Result of %s not ready yet (202). Retry %d of %d in %s seconds",
                url,
                retries,
                config.maximum_retries_when_result_not_ready,
                delay,
            )
            time.sleep(delay)

        if request.method in STATE_CHANGING_METHODS and config.state_change_delay_seconds > 0:
            time.sleep(config.state_change_delay_seconds)

        if request.telemetry_event_name:
            if retries:
                telemetry_properties["NumRetries"] = retries
            self._telemetry.record_event(
                request.telemetry_event_name,
                properties=telemetry_properties,
                metrics={"Duration": time.monotonic() - start},
            )

        if save_to_file:
            with tempfile.NamedTemporaryFile(prefix="gh-cmdlets-", suffix=".tmp", delete=False) as f:
                f.write(response.content)
            logger.debug("Saved response of %s to %s", url, f.name)
            return Path(f.name)

        result = materialize(response.content, smarter_objects=not config.disable_smarter_objects)
        if extended_result:
            return ExtendedResult.from_response(result, response)
        return result

    def close(self) -> None:
        """Close the HTTP client and cleanup resources."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "GitHubClient":
        self._ensure_client()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
