"""GitHub REST API client with pagination.

Provides the multiple-result driver that follows Link headers page by page,
plus single-result helpers for the resource functions.
"""

import logging
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskID, TaskProgressColumn, TextColumn

from gh_cmdlets.config import Configuration
from gh_cmdlets.github.constants import DEFAULT_ACCEPT_HEADER
from gh_cmdlets.github.http import ExtendedResult, GitHubClient, RestRequest

logger = logging.getLogger(__name__)


class MultiRequestProgress:
    """Progress bar for long page sequences.

    Created lazily on the first update; ``complete()`` is safe to call
    whether or not anything was displayed.
    """

    def __init__(self, description: str, console: Console | None = None) -> None:
        self.description = description
        self.console = console or Console(stderr=True)
        self.completed = False
        self.updates = 0
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def update(self, status: str, percent_complete: float) -> None:
        """Show the status of the next fetch."""
        if self._progress is None:
            self._progress = Progress(
                TextColumn("[bold blue]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=self.console,
                transient=True,
            )
            self._task = self._progress.add_task(self.description, total=100)
            self._progress.start()

        assert self._task is not None
        self._progress.update(
            self._task,
            description=f"{self.description} ({status})",
            completed=min(max(percent_complete, 0.0), 100.0),
        )
        self.updates += 1

    def complete(self) -> None:
        """Mark the progress as finished and remove it from the display."""
        if self._progress is not None and self._task is not None:
            self._progress.update(self._task, completed=100)
            self._progress.stop()
        self.completed = True


class RestClient:
    """GitHub REST API client with pagination.

    Wraps GitHubClient to provide:
    - Concatenation of every page of a collection endpoint, following Link headers
    - Single-page mode
    - Progress display for long or open-ended page sequences
    - Single-result helpers (get/post/patch/put/delete)
    """

    def __init__(self, http_client: GitHubClient) -> None:
        """Initialize REST API client.

        Args:
            http_client: GitHubClient instance for HTTP requests.
        """
        self._http = http_client

    @property
    def http(self) -> GitHubClient:
        return self._http

    @property
    def config(self) -> Configuration:
        return self._http.config

    def _new_progress(self, description: str) -> MultiRequestProgress:
        return MultiRequestProgress(description)

    def invoke_multiple_result(
        self,
        uri_fragment: str,
        description: str = "",
        accept_header: str = DEFAULT_ACCEPT_HEADER,
        access_token: str | None = None,
        single_page: bool = False,
        additional_headers: dict[str, str] | None = None,
        telemetry_event_name: str | None = None,
        telemetry_properties: dict[str, Any] | None = None,
        telemetry_exception_bucket: str | None = None,
    ) -> list[Any]:
        """Fetch every page of a collection endpoint.

        Args:
            uri_fragment: Path (and query) of the first page.
            description: Human-readable description used in logs and progress.
            accept_header: Accept header for every page.
            access_token: Explicit token for this call.
            single_page: Stop after the first page.
            additional_headers: Extra headers for every page.
            telemetry_event_name: Event recorded once for the whole sequence.
            telemetry_properties: Properties of that event.
            telemetry_exception_bucket: Bucket for a failure of any page.

        Returns:
            The items of all pages, in page order.

        Raises:
            GitHubHTTPError: If any page fails; no partial result is returned.
        """
        config = self.config
        threshold = config.multi_request_progress_threshold
        results: list[Any] = []
        next_link: str | None = uri_fragment
        iteration = 0
        progress = self._new_progress(description or uri_fragment)

        try:
            while True:
                iteration += 1
                page: ExtendedResult = self._http.invoke(
                    RestRequest(
                        uri_fragment=next_link,
                        description=description,
                        accept_header=accept_header,
                        additional_headers=dict(additional_headers or {}),
                        access_token=access_token,
                        telemetry_exception_bucket=telemetry_exception_bucket or telemetry_event_name,
                        telemetry_properties=dict(telemetry_properties or {}),
                    ),
                    extended_result=True,
                )

                if isinstance(page.result, list):
                    results.extend(page.result)
                elif page.result is not None:
                    results.append(page.result)

                next_link = page.next_link
                if single_page or not next_link or not next_link.strip():
                    break

                if page.num_pages == 0:
                    status = f"page {iteration + 1} of unknown total"
                    percent_complete = float(iteration % 100)
                else:
                    status = f"page {page.next_page_number}/{page.num_pages}"
                    percent_complete = page.next_page_number / page.num_pages * 100

                logger.debug("Getting additional results for %s (%s)", description or uri_fragment, status)
                if threshold > 0 and (page.num_pages >= threshold or page.num_pages == 0):
                    progress.update(status, percent_complete)
        finally:
            progress.complete()

        if telemetry_event_name:
            self._http.telemetry.record_event(
                telemetry_event_name,
                properties=telemetry_properties,
                metrics={"NumPages": iteration, "NumResults": len(results)},
            )

        return results

    def invoke(
        self,
        uri_fragment: str,
        method: str = "GET",
        description: str = "",
        body: Any = None,
        in_file: Path | None = None,
        accept_header: str = DEFAULT_ACCEPT_HEADER,
        additional_headers: dict[str, str] | None = None,
        content_type: str | None = None,
        access_token: str | None = None,
        save_to_file: bool = False,
        telemetry_event_name: str | None = None,
        telemetry_properties: dict[str, Any] | None = None,
        expected_status_codes: frozenset[int] = frozenset(),
    ) -> Any:
        """Perform a single-result call; see GitHubClient.invoke."""
        request = RestRequest(
            uri_fragment=uri_fragment,
            method=method,
            description=description,
            body=body,
            in_file=in_file,
            accept_header=accept_header,
            additional_headers=dict(additional_headers or {}),
            content_type=content_type,
            access_token=access_token,
            telemetry_event_name=telemetry_event_name,
            telemetry_properties=dict(telemetry_properties or {}),
            expected_status_codes=expected_status_codes,
        )
        return self._http.invoke(request, save_to_file=save_to_file)

    def get(self, uri_fragment: str, **kwargs: Any) -> Any:
        return self.invoke(uri_fragment, "GET", **kwargs)

    def post(self, uri_fragment: str, **kwargs: Any) -> Any:
        return self.invoke(uri_fragment, "POST", **kwargs)

    def patch(self, uri_fragment: str, **kwargs: Any) -> Any:
        return self.invoke(uri_fragment, "PATCH", **kwargs)

    def put(self, uri_fragment: str, **kwargs: Any) -> Any:
        return self.invoke(uri_fragment, "PUT", **kwargs)

    def delete(self, uri_fragment: str, **kwargs: Any) -> Any:
        return self.invoke(uri_fragment, "DELETE", **kwargs)
