"""GitHub GraphQL API client.

Sends queries and mutations through the executor's single-call path and
turns GraphQL ``errors`` into exceptions.
"""

import logging
from collections.abc import Iterator
from typing import Any, cast

from gh_cmdlets.config import Configuration
from gh_cmdlets.github.http import GitHubClient, RestRequest
from gh_cmdlets.github.materialize import materialize

logger = logging.getLogger(__name__)


class GraphQLError(Exception):
    """Raised when GraphQL query returns errors."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        self.types = [err.get("type") for err in errors if err.get("type")]
        messages = [
            f"{err['type']}: {err.get('message', 'Unknown error')}" if err.get("type") else err.get("message", "Unknown error")
            for err in errors
        ]
        super().__init__("GraphQL errors:\n" + "\n".join(messages))


class GraphQLClient:
    """GraphQL client for the GitHub API.

    Features:
    - Endpoint chosen from the configured host (github.com or enterprise)
    - HTTP failures surface as GitHubHTTPError, GraphQL errors as GraphQLError
    - Cursor-based pagination over connections
    """

    def __init__(self, http_client: GitHubClient) -> None:
        """Initialize GraphQL client.

        Args:
            http_client: HTTP client for making requests.
        """
        self._http = http_client

    @property
    def config(self) -> Configuration:
        return self._http.config

    def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        description: str = "",
        access_token: str | None = None,
        telemetry_event_name: str | None = None,
        telemetry_properties: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Execute a GraphQL query or mutation.

        Args:
            query: GraphQL query string.
            variables: Optional query variables.
            description: Human-readable description for logs.
            access_token: Explicit token for this call.
            telemetry_event_name: Event recorded on success.
            telemetry_properties: Properties of that event.

        Returns:
            GraphQL response data payload.

        Raises:
            GitHubHTTPError: If the HTTP request fails.
            GraphQLError: If response contains GraphQL errors.
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        request = RestRequest(
            uri_fragment=self._http.graphql_url,
            method="POST",
            description=description,
            body=payload,
            access_token=access_token,
            telemetry_exception_bucket=telemetry_event_name,
        )
        properties = dict(telemetry_properties or {})
        response = self._http.send(request, telemetry_properties=properties)
        result = materialize(response.content, smarter_objects=False)

        if not isinstance(result, dict):
            raise GraphQLError([{"message": "Invalid GraphQL response format"}])

        if result.get("errors"):
            errors = result["errors"]
            logger.error("GraphQL errors for %s: %s", description or "query", errors)
            raise GraphQLError(errors)

        data = result.get("data")
        if data is None:
            raise GraphQLError([{"message": "Missing data in GraphQL response"}])

        if telemetry_event_name:
            self._http.telemetry.record_event(telemetry_event_name, properties=properties)

        return cast("dict[str, Any]", data)

    def paginate(
        self,
        query: str,
        variables: dict[str, Any],
        path_to_connection: list[str],
        page_size: int = 100,
        access_token: str | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Auto-paginate through a GraphQL connection.

        Args:
            query: GraphQL query with $after and $first variables.
            variables: Base variables (without after/first).
            path_to_connection: Path to connection object in response.
            page_size: Number of items per page.
            access_token: Explicit token for this call.

        Yields:
            Individual nodes from paginated results.
        """
        has_next_page = True
        after_cursor: str | None = None

        while has_next_page:
            page_vars = {**variables, "after": after_cursor, "first": page_size}
            data = self.execute(query, page_vars, access_token=access_token)

            connection: Any = data
            for key in path_to_connection:
                connection = (connection or {}).get(key) or {}

            page_info = connection.get("pageInfo", {})
            nodes = connection.get("nodes")
            if nodes is None:
                nodes = [edge.get("node") for edge in connection.get("edges", [])]

            for node in nodes:
                if node:
                    yield node

            has_next_page = page_info.get("hasNextPage", False)
            after_cursor = page_info.get("endCursor")

            logger.debug(
                "Paginated %d items, hasNextPage=%s, cursor=%s",
                len(nodes),
                has_next_page,
                after_cursor,
            )
