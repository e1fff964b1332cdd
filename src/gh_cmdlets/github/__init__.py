"""GitHub API invocation layer."""

from gh_cmdlets.github.auth import (
    AuthenticationError,
    GitHubAuth,
    clear_authentication,
    load_github_token,
    set_authentication,
)
from gh_cmdlets.github.graphql import GraphQLClient, GraphQLError
from gh_cmdlets.github.http import (
    ExtendedResult,
    GitHubClient,
    GitHubError,
    GitHubHTTPError,
    PaginationCursor,
    RateLimitInfo,
    RequestValidationError,
    RestRequest,
    ResultNotReadyError,
    parse_link_header,
)
from gh_cmdlets.github.materialize import convert_to_smarter_object, materialize
from gh_cmdlets.github.rest import MultiRequestProgress, RestClient
from gh_cmdlets.github.uri import (
    RepositoryElementsParams,
    RepositoryReference,
    RepositoryResolutionError,
    join_github_uri,
    resolve_owner_name,
    resolve_repository_elements,
    split_github_uri,
)

__all__ = [
    # Auth
    "AuthenticationError",
    # HTTP executor
    "ExtendedResult",
    "GitHubAuth",
    "GitHubClient",
    "GitHubError",
    "GitHubHTTPError",
    # GraphQL
    "GraphQLClient",
    "GraphQLError",
    "MultiRequestProgress",
    "PaginationCursor",
    "RateLimitInfo",
    # URI helpers
    "RepositoryElementsParams",
    "RepositoryReference",
    "RepositoryResolutionError",
    "RequestValidationError",
    # Pagination
    "RestClient",
    "RestRequest",
    "ResultNotReadyError",
    "clear_authentication",
    "convert_to_smarter_object",
    "join_github_uri",
    "load_github_token",
    "materialize",
    "parse_link_header",
    "resolve_owner_name",
    "resolve_repository_elements",
    "set_authentication",
    "split_github_uri",
]
