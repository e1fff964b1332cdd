"""Branch protection: per-branch rules (REST) and pattern rules (GraphQL)."""

import logging
from typing import Any

from gh_cmdlets.github.graphql import GraphQLClient
from gh_cmdlets.github.http import GitHubError, GitHubHTTPError
from gh_cmdlets.github.rest import RestClient
from gh_cmdlets.github.uri import (
    RepositoryElementsParams,
    RepositoryReference,
    join_github_uri,
    resolve_repository_elements,
)
from gh_cmdlets.resources.common import (
    add_additional_properties,
    path_segment,
    repo_path,
    telemetry_properties,
)

logger = logging.getLogger(__name__)


class BranchProtectionError(GitHubError):
    """Raised when a protection rule already exists or cannot be found."""


def _protection_path(reference: RepositoryReference, branch_name: str) -> str:
    return f"{repo_path(reference)}/branches/{path_segment(branch_name)}/protection"


def get_branch_protection_rule(
    rest_client: RestClient,
    branch_name: str,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    access_token: str | None = None,
) -> dict[str, Any]:
    """Get the protection rule of a branch.

    Raises:
        GitHubHTTPError: With status 404 and message "Branch not protected"
            when the branch has no rule.
    """
    config = rest_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    result = rest_client.get(
        _protection_path(reference, branch_name),
        description=f"Getting branch protection status for {reference.repository_name}",
        access_token=access_token,
        telemetry_event_name="GetBranchProtectionRule",
        telemetry_properties=telemetry_properties(reference, config),
    )
    repository_url = join_github_uri(reference.owner_name, reference.repository_name, config)
    return add_additional_properties(
        result, config, lambda _: {"RepositoryUrl": repository_url, "BranchName": branch_name}
    )


def _is_not_protected(error: GitHubHTTPError) -> bool:
    return error.status_code == 404 and (error.api_message or "").lower() == "branch not protected"


def new_branch_protection_rule(
    rest_client: RestClient,
    branch_name: str,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    status_checks: list[str] | None = None,
    require_up_to_date_branches: bool = False,
    enforce_admins: bool = False,
    dismissal_users: list[str] | None = None,
    dismissal_teams: list[str] | None = None,
    dismiss_stale_reviews: bool = False,
    require_code_owner_reviews: bool = False,
    required_approving_review_count: int | None = None,
    restrict_push_users: list[str] | None = None,
    restrict_push_teams: list[str] | None = None,
    restrict_push_apps: list[str] | None = None,
    require_linear_history: bool = False,
    allow_force_pushes: bool = False,
    allow_deletions: bool = False,
    require_conversation_resolution: bool = False,
    access_token: str | None = None,
) -> dict[str, Any]:
    """Protect a branch.

    Raises:
        BranchProtectionError: If the branch is already protected.
    """
    config = rest_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )

    try:
        rest_client.get(
            _protection_path(reference, branch_name),
            description=f"Checking branch protection status of {branch_name} for {reference.repository_name}",
            access_token=access_token,
            expected_status_codes=frozenset({404}),
        )
    except GitHubHTTPError as e:
        if not _is_not_protected(e):
            logger.error("%s", e)
            raise
    else:
        msg = f"Branch protection rule for branch '{branch_name}' already exists"
        logger.error(msg)
        raise BranchProtectionError(msg)

    required_status_checks = None
    if status_checks is not None or require_up_to_date_branches:
        required_status_checks = {"strict": require_up_to_date_branches, "contexts": status_checks or []}

    required_pull_request_reviews = None
    if (
        dismissal_users
        or dismissal_teams
        or dismiss_stale_reviews
        or require_code_owner_reviews
        or required_approving_review_count is not None
    ):
        required_pull_request_reviews = {
            "dismiss_stale_reviews": dismiss_stale_reviews,
            "require_code_owner_reviews": require_code_owner_reviews,
        }
        if dismissal_users or dismissal_teams:
            required_pull_request_reviews["dismissal_restrictions"] = {
                "users": dismissal_users or [],
                "teams": dismissal_teams or [],
            }
        if required_approving_review_count is not None:
            required_pull_request_reviews["required_approving_review_count"] = required_approving_review_count

    restrictions = None
    if restrict_push_users or restrict_push_teams or restrict_push_apps:
        restrictions = {
            "users": restrict_push_users or [],
            "teams": restrict_push_teams or [],
            "apps": restrict_push_apps or [],
        }

    body = {
        "required_status_checks": required_status_checks,
        "enforce_admins": enforce_admins,
        "required_pull_request_reviews": required_pull_request_reviews,
        "restrictions": restrictions,
        "required_linear_history": require_linear_history,
        "allow_force_pushes": allow_force_pushes,
        "allow_deletions": allow_deletions,
        "required_conversation_resolution": require_conversation_resolution,
    }

    result = rest_client.put(
        _protection_path(reference, branch_name),
        body=body,
        description=f"Setting {branch_name} branch protection status for {reference.repository_name}",
        access_token=access_token,
        telemetry_event_name="NewBranchProtectionRule",
        telemetry_properties=telemetry_properties(reference, config),
    )
    repository_url = join_github_uri(reference.owner_name, reference.repository_name, config)
    return add_additional_properties(
        result, config, lambda _: {"RepositoryUrl": repository_url, "BranchName": branch_name}
    )


def remove_branch_protection_rule(
    rest_client: RestClient,
    branch_name: str,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    access_token: str | None = None,
) -> None:
    """Remove the protection rule of a branch."""
    config = rest_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    rest_client.delete(
        _protection_path(reference, branch_name),
        description=f"Removing {branch_name} branch protection rule for {reference.repository_name}",
        access_token=access_token,
        telemetry_event_name="RemoveBranchProtectionRule",
        telemetry_properties=telemetry_properties(reference, config),
    )


BRANCH_PATTERN_RULES_QUERY = """
query($owner: String!, $name: String!, $after: String, $first: Int = 100) {
  repository(owner: $owner, name: $name) {
    branchProtectionRules(first: $first, after: $after) {
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        id
        pattern
        allowsDeletions
        allowsForcePushes
        dismissesStaleReviews
        isAdminEnforced
        requiredApprovingReviewCount
        requiredStatusCheckContexts
        requiresApprovingReviews
        requiresCodeOwnerReviews
        requiresConversationResolution
        requiresLinearHistory
        requiresStatusChecks
        requiresStrictStatusChecks
        restrictsPushes
        restrictsReviewDismissals
      }
    }
  }
}
"""

REPOSITORY_ID_QUERY = """
query($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    id
  }
}
"""

CREATE_BRANCH_PATTERN_RULE_MUTATION = """
mutation($input: CreateBranchProtectionRuleInput!) {
  createBranchProtectionRule(input: $input) {
    branchProtectionRule {
      id
      pattern
    }
  }
}
"""

DELETE_BRANCH_PATTERN_RULE_MUTATION = """
mutation($input: DeleteBranchProtectionRuleInput!) {
  deleteBranchProtectionRule(input: $input) {
    clientMutationId
  }
}
"""


def get_branch_pattern_protection_rule(
    graphql_client: GraphQLClient,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    pattern: str | None = None,
    access_token: str | None = None,
) -> Any:
    """List the pattern protection rules of a repository, or get one by pattern.

    Raises:
        BranchProtectionError: If ``pattern`` is given and no rule matches it.
    """
    config = graphql_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    rules = list(
        graphql_client.paginate(
            BRANCH_PATTERN_RULES_QUERY,
            {"owner": reference.owner_name, "name": reference.repository_name},
            ["repository", "branchProtectionRules"],
            access_token=access_token,
        )
    )

    repository_url = join_github_uri(reference.owner_name, reference.repository_name, config)
    rules = add_additional_properties(rules, config, lambda _: {"RepositoryUrl": repository_url})
    if pattern is None:
        return rules

    for rule in rules:
        if rule.get("pattern") == pattern:
            return rule

    msg = f"Branch pattern protection rule '{pattern}' not found in {reference.owner_name}/{reference.repository_name}"
    logger.error(msg)
    raise BranchProtectionError(msg)


def new_branch_pattern_protection_rule(
    graphql_client: GraphQLClient,
    pattern: str,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    status_checks: list[str] | None = None,
    require_strict_status_checks: bool = False,
    is_admin_enforced: bool = False,
    required_approving_review_count: int | None = None,
    dismiss_stale_reviews: bool = False,
    require_code_owner_reviews: bool = False,
    require_linear_history: bool = False,
    require_conversation_resolution: bool = False,
    allow_force_pushes: bool = False,
    allow_deletions: bool = False,
    access_token: str | None = None,
) -> dict[str, Any]:
    """Create a branch protection rule applying to every branch matching ``pattern``."""
    config = graphql_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    variables = {"owner": reference.owner_name, "name": reference.repository_name}
    repository = graphql_client.execute(REPOSITORY_ID_QUERY, variables, access_token=access_token)

    rule_input: dict[str, Any] = {
        "repositoryId": repository["repository"]["id"],
        "pattern": pattern,
        "isAdminEnforced": is_admin_enforced,
        "dismissesStaleReviews": dismiss_stale_reviews,
        "requiresCodeOwnerReviews": require_code_owner_reviews,
        "requiresLinearHistory": require_linear_history,
        "requiresConversationResolution": require_conversation_resolution,
        "allowsForcePushes": allow_force_pushes,
        "allowsDeletions": allow_deletions,
    }
    if status_checks is not None or require_strict_status_checks:
        rule_input["requiresStatusChecks"] = True
        rule_input["requiresStrictStatusChecks"] = require_strict_status_checks
        rule_input["requiredStatusCheckContexts"] = status_checks or []
    if required_approving_review_count is not None:
        rule_input["requiresApprovingReviews"] = True
        rule_input["requiredApprovingReviewCount"] = required_approving_review_count

    data = graphql_client.execute(
        CREATE_BRANCH_PATTERN_RULE_MUTATION,
        {"input": rule_input},
        description=f"Creating branch pattern protection rule {pattern}",
        access_token=access_token,
        telemetry_event_name="NewBranchPatternProtectionRule",
        telemetry_properties=telemetry_properties(reference, config),
    )
    rule = data["createBranchProtectionRule"]["branchProtectionRule"]
    repository_url = join_github_uri(reference.owner_name, reference.repository_name, config)
    return add_additional_properties(rule, config, lambda _: {"RepositoryUrl": repository_url})


def remove_branch_pattern_protection_rule(
    graphql_client: GraphQLClient,
    pattern: str,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    access_token: str | None = None,
) -> None:
    """Delete the pattern protection rule matching ``pattern``.

    Raises:
        BranchProtectionError: If no rule matches.
    """
    config = graphql_client.config
    reference = resolve_repository_elements(
        RepositoryElementsParams(uri, owner_name, repository_name), config=config
    )
    rule = get_branch_pattern_protection_rule(
        graphql_client, reference.owner_name, reference.repository_name, pattern=pattern, access_token=access_token
    )
    graphql_client.execute(
        DELETE_BRANCH_PATTERN_RULE_MUTATION,
        {"input": {"branchProtectionRuleId": rule["id"]}},
        description=f"Removing branch pattern protection rule {pattern}",
        access_token=access_token,
        telemetry_event_name="RemoveBranchPatternProtectionRule",
        telemetry_properties=telemetry_properties(reference, config),
    )
