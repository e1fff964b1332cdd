"""Tests for issue comment commands."""

import json
from datetime import date

import httpx
import pytest
import respx

from gh_cmdlets.github.http import RequestValidationError
from gh_cmdlets.github.rest import RestClient
from gh_cmdlets.resources.issue_comments import (
    get_issue_comments,
    new_issue_comment,
    remove_issue_comment,
    set_issue_comment,
)

REPO_API = "https://api.github.com/repos/octocat/hello-world"
REPO_ARGS = {"owner_name": "octocat", "repository_name": "hello-world"}


def comment(comment_id: int, issue_number: int) -> dict:
    return {"id": comment_id, "issue_url": f"{REPO_API}/issues/{issue_number}", "body": "text"}


class TestGetIssueComments:
    """Tests for get_issue_comments."""

    @respx.mock
    def test_repository_wide(self, rest_client: RestClient) -> None:
        route = respx.get(f"{REPO_API}/issues/comments").mock(
            return_value=httpx.Response(200, json=[comment(10, 1), comment(11, 2)])
        )

        comments = get_issue_comments(
            rest_client, **REPO_ARGS, since=date(2024, 3, 1), sort="Updated", direction="desc"
        )

        params = route.calls[0].request.url.params
        assert params["since"] == "2024-03-01T00:00:00Z"
        assert params["sort"] == "updated"
        assert params["direction"] == "desc"
        assert route.calls[0].request.headers["accept"] == "application/vnd.github.raw+json"
        assert [c["IssueNumber"] for c in comments] == [1, 2]
        assert comments[0]["RepositoryUrl"] == "https://github.com/octocat/hello-world"
        assert comments[1]["CommentId"] == 11

    @respx.mock
    def test_one_issue(self, rest_client: RestClient) -> None:
        route = respx.get(f"{REPO_API}/issues/5/comments").mock(return_value=httpx.Response(200, json=[comment(12, 5)]))

        comments = get_issue_comments(rest_client, **REPO_ARGS, issue=5)

        assert comments[0]["IssueNumber"] == 5
        assert "since" not in route.calls[0].request.url.params

    @respx.mock
    def test_single_comment(self, rest_client: RestClient) -> None:
        respx.get(f"{REPO_API}/issues/comments/12").mock(return_value=httpx.Response(200, json=comment(12, 5)))

        result = get_issue_comments(rest_client, uri="https://github.com/octocat/hello-world", comment_id=12)

        assert result["CommentId"] == 12

    def test_issue_and_comment_id(self, rest_client: RestClient) -> None:
        with pytest.raises(RequestValidationError, match="not both"):
            get_issue_comments(rest_client, **REPO_ARGS, issue=5, comment_id=12)

    def test_sort_with_issue(self, rest_client: RestClient) -> None:
        with pytest.raises(RequestValidationError, match="repository-wide"):
            get_issue_comments(rest_client, **REPO_ARGS, issue=5, sort="created")

    def test_invalid_direction(self, rest_client: RestClient) -> None:
        with pytest.raises(RequestValidationError, match="direction"):
            get_issue_comments(rest_client, **REPO_ARGS, direction="sideways")


class TestChangeIssueComments:
    """Tests for creating, editing and removing issue comments."""

    @respx.mock
    def test_new(self, rest_client: RestClient) -> None:
        route = respx.post(f"{REPO_API}/issues/5/comments").mock(return_value=httpx.Response(201, json=comment(13, 5)))

        result = new_issue_comment(rest_client, 5, "Thanks!", **REPO_ARGS)

        assert json.loads(route.calls[0].request.content) == {"body": "Thanks!"}
        assert result["IssueNumber"] == 5

    @respx.mock
    def test_set(self, rest_client: RestClient) -> None:
        route = respx.patch(f"{REPO_API}/issues/comments/13").mock(return_value=httpx.Response(200, json=comment(13, 5)))

        set_issue_comment(rest_client, 13, "Edited", **REPO_ARGS)

        assert json.loads(route.calls[0].request.content) == {"body": "Edited"}

    @respx.mock
    def test_remove_uses_configured_repository(self, rest_client: RestClient) -> None:
        route = respx.delete("https://api.github.com/repos/octo-org/hello-world/issues/comments/13").mock(
            return_value=httpx.Response(204)
        )

        remove_issue_comment(rest_client, 13)

        assert route.called
