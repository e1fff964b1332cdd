"""Tests for gist comment commands."""

import json

import httpx
import pytest
import respx

from gh_cmdlets.github.http import RequestValidationError
from gh_cmdlets.github.rest import RestClient
from gh_cmdlets.resources.gist_comments import (
    get_gist_comments,
    new_gist_comment,
    remove_gist_comment,
    set_gist_comment,
)

COMMENTS_URL = "https://api.github.com/gists/g1/comments"


class TestGetGistComments:
    """Tests for get_gist_comments."""

    @respx.mock
    def test_list(self, rest_client: RestClient) -> None:
        route = respx.get(COMMENTS_URL).mock(return_value=httpx.Response(200, json=[{"id": 1}, {"id": 2}]))

        comments = get_gist_comments(rest_client, "g1")

        assert [comment["CommentId"] for comment in comments] == [1, 2]
        assert comments[0]["GistId"] == "g1"
        assert route.calls[0].request.headers["accept"] == "application/vnd.github.full+json"

    @respx.mock
    def test_single_comment_as_text(self, rest_client: RestClient) -> None:
        route = respx.get(f"{COMMENTS_URL}/7").mock(return_value=httpx.Response(200, json={"id": 7, "body_text": "hi"}))

        comment = get_gist_comments(rest_client, "g1", comment_id=7, media_type="Text")

        assert comment["CommentId"] == 7
        assert route.calls[0].request.headers["accept"] == "application/vnd.github.text+json"

    def test_unknown_media_type(self, rest_client: RestClient) -> None:
        with pytest.raises(RequestValidationError, match="media_type"):
            get_gist_comments(rest_client, "g1", media_type="markdown")


class TestChangeGistComments:
    """Tests for creating, editing and removing gist comments."""

    @respx.mock
    def test_new(self, rest_client: RestClient) -> None:
        route = respx.post(COMMENTS_URL).mock(return_value=httpx.Response(201, json={"id": 3}))

        comment = new_gist_comment(rest_client, "g1", "Looks good")

        assert json.loads(route.calls[0].request.content) == {"body": "Looks good"}
        assert comment["CommentId"] == 3

    @respx.mock
    def test_set(self, rest_client: RestClient) -> None:
        route = respx.patch(f"{COMMENTS_URL}/3").mock(return_value=httpx.Response(200, json={"id": 3}))

        set_gist_comment(rest_client, "g1", 3, "Edited")

        assert json.loads(route.calls[0].request.content) == {"body": "Edited"}

    @respx.mock
    def test_remove(self, rest_client: RestClient) -> None:
        route = respx.delete(f"{COMMENTS_URL}/3").mock(return_value=httpx.Response(204))

        assert remove_gist_comment(rest_client, "g1", 3) is None
        assert route.called
