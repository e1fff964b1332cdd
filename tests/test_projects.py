"""Tests for project commands."""

import json

import httpx
import pytest
import respx

from gh_cmdlets.github.constants import INERTIA_ACCEPT_HEADER
from gh_cmdlets.github.http import RequestValidationError
from gh_cmdlets.github.rest import RestClient
from gh_cmdlets.resources.projects import get_projects, new_project, remove_project, set_project

API = "https://api.github.com"
REPO_API = f"{API}/repos/octocat/hello-world"


def project(project_id: int, owner_url: str) -> dict:
    return {"id": project_id, "name": f"Project {project_id}", "owner_url": owner_url}


class TestGetProjects:
    """Tests for get_projects."""

    @respx.mock
    def test_repository_projects(self, rest_client: RestClient) -> None:
        route = respx.get(f"{REPO_API}/projects").mock(
            return_value=httpx.Response(200, json=[project(1, REPO_API)])
        )

        projects = get_projects(rest_client, owner_name="octocat", repository_name="hello-world", state="All")

        request = route.calls[0].request
        assert request.url.params["state"] == "all"
        assert request.headers["accept"] == INERTIA_ACCEPT_HEADER
        assert projects[0]["ProjectId"] == 1
        assert projects[0]["RepositoryUrl"] == "https://github.com/octocat/hello-world"

    @respx.mock
    def test_organization_projects(self, rest_client: RestClient) -> None:
        respx.get(f"{API}/orgs/octo-org/projects").mock(
            return_value=httpx.Response(200, json=[project(2, f"{API}/orgs/octo-org")])
        )

        projects = get_projects(rest_client, organization_name="octo-org")

        assert projects[0]["ProjectId"] == 2
        assert "RepositoryUrl" not in projects[0]

    @respx.mock
    def test_user_projects(self, rest_client: RestClient) -> None:
        route = respx.get(f"{API}/users/octocat/projects").mock(return_value=httpx.Response(200, json=[]))

        assert get_projects(rest_client, user_name="octocat") == []
        assert route.called

    @respx.mock
    def test_single_project(self, rest_client: RestClient) -> None:
        respx.get(f"{API}/projects/9").mock(return_value=httpx.Response(200, json=project(9, REPO_API)))

        assert get_projects(rest_client, project=9)["ProjectId"] == 9

    def test_conflicting_owners(self, rest_client: RestClient) -> None:
        with pytest.raises(RequestValidationError, match="only one"):
            get_projects(rest_client, organization_name="octo-org", user_name="octocat")

    def test_invalid_state(self, rest_client: RestClient) -> None:
        with pytest.raises(RequestValidationError, match="state"):
            get_projects(rest_client, user_name="octocat", state="archived")


class TestNewProject:
    """Tests for new_project."""

    @respx.mock
    def test_repository_project(self, rest_client: RestClient) -> None:
        route = respx.post(f"{REPO_API}/projects").mock(
            return_value=httpx.Response(201, json=project(3, REPO_API))
        )

        result = new_project(
            rest_client, "Roadmap", description="Plans", owner_name="octocat", repository_name="hello-world"
        )

        assert json.loads(route.calls[0].request.content) == {"name": "Roadmap", "body": "Plans"}
        assert result["ProjectId"] == 3

    @respx.mock
    def test_user_project(self, rest_client: RestClient) -> None:
        route = respx.post(f"{API}/user/projects").mock(
            return_value=httpx.Response(201, json=project(4, f"{API}/users/octocat"))
        )

        new_project(rest_client, "Personal", user_project=True)

        assert json.loads(route.calls[0].request.content) == {"name": "Personal"}

    def test_user_project_with_organization(self, rest_client: RestClient) -> None:
        with pytest.raises(RequestValidationError):
            new_project(rest_client, "Personal", organization_name="octo-org", user_project=True)


class TestChangeProject:
    """Tests for set_project and remove_project."""

    @respx.mock
    def test_set(self, rest_client: RestClient) -> None:
        route = respx.patch(f"{API}/projects/3").mock(return_value=httpx.Response(200, json=project(3, REPO_API)))

        set_project(rest_client, 3, state="Closed", organization_permission="write", private=True)

        assert json.loads(route.calls[0].request.content) == {
            "state": "closed",
            "organization_permission": "write",
            "private": True,
        }

    def test_set_nothing(self, rest_client: RestClient) -> None:
        with pytest.raises(RequestValidationError, match="Nothing to change"):
            set_project(rest_client, 3)

    def test_set_state_all_rejected(self, rest_client: RestClient) -> None:
        with pytest.raises(RequestValidationError):
            set_project(rest_client, 3, state="all")

    @respx.mock
    def test_remove(self, rest_client: RestClient) -> None:
        route = respx.delete(f"{API}/projects/3").mock(return_value=httpx.Response(204))

        remove_project(rest_client, 3)

        assert route.calls[0].request.headers["accept"] == INERTIA_ACCEPT_HEADER
