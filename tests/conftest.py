"""Pytest configuration and shared fixtures."""

import re
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest
import structlog
from pydantic import SecretStr

from jira_release.config.settings import ReleaseSettings
from jira_release.models.domain import ChangeRequest
from jira_release.providers.base import ChangeRequestProvider
from jira_release.providers.github_rest import build_pull_request_pattern
from jira_release.providers.jira_rest import JiraRestClient
from jira_release.utils.connection_pool import HTTPConnectionPool

JIRA_API = "https://test-site.atlassian.net/rest/api/3"


def issue_payload(
    key: str,
    subtask: bool = False,
    fix_versions: tuple[str, ...] = (),
    parent: str | None = None,
    status: str = "To Do",
    components: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Issue as returned by ``GET /issue/{key}``."""
    return {
        "id": "10001",
        "key": key,
        "fields": {
            "issuetype": {"name": "Sub-task" if subtask else "Task", "subtask": subtask},
            "fixVersions": [{"name": name, "id": str(i)} for i, name in enumerate(fix_versions)],
            "status": {"name": status, "id": "3"},
            "components": [{"name": name} for name in components],
            "parent": {"key": parent} if parent else None,
        },
    }


class FakeJiraApi:
    """In-memory stand-in for the Jira REST API.

    Callable with the signature of ``HTTPConnectionPool.request`` so it can be
    installed as the ``side_effect`` of a mocked pool.
    """

    def __init__(self, project_id: str = "10000") -> None:
        self.project_id = project_id
        self.issues: dict[str, dict[str, Any]] = {}
        self.versions: list[dict[str, Any]] = []
        self.transitions: dict[str, list[dict[str, Any]]] = {}
        self.failures: dict[tuple[str, str], int] = {}
        self.calls: list[tuple[str, str, Any]] = []

    def add_issue(self, key: str, **kwargs: Any) -> None:
        self.issues[key] = issue_payload(key, **kwargs)

    def fail(self, method: str, path: str, status: int = 500) -> None:
        self.failures[(method, path)] = status

    def sent(self, method: str, path: str | None = None) -> list[Any]:
        """JSON bodies of the requests sent with ``method`` (and ``path``)."""
        return [body for m, p, body in self.calls if m == method and (path is None or p == path)]

    def __call__(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        body = kwargs.get("json")
        self.calls.append((method, path, body))
        request = httpx.Request(method, f"{JIRA_API}{path}")

        def reply(status: int, payload: Any = None) -> httpx.Response:
            if payload is None:
                return httpx.Response(status, request=request)
            return httpx.Response(status, json=payload, request=request)

        if (method, path) in self.failures:
            return reply(self.failures[(method, path)], {"errorMessages": ["Internal error"]})

        parts = path.strip("/").split("/")
        if parts[0] == "project" and len(parts) == 3 and parts[2] == "versions":
            return reply(200, self.versions)
        if parts[0] == "project" and method == "GET":
            return reply(200, {"id": self.project_id, "key": parts[1]})
        if parts[0] == "version" and method == "POST":
            if any(version["name"] == body["name"] for version in self.versions):
                return reply(400, {"errors": {"name": "A version with this name already exists in this project."}})
            version = {"id": str(20000 + len(self.versions)), "name": body["name"], "released": False}
            self.versions.append(version)
            return reply(201, version)
        if parts[0] == "version" and method == "PUT":
            version = next((v for v in self.versions if v["id"] == parts[1]), None)
            if version is None:
                return reply(404, {"errorMessages": ["Version not found"]})
            version.update(body)
            return reply(200, version)
        if parts[0] == "issue" and parts[1] not in self.issues:
            return reply(404, {"errorMessages": ["Issue does not exist or you do not have permission to see it."]})
        if parts[0] == "issue" and len(parts) == 3 and method == "GET":
            return reply(200, {"transitions": self.transitions.get(parts[1], [])})
        if parts[0] == "issue" and len(parts) == 3 and method == "POST":
            return reply(204)
        if parts[0] == "issue" and method == "GET":
            return reply(200, self.issues[parts[1]])
        if parts[0] == "issue" and method == "PUT":
            return reply(204)
        return reply(404, {"errorMessages": [f"No route for {method} {path}"]})


class FakeChangeRequestProvider(ChangeRequestProvider):
    """Change-request provider serving pull requests from a dict.

    URLs mapped to None, and URLs not in the dict, resolve to None.
    """

    def __init__(self, pull_requests: dict[str, ChangeRequest | None] | None = None) -> None:
        self.pull_requests = pull_requests or {}
        self.fetched: list[str] = []
        self._pattern = build_pull_request_pattern()

    @property
    def url_pattern(self) -> re.Pattern[str]:
        return self._pattern

    async def get_change_request(self, owner: str, repo: str, number: int) -> ChangeRequest | None:
        return await self.fetch_change_request(f"https://github.com/{owner}/{repo}/pull/{number}")

    async def fetch_change_request(self, url: str) -> ChangeRequest | None:
        self.fetched.append(url)
        return self.pull_requests.get(url)

    async def __aenter__(self) -> "FakeChangeRequestProvider":
        return self

    async def __aexit__(self, *args: object) -> None:
        pass


@pytest.fixture
def fake_jira_api() -> FakeJiraApi:
    """Empty fake Jira API."""
    return FakeJiraApi()


@pytest.fixture
def change_request_provider() -> Callable[..., FakeChangeRequestProvider]:
    """Factory for fake change-request providers."""
    return FakeChangeRequestProvider


@pytest.fixture
def make_issue_payload() -> Callable[..., dict[str, Any]]:
    """Factory for Jira issue payloads."""
    return issue_payload


@pytest.fixture
def make_settings() -> Callable[..., ReleaseSettings]:
    """Factory for settings with test credentials."""

    def _make(**overrides: Any) -> ReleaseSettings:
        values: dict[str, Any] = {
            "github_token": SecretStr("ghp_test_token"),
            "jira_host": "test-site",
            "jira_email": "release-bot@example.com",
            "jira_token": SecretStr("jira-test-token"),
            "project_prefix": "VP",
        }
        values.update(overrides)
        return ReleaseSettings(**values)

    return _make


@pytest.fixture
def settings(make_settings: Callable[..., ReleaseSettings]) -> ReleaseSettings:
    """Settings with defaults for every optional field."""
    return make_settings()


@pytest.fixture
def action_env(tmp_path) -> dict[str, str]:
    """Environment of an action run with every required input set."""
    return {
        "INPUT_GITHUB-TOKEN": "ghp_test_token",
        "INPUT_JIRA-HOST": "test-site",
        "INPUT_JIRA-EMAIL": "release-bot@example.com",
        "INPUT_JIRA-TOKEN": "jira-test-token",
        "INPUT_PROJECT-PREFIX": "VP",
        "GITHUB_OUTPUT": str(tmp_path / "github_output"),
    }


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by CLI tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def fake_jira_client(fake_jira_api: FakeJiraApi) -> JiraRestClient:
    """JiraRestClient whose connection pool is served by ``fake_jira_api``."""
    jira = JiraRestClient("test-site", "release-bot@example.com", "jira-test-token", "VP")
    pool = AsyncMock(spec=HTTPConnectionPool)
    pool.request.side_effect = fake_jira_api
    jira._pool = pool
    return jira
