"""Tests for jira_release/providers/jira_rest.py - Jira REST API client.

The connection pool is replaced by a mock whose ``request`` is served by the
in-memory ``FakeJiraApi`` from conftest, so every request goes through the
real status handling and response decoding.
"""

import base64

import httpx
import pytest

from jira_release.enums import OutcomeStatus
from jira_release.exceptions import (
    ExternalServiceError,
    InvalidTransitionError,
    JiraReleaseError,
    NotFoundError,
    ResponseDecodeError,
)
from jira_release.providers.jira_rest import JiraRestClient, basic_auth_header, normalize_base_url

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def client(fake_jira_client) -> JiraRestClient:
    return fake_jira_client


@pytest.fixture
def initialized_client(client: JiraRestClient) -> JiraRestClient:
    """Client with the project id already resolved."""
    client.project_id = "10000"
    return client


def done_transition(transition_id: str = "31", target: str = "Done") -> dict:
    return {"id": transition_id, "name": f"Move to {target}", "to": {"name": target, "id": "10002"}}


# =============================================================================
# Construction
# =============================================================================


class TestNormalizeBaseUrl:
    """Tests for jira-host normalization."""

    def test_site_name(self):
        assert normalize_base_url("your-domain") == "https://your-domain.atlassian.net"

    def test_host_name(self):
        assert normalize_base_url("jira.example.com") == "https://jira.example.com"

    def test_full_url_kept(self):
        assert normalize_base_url("https://jira.example.com/") == "https://jira.example.com"
        assert normalize_base_url("http://localhost:8080") == "http://localhost:8080"

    def test_whitespace_stripped(self):
        assert normalize_base_url("  your-domain \n") == "https://your-domain.atlassian.net"


class TestJiraRestClientInit:
    """Tests for client construction."""

    def test_api_base(self):
        jira = JiraRestClient("your-domain", "me@example.com", "token", "VP")

        assert jira.base_url == "https://your-domain.atlassian.net"
        assert jira.api_base == "https://your-domain.atlassian.net/rest/api/3"
        assert jira.project_key == "VP"
        assert jira.project_id is None

    def test_basic_auth_header(self):
        header = basic_auth_header("me@example.com", "s3cret")

        assert header.startswith("Basic ")
        assert base64.b64decode(header.removeprefix("Basic ")) == b"me@example.com:s3cret"

    def test_pool_headers(self):
        jira = JiraRestClient("your-domain", "me@example.com", "s3cret", "VP")

        assert jira._pool.base_url == "https://your-domain.atlassian.net/rest/api/3"
        assert jira._pool.headers["Authorization"] == basic_auth_header("me@example.com", "s3cret")
        assert jira._pool.headers["Accept"] == "application/json"
        assert jira._pool.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_context_manager_opens_and_closes_pool(self, client):
        async with client as jira:
            assert jira is client
            client._pool.initialize.assert_awaited_once()

        client._pool.close.assert_awaited_once()


# =============================================================================
# Error handling
# =============================================================================


class TestRequestErrors:
    """Tests for conversion of HTTP failures."""

    @pytest.mark.asyncio
    async def test_error_status(self, client, fake_jira_api):
        fake_jira_api.fail("GET", "/project/VP", 503)

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.initialize()

        assert exc_info.value.status_code == 503
        assert "Internal error" in exc_info.value.response_text
        assert "(HTTP 503)" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_not_found(self, client):
        with pytest.raises(NotFoundError) as exc_info:
            await client.fetch_issue("VP-404")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_transport_error(self, client):
        client._pool.request.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.initialize()

        assert exc_info.value.status_code is None
        assert "connection refused" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unexpected_body(self, client):
        request = httpx.Request("GET", "https://test-site.atlassian.net/rest/api/3/issue/VP-1")
        client._pool.request.side_effect = None
        client._pool.request.return_value = httpx.Response(200, json={"key": "VP-1"}, request=request)

        with pytest.raises(ResponseDecodeError):
            await client.fetch_issue("VP-1")

    @pytest.mark.asyncio
    async def test_body_not_json(self, client):
        request = httpx.Request("GET", "https://test-site.atlassian.net/rest/api/3/project/VP")
        client._pool.request.side_effect = None
        client._pool.request.return_value = httpx.Response(200, text="<html>login</html>", request=request)

        with pytest.raises(ResponseDecodeError):
            await client.initialize()


# =============================================================================
# Project and issues
# =============================================================================


class TestInitialize:
    @pytest.mark.asyncio
    async def test_caches_project_id(self, client, fake_jira_api):
        await client.initialize()

        assert client.project_id == "10000"
        assert fake_jira_api.calls[0][:2] == ("GET", "/project/VP")


class TestFetchIssue:
    """Tests for fetch_issue."""

    @pytest.mark.asyncio
    async def test_maps_fields(self, client, fake_jira_api):
        fake_jira_api.add_issue(
            "VP-124",
            subtask=True,
            fix_versions=("v0.0.14",),
            parent="VP-100",
            status="In Review",
            components=("mobile",),
        )

        issue = await client.fetch_issue("VP-124")

        assert issue.key == "VP-124"
        assert issue.is_subtask is True
        assert issue.fix_versions == ["v0.0.14"]
        assert issue.parent_key == "VP-100"
        assert issue.parent_project == "VP"
        assert issue.status.name == "In Review"
        assert issue.components == frozenset({"mobile"})

    @pytest.mark.asyncio
    async def test_issue_without_parent(self, client, fake_jira_api):
        fake_jira_api.add_issue("VP-1")

        issue = await client.fetch_issue("VP-1")

        assert issue.parent_key is None
        assert issue.fix_versions == []
        assert issue.is_subtask is False

    @pytest.mark.asyncio
    async def test_requests_only_needed_fields(self, client, fake_jira_api):
        fake_jira_api.add_issue("VP-1")

        await client.fetch_issue("VP-1")

        kwargs = client._pool.request.call_args.kwargs
        assert kwargs["params"]["fields"] == "issuetype,fixVersions,status,components,parent"


class TestIssueUpdates:
    """Tests for add_version, add_component and update_status."""

    @pytest.mark.asyncio
    async def test_add_version(self, client, fake_jira_api):
        fake_jira_api.add_issue("VP-1")

        await client.add_version("VP-1", "v1.0.0")

        assert fake_jira_api.sent("PUT", "/issue/VP-1") == [
            {"update": {"fixVersions": [{"add": {"name": "v1.0.0"}}]}}
        ]

    @pytest.mark.asyncio
    async def test_add_component(self, client, fake_jira_api):
        fake_jira_api.add_issue("VP-1")

        await client.add_component("VP-1", "mobile")

        assert fake_jira_api.sent("PUT", "/issue/VP-1") == [{"update": {"components": [{"add": {"name": "mobile"}}]}}]

    @pytest.mark.asyncio
    async def test_add_version_failure_raises(self, client, fake_jira_api):
        fake_jira_api.add_issue("VP-1")
        fake_jira_api.fail("PUT", "/issue/VP-1", 403)

        with pytest.raises(ExternalServiceError):
            await client.add_version("VP-1", "v1.0.0")

    @pytest.mark.asyncio
    async def test_update_status_matches_target_name(self, client, fake_jira_api):
        fake_jira_api.add_issue("VP-1")
        fake_jira_api.transitions["VP-1"] = [
            {"id": "21", "name": "Start", "to": {"name": "In Progress"}},
            done_transition("31"),
        ]

        await client.update_status("VP-1", "done")

        assert fake_jira_api.sent("POST", "/issue/VP-1/transitions") == [{"transition": {"id": "31"}}]

    @pytest.mark.asyncio
    async def test_update_status_without_transition(self, client, fake_jira_api):
        fake_jira_api.add_issue("VP-1")
        fake_jira_api.transitions["VP-1"] = [{"id": "21", "name": "Start", "to": {"name": "In Progress"}}]

        with pytest.raises(InvalidTransitionError) as exc_info:
            await client.update_status("VP-1", "Done")

        assert exc_info.value.issue_key == "VP-1"
        assert exc_info.value.status == "Done"
        assert fake_jira_api.sent("POST", "/issue/VP-1/transitions") == []


# =============================================================================
# Versions
# =============================================================================


class TestCreateVersion:
    """Tests for create_version."""

    @pytest.mark.asyncio
    async def test_requires_initialize(self, client):
        with pytest.raises(JiraReleaseError):
            await client.create_version("v1.0.0")

    @pytest.mark.asyncio
    async def test_created(self, initialized_client, fake_jira_api):
        outcome = await initialized_client.create_version("v1.0.0")

        assert outcome.status is OutcomeStatus.APPLIED
        assert fake_jira_api.sent("POST", "/version") == [
            {"name": "v1.0.0", "released": False, "projectId": "10000"}
        ]

    @pytest.mark.asyncio
    async def test_existing_version_is_skipped(self, initialized_client, fake_jira_api):
        fake_jira_api.versions.append({"id": "20000", "name": "v1.0.0", "released": False})

        outcome = await initialized_client.create_version("v1.0.0")

        assert outcome.status is OutcomeStatus.SKIPPED
        assert outcome.ok
        assert "might already exist" in outcome.message

    @pytest.mark.asyncio
    async def test_conflict_is_skipped(self, initialized_client, fake_jira_api):
        fake_jira_api.fail("POST", "/version", 409)

        outcome = await initialized_client.create_version("v1.0.0")

        assert outcome.status is OutcomeStatus.SKIPPED

    @pytest.mark.asyncio
    async def test_other_failure_is_reported(self, initialized_client, fake_jira_api):
        """A server error should be a failed outcome, not an exception."""
        fake_jira_api.fail("POST", "/version", 500)

        outcome = await initialized_client.create_version("v1.0.0")

        assert outcome.status is OutcomeStatus.FAILED
        assert not outcome.ok


class TestReleaseVersion:
    """Tests for find_version and release_version."""

    @pytest.mark.asyncio
    async def test_find_version_exact_name(self, client, fake_jira_api):
        fake_jira_api.versions.extend(
            [
                {"id": "1", "name": "Mobile v1.0.0"},
                {"id": "2", "name": "v1.0.0"},
            ]
        )

        version = await client.find_version("v1.0.0")

        assert version.id == "2"
        assert await client.find_version("v2.0.0") is None

    @pytest.mark.asyncio
    async def test_release(self, client, fake_jira_api):
        fake_jira_api.versions.append({"id": "20000", "name": "v1.0.0", "released": False})

        outcome = await client.release_version("v1.0.0")

        assert outcome.status is OutcomeStatus.APPLIED
        assert fake_jira_api.sent("PUT", "/version/20000") == [{"released": True}]
        assert fake_jira_api.versions[0]["released"] is True

    @pytest.mark.asyncio
    async def test_released_false_sends_no_update(self, client, fake_jira_api):
        fake_jira_api.versions.append({"id": "20000", "name": "v1.0.0", "released": False})

        outcome = await client.release_version("v1.0.0", released=False)

        assert outcome.status is OutcomeStatus.SKIPPED
        assert fake_jira_api.sent("GET", "/project/VP/versions") == [None]
        assert fake_jira_api.sent("PUT") == []

    @pytest.mark.asyncio
    async def test_missing_version_is_skipped(self, client, fake_jira_api):
        outcome = await client.release_version("v9.9.9")

        assert outcome.status is OutcomeStatus.SKIPPED
        assert "not found" in outcome.message
        assert fake_jira_api.sent("PUT") == []

    @pytest.mark.asyncio
    async def test_lookup_failure_is_reported(self, client, fake_jira_api):
        fake_jira_api.fail("GET", "/project/VP/versions", 500)

        outcome = await client.release_version("v1.0.0")

        assert outcome.status is OutcomeStatus.FAILED

    @pytest.mark.asyncio
    async def test_update_failure_is_reported(self, client, fake_jira_api):
        fake_jira_api.versions.append({"id": "20000", "name": "v1.0.0", "released": False})
        fake_jira_api.fail("PUT", "/version/20000", 500)

        outcome = await client.release_version("v1.0.0")

        assert outcome.status is OutcomeStatus.FAILED
