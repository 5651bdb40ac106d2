"""Jira Cloud client implementation using direct REST API (v3) calls.

All HTTP and transport failures are converted into
:class:`~jira_release.exceptions.ExternalServiceError` here, and every
response body is decoded into a schema from
:mod:`jira_release.models.jira`, so callers deal with domain models and
project exceptions only.

Example:
    >>> async with JiraRestClient("your-domain", "me@example.com", token, "VP") as jira:
    ...     await jira.initialize()
    ...     issue = await jira.fetch_issue("VP-123")
    ...     await jira.add_version(issue.key, "v1.4.0")
"""

import base64
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from jira_release.exceptions import (
    ExternalServiceError,
    InvalidTransitionError,
    JiraReleaseError,
    NotFoundError,
    ResponseDecodeError,
)
from jira_release.models.domain import Issue, Outcome
from jira_release.models.jira import JiraIssue, JiraProject, JiraTransitions, JiraVersion
from jira_release.utils.connection_pool import HTTPConnectionPool

log = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

ISSUE_FIELDS = "issuetype,fixVersions,status,components,parent"

# Jira answers a duplicate version name with 400; some proxies map it to 409
VERSION_CONFLICT_STATUSES = (400, 409)

_VERSION_LIST = TypeAdapter(list[JiraVersion])


def basic_auth_header(email: str, token: str) -> str:
    """Build the ``Authorization`` value for Jira basic auth."""
    credentials = base64.b64encode(f"{email}:{token}".encode()).decode("ascii")
    return f"Basic {credentials}"


def normalize_base_url(host: str) -> str:
    """Turn ``your-domain``, ``jira.example.com`` or a full URL into a base URL."""
    host = host.strip().rstrip("/")
    if host.startswith(("http://", "https://")):
        return host
    if "." not in host:
        host = f"{host}.atlassian.net"
    return f"https://{host}"


class JiraRestClient:
    """Authenticated facade over the Jira REST API for one project."""

    def __init__(
        self,
        host: str,
        email: str,
        token: str,
        project_key: str,
        timeout: float = 30.0,
    ):
        """Initialize Jira client.

        Credentials are combined into a single Authorization header once,
        here, and reused for every request.

        Args:
            host: Jira site name, host name or base URL
            email: Account email
            token: API token
            project_key: Key of the project versions are managed in
            timeout: Request timeout in seconds
        """
        self.base_url = normalize_base_url(host)
        self.api_base = f"{self.base_url}/rest/api/3"
        self.project_key = project_key
        self.project_id: str | None = None
        self._pool = HTTPConnectionPool(
            base_url=self.api_base,
            timeout=timeout,
            headers={
                "Authorization": basic_auth_header(email, token),
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
        )

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._pool.close()

    async def __aenter__(self) -> "JiraRestClient":
        await self._pool.initialize()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and convert failures into project exceptions.

        Raises:
            NotFoundError: If Jira answers 404
            ExternalServiceError: For any other error status or transport failure
        """
        try:
            response = await self._pool.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            error_cls = NotFoundError if status == 404 else ExternalServiceError
            raise error_cls(
                f"Jira {method} {path} failed",
                status_code=status,
                response_text=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Jira {method} {path} request failed: {e}") from e
        return response

    @staticmethod
    def _decode(model: type[ModelT], response: httpx.Response) -> ModelT:
        try:
            return model.model_validate(response.json())
        except (ValidationError, ValueError) as e:
            raise ResponseDecodeError(f"Unexpected {model.__name__} response: {e}") from e

    async def initialize(self) -> None:
        """Resolve and cache the id of the configured project."""
        response = await self._request("GET", f"/project/{self.project_key}")
        project = self._decode(JiraProject, response)
        self.project_id = project.id
        log.info("jira_project_resolved", project=self.project_key, project_id=self.project_id)

    async def fetch_issue(self, key: str) -> Issue:
        """Get a single issue.

        Raises:
            NotFoundError: If the issue does not exist
            ExternalServiceError: On any other request or decode failure
        """
        log.debug("fetch_issue", issue=key)
        response = await self._request("GET", f"/issue/{key}", params={"fields": ISSUE_FIELDS})
        return self._decode(JiraIssue, response).to_issue(key)

    async def create_version(self, name: str) -> Outcome:
        """Create an unreleased version in the project.

        A version that already exists is reported as skipped; any other
        failure is reported as failed. Neither raises.
        """
        if self.project_id is None:
            raise JiraReleaseError("Jira client is not initialized; call initialize() first")

        try:
            await self._request(
                "POST",
                "/version",
                json={"name": name, "released": False, "projectId": self.project_id},
            )
        except ExternalServiceError as e:
            if e.status_code in VERSION_CONFLICT_STATUSES:
                log.info("version_exists", version=name, status=e.status_code)
                return Outcome.skipped(f"Version {name} might already exist: {e}")
            log.warning("version_create_failed", version=name, error=str(e))
            return Outcome.failed(f"Failed to create version {name}: {e}")

        log.info("version_created", version=name)
        return Outcome.applied(f"Created version: {name}")

    async def find_version(self, name: str) -> JiraVersion | None:
        """Look up a project version by exact name."""
        response = await self._request("GET", f"/project/{self.project_key}/versions")
        try:
            versions = _VERSION_LIST.validate_python(response.json())
        except (ValidationError, ValueError) as e:
            raise ResponseDecodeError(f"Unexpected versions response: {e}") from e
        return next((version for version in versions if version.name == name), None)

    async def release_version(self, name: str, released: bool = True) -> Outcome:
        """Mark a version as released.

        The version is always looked up first. With ``released=False`` no
        update is sent. A missing version is reported as skipped, request
        failures as failed; nothing raises.
        """
        try:
            version = await self.find_version(name)
        except ExternalServiceError as e:
            log.warning("version_lookup_failed", version=name, error=str(e))
            return Outcome.failed(f"Failed to release version {name}: {e}")

        if version is None:
            log.warning("version_not_found", version=name)
            return Outcome.skipped(f"Version {name} not found")

        if not released:
            log.info("version_release_skipped", version=name, version_id=version.id)
            return Outcome.skipped(f"Version {name} left unreleased")

        try:
            await self._request("PUT", f"/version/{version.id}", json={"released": True})
        except ExternalServiceError as e:
            log.warning("version_release_failed", version=name, error=str(e))
            return Outcome.failed(f"Failed to release version {name}: {e}")

        log.info("version_released", version=name, version_id=version.id)
        return Outcome.applied(f"Released version: {name}")

    async def add_version(self, key: str, name: str) -> None:
        """Add a fix version to an issue."""
        await self._request(
            "PUT",
            f"/issue/{key}",
            json={"update": {"fixVersions": [{"add": {"name": name}}]}},
        )

    async def add_component(self, key: str, name: str) -> None:
        """Add a component to an issue."""
        await self._request(
            "PUT",
            f"/issue/{key}",
            json={"update": {"components": [{"add": {"name": name}}]}},
        )

    async def update_status(self, key: str, status: str) -> None:
        """Move an issue to the status with the given name (case-insensitive).

        Raises:
            InvalidTransitionError: If no available transition leads to ``status``
        """
        response = await self._request("GET", f"/issue/{key}/transitions")
        transitions = self._decode(JiraTransitions, response).transitions

        wanted = status.casefold()
        transition = next((t for t in transitions if t.to.name.casefold() == wanted), None)
        if transition is None:
            raise InvalidTransitionError(key, status)

        await self._request(
            "POST",
            f"/issue/{key}/transitions",
            json={"transition": {"id": transition.id}},
        )
        log.debug("issue_transitioned", issue=key, status=transition.to.name, transition_id=transition.id)
