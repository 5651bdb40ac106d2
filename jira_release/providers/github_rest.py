"""GitHub change-request provider implementation using PyGithub."""

import asyncio
import re
from collections.abc import Callable
from typing import TypeVar
from urllib.parse import urlparse

import structlog
from github import Auth, Github, GithubException  # type: ignore[import-not-found]
from github.PullRequest import PullRequest as GHPullRequest  # type: ignore[import-not-found]

from jira_release.models.domain import ChangeRequest
from jira_release.providers.base import ChangeRequestProvider

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a synchronous PyGithub call in a thread pool."""
    return await asyncio.to_thread(func)


def build_pull_request_pattern(server_url: str = "https://github.com") -> re.Pattern[str]:
    """Pattern for ``<server>/<owner>/<repo>/pull/<number>`` links.

    Groups: owner, repo, number.
    """
    parsed = urlparse(server_url if "://" in server_url else f"https://{server_url}")
    host = re.escape(parsed.netloc or parsed.path)
    return re.compile(rf"https?://{host}/([^/\s]+)/([^/\s]+)/pull/(\d+)")


class GitHubRestProvider(ChangeRequestProvider):
    """Resolve pull request links found in release notes."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        server_url: str = "https://github.com",
    ):
        """Initialize GitHub provider.

        Args:
            token: GitHub token with read access to the referenced repositories
            base_url: GitHub API base URL (for GitHub Enterprise)
            server_url: GitHub web URL that pull request links point to
        """
        self.token = token.strip() if token else token
        self.base_url = base_url.rstrip("/")
        self.server_url = server_url.rstrip("/")
        self._pattern = build_pull_request_pattern(self.server_url)
        self._client: Github | None = None

    @property
    def url_pattern(self) -> re.Pattern[str]:
        return self._pattern

    async def connect(self) -> None:
        """Initialize GitHub client (anonymous when no token is set)."""
        auth = Auth.Token(self.token) if self.token else None
        self._client = await _run_sync(lambda: Github(auth=auth, base_url=self.base_url))
        log.debug("github_connected", base_url=self.base_url)

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None

    async def __aenter__(self) -> "GitHubRestProvider":
        await self.connect()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.disconnect()

    def parse_pull_request_url(self, url: str) -> tuple[str, str, int] | None:
        """Split a pull request URL into owner, repository and number."""
        match = self._pattern.search(url)
        if not match:
            return None
        owner, repo, number = match.groups()
        return owner, repo, int(number)

    async def get_change_request(self, owner: str, repo: str, number: int) -> ChangeRequest | None:
        """Get pull request title and body."""
        if self._client is None:
            await self.connect()
        client = self._client
        assert client is not None

        log.debug("get_pull_request", owner=owner, repo=repo, number=number)

        def _get_pr() -> GHPullRequest:
            return client.get_repo(f"{owner}/{repo}", lazy=True).get_pull(number)

        try:
            gh_pr = await _run_sync(_get_pr)
        except GithubException as e:
            log.warning(
                "github_get_pull_request_failed",
                owner=owner,
                repo=repo,
                number=number,
                status=e.status,
                error=str(e),
            )
            return None
        except OSError as e:
            log.warning("github_unreachable", owner=owner, repo=repo, number=number, error=str(e))
            return None

        if gh_pr is None:
            log.warning("github_pull_request_not_found", owner=owner, repo=repo, number=number)
            return None

        log.debug("github_pull_request_found", number=number, title=gh_pr.title)
        return ChangeRequest(title=gh_pr.title or "", body=gh_pr.body or "")

    async def fetch_change_request(self, url: str) -> ChangeRequest | None:
        """Get pull request title and body from its web URL."""
        parts = self.parse_pull_request_url(url)
        if parts is None:
            log.warning("invalid_pull_request_url", url=url)
            return None

        owner, repo, number = parts
        return await self.get_change_request(owner, repo, number)
