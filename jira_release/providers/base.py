"""
Abstract base classes for providers.

Issue-key discovery only needs one thing from the code-hosting platform:
the title and description of a pull request referenced by URL. Keeping that
behind an interface lets the extractor run against any platform (or a fake
in tests).
"""

import re
from abc import ABC, abstractmethod

from jira_release.models.domain import ChangeRequest


class ChangeRequestProvider(ABC):
    """Abstract source of change requests (pull/merge requests).

    Implementations never raise on lookup failures: a change request that
    cannot be resolved is reported as ``None`` so that one bad link in the
    release notes does not abort discovery.
    """

    @property
    @abstractmethod
    def url_pattern(self) -> re.Pattern[str]:
        """Pattern matching change-request URLs in free text."""
        pass

    @abstractmethod
    async def get_change_request(self, owner: str, repo: str, number: int) -> ChangeRequest | None:
        """Fetch a change request by repository and number.

        Returns:
            The change request, or None if it could not be resolved for any
            reason (not found, no access, transport error).
        """
        pass

    @abstractmethod
    async def fetch_change_request(self, url: str) -> ChangeRequest | None:
        """Fetch a change request by its web URL.

        Returns:
            The change request, or None if the URL is malformed or the
            change request could not be resolved.
        """
        pass

    def find_change_request_urls(self, text: str) -> list[str]:
        """Return every change-request URL in ``text``, in order of appearance."""
        return [match.group(0) for match in self.url_pattern.finditer(text or "")]
