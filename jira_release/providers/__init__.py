"""Clients for the code-hosting platform and the issue tracker.

Key Components:
    - ChangeRequestProvider: Abstract source of pull request details
    - GitHubRestProvider: GitHub implementation using PyGithub
    - JiraRestClient: Jira Cloud REST API v3 client using httpx
"""

from jira_release.providers.base import ChangeRequestProvider

__all__ = ["ChangeRequestProvider"]
