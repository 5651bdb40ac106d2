"""Configuration for jira-release.

Example:
    >>> from jira_release.config import ReleaseSettings
    >>> settings = ReleaseSettings.from_yaml("jira-release.yaml")
    >>> settings.jira_base_url
    'https://your-domain.atlassian.net'
"""

from jira_release.config.settings import ReleaseSettings

__all__ = ["ReleaseSettings"]
