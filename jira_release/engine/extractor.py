"""Discover Jira issue keys referenced by a release.

Keys are collected from the release notes themselves and from the title and
description of every pull request linked in them.
"""

import re

import structlog

from jira_release.providers.base import ChangeRequestProvider

log = structlog.get_logger(__name__)


def issue_key_pattern(project_prefix: str) -> re.Pattern[str]:
    """Pattern for keys of one project, e.g. ``VP-123`` but not ``AVP-123``."""
    return re.compile(rf"(?<![A-Za-z0-9_]){re.escape(project_prefix)}-\d+")


def find_issue_keys(text: str, project_prefix: str) -> list[str]:
    """Return every key of ``project_prefix`` in ``text``, in order of appearance."""
    return issue_key_pattern(project_prefix).findall(text or "")


async def extract_issue_keys(
    text: str,
    project_prefix: str,
    change_requests: ChangeRequestProvider,
) -> list[str]:
    """Collect the issue keys referenced by release notes.

    Linked pull requests are resolved one after the other. A pull request
    that cannot be resolved is skipped with a warning.

    Args:
        text: Release notes
        project_prefix: Jira project key whose issue keys are collected
        change_requests: Provider resolving pull request links

    Returns:
        Unique issue keys, sorted
    """
    pattern = issue_key_pattern(project_prefix)
    keys: set[str] = set()

    for key in pattern.findall(text or ""):
        log.debug("issue_key_found", source="release_notes", key=key)
        keys.add(key)

    for url in change_requests.find_change_request_urls(text):
        log.debug("processing_pull_request", url=url)
        change_request = await change_requests.fetch_change_request(url)
        if change_request is None:
            log.warning("pull_request_skipped", url=url, reason="missing info")
            continue

        for source, content in (("title", change_request.title), ("body", change_request.body)):
            for key in pattern.findall(content or ""):
                log.debug("issue_key_found", source=f"pull_request_{source}", url=url, key=key)
                keys.add(key)

    result = sorted(keys)
    log.info("issue_keys_extracted", keys=result)
    return result
