"""Fetch referenced issues and drop the ones that must not be updated."""

import asyncio

import structlog

from jira_release.exceptions import JiraReleaseError
from jira_release.models.domain import Issue
from jira_release.providers.jira_rest import JiraRestClient

log = structlog.get_logger(__name__)


async def _fetch_or_sentinel(client: JiraRestClient, key: str) -> Issue:
    try:
        return await client.fetch_issue(key)
    except JiraReleaseError as e:
        log.warning("issue_fetch_failed", issue=key, error=str(e))
        return Issue.sentinel()


def exclusion_reason(
    issue: Issue,
    version_name: str,
    skip_subtask: bool,
    skip_child: bool,
) -> str | None:
    """Return why ``issue`` is excluded, or None if it should be updated.

    Checks run in a fixed order: unfetched, subtask, child, already tagged.
    """
    if not issue.key:
        return "unfetched"
    if skip_subtask and issue.is_subtask:
        return "subtask"
    # Any parent link, or a parent in the same project, counts as a child
    if skip_child and (issue.parent_key or issue.project == issue.parent_project):
        return "child"
    if version_name in issue.fix_versions:
        return "already_tagged"
    return None


async def filter_issues(
    client: JiraRestClient,
    keys: list[str],
    version_name: str,
    skip_subtask: bool = False,
    skip_child: bool = False,
) -> list[Issue]:
    """Fetch ``keys`` concurrently and keep the issues that should get the version.

    A key whose fetch fails is logged and dropped; the rest of the batch is
    unaffected. The result keeps the order of ``keys``.
    """
    issues = await asyncio.gather(*(_fetch_or_sentinel(client, key) for key in keys))

    kept: list[Issue] = []
    for key, issue in zip(keys, issues, strict=True):
        reason = exclusion_reason(issue, version_name, skip_subtask, skip_child)
        if reason is None:
            kept.append(issue)
        else:
            log.debug("issue_excluded", issue=key, reason=reason)

    log.info("issues_filtered", requested=len(keys), kept=[issue.key for issue in kept])
    return kept
