"""
Release orchestrator: applies one GitHub release to Jira.

Stage Lifecycle:
    init -> version_resolved -> issues_discovered -> version_created
    -> issues_filtered -> issues_updated -> version_released -> done

Any exception escaping a stage moves the run to ``failed`` and propagates to
the caller. Failures that only concern one issue never escape: the issue is
recorded as failed and the run moves on.

Example:
    >>> orchestrator = ReleaseOrchestrator(settings, jira, github)
    >>> result = await orchestrator.sync_release(release)
    >>> result.failed_keys
    []
"""

import structlog

from jira_release.actions.context import ReleasePayload
from jira_release.config.settings import ReleaseSettings
from jira_release.engine.extractor import extract_issue_keys
from jira_release.engine.issue_filter import filter_issues
from jira_release.engine.version import derive_version_name
from jira_release.enums import ReleaseStage
from jira_release.exceptions import VersionNameError
from jira_release.models.domain import Issue, ReleaseResult
from jira_release.providers.base import ChangeRequestProvider
from jira_release.providers.jira_rest import JiraRestClient

log = structlog.get_logger(__name__)


class ReleaseOrchestrator:
    """Synchronize a release into the Jira project.

    Attributes:
        settings: Run configuration.
        jira: Jira client for the configured project.
        change_requests: Provider resolving pull request links in release notes.
        stage: Stage the current run has reached.
    """

    def __init__(
        self,
        settings: ReleaseSettings,
        jira: JiraRestClient,
        change_requests: ChangeRequestProvider,
    ) -> None:
        self.settings = settings
        self.jira = jira
        self.change_requests = change_requests
        self.stage = ReleaseStage.INIT

    def _advance(self, stage: ReleaseStage, **context: object) -> None:
        self.stage = stage
        log.debug("stage_entered", stage=str(stage), **context)

    async def sync_release(self, release: ReleasePayload) -> ReleaseResult | None:
        """Apply ``release`` to every issue it references.

        Returns:
            The keys updated and the keys that failed, or None if the release
            references no issues at all.

        Raises:
            VersionNameError: If the tag carries no version
            JiraReleaseError: If the Jira project cannot be resolved
        """
        try:
            return await self._sync(release)
        except Exception:
            log.debug("stage_failed", stage=str(self.stage))
            self.stage = ReleaseStage.FAILED
            raise

    async def _sync(self, release: ReleasePayload) -> ReleaseResult | None:
        await self.jira.initialize()

        version_name = derive_version_name(release.tag_name, self.settings.jira_version_prefix)
        if not version_name:
            raise VersionNameError("Could not determine version name from release tag")
        self._advance(ReleaseStage.VERSION_RESOLVED, version=version_name)
        log.info("processing_version", version=version_name)

        keys = await extract_issue_keys(release.body, self.settings.project_prefix, self.change_requests)
        if not keys:
            log.info("no_issues_found", detail="No Jira issues found in release notes or PRs")
            self._advance(ReleaseStage.DONE)
            return None
        self._advance(ReleaseStage.ISSUES_DISCOVERED, keys=keys)

        await self.jira.create_version(version_name)
        self._advance(ReleaseStage.VERSION_CREATED)

        issues = await filter_issues(
            self.jira,
            keys,
            version_name,
            skip_subtask=self.settings.skip_subtask,
            skip_child=self.settings.skip_child,
        )
        self._advance(ReleaseStage.ISSUES_FILTERED, count=len(issues))

        result = ReleaseResult(version_name=version_name)
        for issue in issues:
            try:
                await self._update_issue(issue, version_name)
            except Exception as e:
                log.warning("issue_update_failed", issue=issue.key, error=str(e))
                result.failed_keys.append(issue.key)
            else:
                result.issue_keys.append(issue.key)
        self._advance(ReleaseStage.ISSUES_UPDATED, updated=len(result.issue_keys), failed=len(result.failed_keys))

        result.release_outcome = await self.jira.release_version(version_name, self.settings.released)
        self._advance(ReleaseStage.VERSION_RELEASED, outcome=str(result.release_outcome.status))

        self._advance(ReleaseStage.DONE)
        return result

    async def _update_issue(self, issue: Issue, version_name: str) -> None:
        await self.jira.add_version(issue.key, version_name)
        log.info("issue_version_updated", issue=issue.key, version=version_name)

        if self.settings.component:
            await self.jira.add_component(issue.key, self.settings.component)
            log.info("issue_component_added", issue=issue.key, component=self.settings.component)

        if self.settings.status:
            await self.jira.update_status(issue.key, self.settings.status)
            log.info("issue_status_updated", issue=issue.key, status=self.settings.status)
