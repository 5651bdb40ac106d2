"""Entry point of the GitHub Action: inputs in, outputs (or a failure) out."""

import structlog

from jira_release.actions.context import EventContext
from jira_release.actions.core import ActionsCore
from jira_release.config.settings import ReleaseSettings
from jira_release.engine.orchestrator import ReleaseOrchestrator
from jira_release.exceptions import ConfigurationError
from jira_release.models.domain import ReleaseResult
from jira_release.providers.github_rest import GitHubRestProvider
from jira_release.providers.jira_rest import JiraRestClient

log = structlog.get_logger(__name__)

OUTPUT_ISSUE_KEYS = "jira_issue_keys"
OUTPUT_FAILED_KEYS = "fail_jira_issue_keys"


async def _sync(settings: ReleaseSettings, context: EventContext) -> ReleaseResult | None:
    jira = JiraRestClient(
        settings.jira_host,
        settings.jira_email,
        settings.jira_token.get_secret_value(),
        settings.project_prefix,
    )

    release = context.release
    if release is None:
        raise ConfigurationError("No release data found in the event payload")

    github = GitHubRestProvider(
        settings.github_token.get_secret_value(),
        base_url=settings.github_api_url,
        server_url=settings.github_server_url,
    )
    async with jira, github:
        return await ReleaseOrchestrator(settings, jira, github).sync_release(release)


async def run(
    core: ActionsCore | None = None,
    context: EventContext | None = None,
    settings: ReleaseSettings | None = None,
) -> int:
    """Run the action once.

    Args:
        core: Input/output facility; defaults to the process environment
        context: Triggering event; defaults to ``$GITHUB_EVENT_PATH``
        settings: Settings to use instead of the action inputs

    Returns:
        Process exit code: 0 on success (including partial success), 1 if the
        run failed
    """
    core = core or ActionsCore()
    try:
        settings = settings or ReleaseSettings.from_action_inputs(core)
        context = context or EventContext.from_path()
        result = await _sync(settings, context)
    except Exception as e:
        log.debug("run_failed", exc_info=True)
        core.set_failed(str(e))
        return core.exit_code

    if result is None:
        return core.exit_code

    core.set_output(OUTPUT_ISSUE_KEYS, result.issue_keys)
    core.set_output(OUTPUT_FAILED_KEYS, result.failed_keys)

    if result.failed_keys:
        log.warning("issues_update_failed", keys=result.failed_keys)

    return core.exit_code
