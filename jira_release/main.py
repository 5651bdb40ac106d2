"""CLI entry point for jira-release."""

import asyncio
import sys
from pathlib import Path

import click
import structlog

from jira_release.action import run
from jira_release.actions.context import EventContext
from jira_release.actions.core import ActionsCore
from jira_release.config.settings import ReleaseSettings
from jira_release.engine.extractor import extract_issue_keys
from jira_release.engine.version import derive_version_name
from jira_release.exceptions import ConfigurationError
from jira_release.providers.github_rest import GitHubRestProvider
from jira_release.utils.logging_config import LOG_FORMATS, configure_logging

log = structlog.get_logger(__name__)


@click.group()
@click.option("--log-level", default="INFO", help="Logging level")
@click.option(
    "--log-format",
    type=click.Choice(LOG_FORMATS),
    default=None,
    help="Log output format (default: actions inside GitHub Actions, console otherwise)",
)
def cli(log_level: str, log_format: str | None) -> None:
    """jira-release: apply GitHub releases to Jira fix versions."""
    configure_logging(log_level, log_format)


@cli.command(name="run")
@click.option("--config", "config_path", default=None, help="YAML settings file (instead of action inputs)")
@click.option("--event-path", default=None, help="Event payload JSON (default: $GITHUB_EVENT_PATH)")
def run_command(config_path: str | None, event_path: str | None) -> None:
    """Synchronize the release of the triggering event into Jira."""
    core = ActionsCore()
    try:
        settings = ReleaseSettings.from_yaml(config_path) if config_path else None
        context = EventContext.from_path(event_path)
    except ConfigurationError as e:
        core.set_failed(e.message)
        sys.exit(core.exit_code)

    try:
        exit_code = asyncio.run(run(core, context, settings))
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    sys.exit(exit_code)


@cli.command(name="version-name")
@click.argument("tag")
@click.option("--prefix", default=None, help="Label placed before the version")
def version_name_command(tag: str, prefix: str | None) -> None:
    """Print the Jira version name derived from TAG."""
    name = derive_version_name(tag, prefix)
    if name is None:
        click.echo(f"Error: Could not determine version name from release tag: {tag}", err=True)
        sys.exit(1)
    click.echo(name)


@cli.command(name="extract-keys")
@click.option("--project-prefix", required=True, help="Jira project key, e.g. VP")
@click.option("--text", default=None, help="Release notes text")
@click.option("--file", "file_path", type=click.Path(exists=True, dir_okay=False), help="File with release notes")
@click.option("--github-token", envvar="GITHUB_TOKEN", default="", help="Token for resolving pull request links")
@click.option("--github-api-url", envvar="GITHUB_API_URL", default="https://api.github.com")
@click.option("--github-server-url", envvar="GITHUB_SERVER_URL", default="https://github.com")
def extract_keys_command(
    project_prefix: str,
    text: str | None,
    file_path: str | None,
    github_token: str,
    github_api_url: str,
    github_server_url: str,
) -> None:
    """Print the issue keys referenced by release notes, one per line.

    Reads --text, --file, or standard input. Nothing is changed in Jira.
    """
    if text is None:
        text = Path(file_path).read_text(encoding="utf-8") if file_path else sys.stdin.read()

    async def _extract() -> list[str]:
        provider = GitHubRestProvider(github_token, base_url=github_api_url, server_url=github_server_url)
        async with provider:
            return await extract_issue_keys(text, project_prefix, provider)

    for key in asyncio.run(_extract()):
        click.echo(key)


if __name__ == "__main__":
    cli()
