"""GitHub Actions runtime integration: inputs, outputs and the triggering event."""

from jira_release.actions.context import EventContext, ReleasePayload
from jira_release.actions.core import ActionsCore

__all__ = ["ActionsCore", "EventContext", "ReleasePayload"]
