"""Domain and wire models.

Key Models:
    - Issue: Tracker issue state at fetch time
    - IssueStatus: Workflow status of an issue
    - ChangeRequest: Pull request title and description
    - Outcome: Result of a recoverable tracker operation
    - ReleaseResult: Keys updated and failed during one run

Tracker response schemas live in ``jira_release.models.jira``.
"""

from jira_release.models.domain import ChangeRequest, Issue, IssueStatus, Outcome, ReleaseResult

__all__ = ["ChangeRequest", "Issue", "IssueStatus", "Outcome", "ReleaseResult"]
