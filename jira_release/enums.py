"""Enumerations for release stages and operation outcomes."""

from enum import Enum


class ReleaseStage(str, Enum):
    """Stages of a single release synchronization run.

    A run moves strictly forward through these stages:
    INIT -> VERSION_RESOLVED -> ISSUES_DISCOVERED -> VERSION_CREATED
    -> ISSUES_FILTERED -> ISSUES_UPDATED -> VERSION_RELEASED -> DONE

    FAILED is reachable from any stage when a fatal error escapes.
    """

    INIT = "init"
    VERSION_RESOLVED = "version_resolved"
    ISSUES_DISCOVERED = "issues_discovered"
    VERSION_CREATED = "version_created"
    ISSUES_FILTERED = "issues_filtered"
    ISSUES_UPDATED = "issues_updated"
    VERSION_RELEASED = "version_released"
    DONE = "done"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class OutcomeStatus(str, Enum):
    """Result of a recoverable tracker operation.

    - applied: the change was made
    - skipped: nothing to do (version already exists, not found, no-op)
    - failed: an unexpected error occurred; the run continues regardless
    """

    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value
