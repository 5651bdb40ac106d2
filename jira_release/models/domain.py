"""
Domain models for release synchronization.

These models are the normalized internal representation of tracker issues,
hosting-platform change requests and run results. Provider-specific JSON is
decoded into them at the client boundary (see ``jira_release.models.jira``).

Example:
    Building an issue from a tracker fetch::

        issue = Issue(
            key="VP-124",
            is_subtask=True,
            fix_versions=["v0.0.14"],
            status=IssueStatus(name="In Review", id="10003"),
            components=frozenset({"mobile"}),
            parent_key="VP-100",
        )
        assert issue.project == "VP"
        assert issue.parent_project == "VP"
"""

from dataclasses import dataclass, field

from jira_release.enums import OutcomeStatus


def project_of(key: str) -> str:
    """Return the project part of an issue key (``"VP-12"`` -> ``"VP"``)."""
    return key.split("-")[0]


@dataclass(frozen=True)
class IssueStatus:
    """Current workflow state of an issue."""

    name: str
    id: str


@dataclass(frozen=True)
class Issue:
    """Tracker issue state at fetch time.

    Instances are never mutated locally. A failed fetch is represented by
    :meth:`sentinel`, an issue with an empty key that every filter drops.
    """

    key: str
    """Issue key of the form ``<PROJECT>-<number>``."""

    is_subtask: bool = False
    """Whether the issue type is a subtask type."""

    fix_versions: list[str] = field(default_factory=list)
    """Names of the versions currently attached to the issue, in tracker order."""

    status: IssueStatus | None = None
    """Current workflow status."""

    components: frozenset[str] = field(default_factory=frozenset)
    """Names of the components currently attached to the issue."""

    parent_key: str | None = None
    """Key of the parent issue, for subtasks and child issues."""

    @property
    def project(self) -> str:
        """Project key derived from the issue key."""
        return project_of(self.key)

    @property
    def parent_project(self) -> str | None:
        """Project key derived from the parent key, if any."""
        if self.parent_key is None:
            return None
        return project_of(self.parent_key)

    @classmethod
    def sentinel(cls) -> "Issue":
        """Placeholder for an issue that could not be fetched."""
        return cls(key="")


@dataclass(frozen=True)
class ChangeRequest:
    """Title and description of a pull request referenced by a release."""

    title: str
    body: str = ""


@dataclass(frozen=True)
class Outcome:
    """Explicit result of a recoverable tracker operation.

    Example:
        >>> outcome = await jira.create_version("v1.2.0")
        >>> if outcome.status is OutcomeStatus.FAILED:
        ...     log.warning("version_not_created", reason=outcome.message)
    """

    status: OutcomeStatus
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is not OutcomeStatus.FAILED

    @classmethod
    def applied(cls, message: str = "") -> "Outcome":
        return cls(OutcomeStatus.APPLIED, message)

    @classmethod
    def skipped(cls, message: str = "") -> "Outcome":
        return cls(OutcomeStatus.SKIPPED, message)

    @classmethod
    def failed(cls, message: str = "") -> "Outcome":
        return cls(OutcomeStatus.FAILED, message)


@dataclass
class ReleaseResult:
    """Result of synchronizing one release into the tracker."""

    version_name: str
    issue_keys: list[str] = field(default_factory=list)
    """Keys of issues that passed the filter and were updated without error."""

    failed_keys: list[str] = field(default_factory=list)
    """Keys of issues whose update raised, in processing order."""

    release_outcome: Outcome | None = None
