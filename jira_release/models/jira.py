"""Response shapes of the Jira Cloud REST API (v3).

Only the fields this project reads are declared; everything else in the
payload is ignored. Decoding happens once, in
:class:`jira_release.providers.jira_rest.JiraRestClient`, so assumptions
about the tracker's JSON live in this module alone.
"""

from pydantic import BaseModel, ConfigDict, Field

from jira_release.models.domain import Issue, IssueStatus


class _JiraModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class JiraProject(_JiraModel):
    id: str
    key: str | None = None


class JiraNamed(_JiraModel):
    """Any resource reference that carries a name (version, component, status)."""

    name: str
    id: str | None = None


class JiraIssueType(_JiraModel):
    subtask: bool = False


class JiraParent(_JiraModel):
    key: str


class JiraIssueFields(_JiraModel):
    issuetype: JiraIssueType
    fix_versions: list[JiraNamed] = Field(default_factory=list, alias="fixVersions")
    status: JiraNamed | None = None
    components: list[JiraNamed] = Field(default_factory=list)
    parent: JiraParent | None = None


class JiraIssue(_JiraModel):
    key: str | None = None
    issue_fields: JiraIssueFields = Field(alias="fields")

    def to_issue(self, key: str) -> Issue:
        """Convert to the domain model, keyed by the key that was requested."""
        status = None
        if self.issue_fields.status is not None:
            status = IssueStatus(name=self.issue_fields.status.name, id=self.issue_fields.status.id or "")

        return Issue(
            key=key,
            is_subtask=self.issue_fields.issuetype.subtask,
            fix_versions=[version.name for version in self.issue_fields.fix_versions],
            status=status,
            components=frozenset(component.name for component in self.issue_fields.components),
            parent_key=self.issue_fields.parent.key if self.issue_fields.parent else None,
        )


class JiraVersion(_JiraModel):
    id: str
    name: str
    released: bool = False


class JiraTransition(_JiraModel):
    id: str
    name: str
    to: JiraNamed


class JiraTransitions(_JiraModel):
    transitions: list[JiraTransition] = Field(default_factory=list)
