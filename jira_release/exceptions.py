"""Custom exception hierarchy for jira-release.

Exception Hierarchy:
    JiraReleaseError (base)
    ├── ConfigurationError
    ├── VersionNameError
    ├── ExternalServiceError
    │   ├── NotFoundError
    │   └── ResponseDecodeError
    └── InvalidTransitionError

Configuration and version-name errors abort a run before any tracker
mutation. Service errors are raised by the Jira client and isolated by
the caller per issue.

Example Usage:
    >>> from jira_release.exceptions import ConfigurationError
    >>> try:
    ...     settings = ReleaseSettings.from_yaml(path)
    ... except ConfigurationError as e:
    ...     core.set_failed(e.message)
"""


class JiraReleaseError(Exception):
    """Base exception for all jira-release errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(JiraReleaseError):
    """Configuration-related errors.

    Examples:
        - Required action input not supplied
        - Invalid YAML syntax in a local configuration file
        - No release data in the event payload
    """

    pass


class VersionNameError(JiraReleaseError):
    """The release tag does not contain a MAJOR.MINOR.PATCH version."""

    pass


class ExternalServiceError(JiraReleaseError):
    """External service communication errors.

    Raised when a call to the tracker fails at the HTTP or transport
    level.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_text: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response_text: Response body text (if applicable)
        """
        self.message = message
        self.status_code = status_code
        self.response_text = response_text

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        Exception.__init__(self, full_message)


class NotFoundError(ExternalServiceError):
    """The tracker reported the requested resource as missing."""

    pass


class ResponseDecodeError(ExternalServiceError):
    """A tracker response did not match the expected schema."""

    pass


class InvalidTransitionError(JiraReleaseError):
    """No workflow transition leads an issue to the requested status.

    Attributes:
        issue_key: Issue that could not be transitioned
        status: Requested target status name
    """

    def __init__(self, issue_key: str, status: str) -> None:
        self.issue_key = issue_key
        self.status = status
        super().__init__(f"No transition to status '{status}' available for {issue_key}")
