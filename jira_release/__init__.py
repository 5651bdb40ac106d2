"""jira-release: apply GitHub releases to Jira.

When a release is published, every Jira issue it references (directly in
the release notes or through the linked pull requests) gets the release's
fix version, and the version is marked as released.
"""

__version__ = "2.1.0"
