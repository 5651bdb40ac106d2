"""Webhook payload of the event that triggered the workflow."""

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from jira_release.exceptions import ConfigurationError


class ReleasePayload(BaseModel):
    """The ``release`` object of a release event."""

    model_config = ConfigDict(extra="ignore")

    tag_name: str
    body: str = ""
    name: str | None = None
    html_url: str | None = None

    @field_validator("body", mode="before")
    @classmethod
    def empty_body(cls, value: Any) -> Any:
        return "" if value is None else value


class EventContext:
    """Triggering event of the current workflow run."""

    def __init__(self, payload: dict[str, Any] | None = None, event_name: str | None = None) -> None:
        self.payload = payload or {}
        self.event_name = event_name

    @classmethod
    def from_path(cls, path: str | Path | None = None, event_name: str | None = None) -> "EventContext":
        """Load the payload from ``path`` or ``$GITHUB_EVENT_PATH``.

        A missing path yields an empty payload, matching a runner with no
        event file.

        Raises:
            ConfigurationError: If the file cannot be read or is not JSON
        """
        path = path or os.environ.get("GITHUB_EVENT_PATH")
        event_name = event_name or os.environ.get("GITHUB_EVENT_NAME")
        if not path or not Path(path).exists():
            return cls({}, event_name)

        try:
            with open(path, encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read event payload {path}: {e}") from e

        if not isinstance(payload, dict):
            raise ConfigurationError("Event payload must be a JSON object")
        return cls(payload, event_name)

    @property
    def release(self) -> ReleasePayload | None:
        """Release data, or None when the event carries none."""
        data = self.payload.get("release")
        if not data:
            return None
        try:
            return ReleasePayload.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid release data in the event payload: {e}") from e
