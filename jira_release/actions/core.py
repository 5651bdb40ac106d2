"""Inputs, outputs and failure reporting for the GitHub Actions runtime.

The runner passes action inputs as ``INPUT_<NAME>`` environment variables
and collects outputs from the file named by ``$GITHUB_OUTPUT``. This module
wraps both so the rest of the code never touches the environment directly.

Example:
    >>> core = ActionsCore()
    >>> prefix = core.get_input("project-prefix", required=True)
    >>> core.set_output("jira_issue_keys", ["VP-1", "VP-2"])
"""

import json
import os
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

from jira_release.exceptions import ConfigurationError

log = structlog.get_logger(__name__)

TRUE_VALUES = ("true", "True", "TRUE")
FALSE_VALUES = ("false", "False", "FALSE")


class ActionsCore:
    """Process-wide input/output facility of an action run.

    Attributes:
        outputs: Every output set during the run, by name
        failed: Failure message, once :meth:`set_failed` has been called
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self.environ = os.environ if environ is None else environ
        self.outputs: dict[str, Any] = {}
        self.failed: str | None = None

    @property
    def exit_code(self) -> int:
        return 1 if self.failed is not None else 0

    def get_input(self, name: str, required: bool = False) -> str:
        """Read an action input.

        Both ``INPUT_JIRA-HOST`` (runner convention) and ``INPUT_JIRA_HOST``
        (composite actions, shells) are accepted.

        Raises:
            ConfigurationError: If ``required`` and the input is empty
        """
        env_name = f"INPUT_{name.replace(' ', '_').upper()}"
        value = self.environ.get(env_name)
        if value is None:
            value = self.environ.get(env_name.replace("-", "_"), "")
        value = value.strip()

        if required and not value:
            raise ConfigurationError(f"Input required and not supplied: {name}")
        return value

    def get_boolean_input(self, name: str, default: bool = False) -> bool:
        """Read a boolean input using the YAML 1.2 core schema spellings."""
        value = self.get_input(name)
        if not value:
            return default
        if value in TRUE_VALUES:
            return True
        if value in FALSE_VALUES:
            return False
        raise ConfigurationError(
            f"Input does not meet YAML 1.2 'Core Schema' specification: {name}\n"
            "Support boolean input list: `true | True | TRUE | false | False | FALSE`"
        )

    def set_output(self, name: str, value: Any) -> None:
        """Set an action output; non-string values are written as JSON."""
        serialized = value if isinstance(value, str) else json.dumps(value)
        self.outputs[name] = value

        output_file = self.environ.get("GITHUB_OUTPUT")
        if output_file:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            with Path(output_file).open("a", encoding="utf-8") as f:
                f.write(f"{name}<<{delimiter}\n{serialized}\n{delimiter}\n")
        else:
            print(f"::set-output name={name}::{serialized}")

        log.debug("output_set", name=name, value=serialized)

    def set_failed(self, message: str) -> None:
        """Mark the run as failed with a human-readable message."""
        self.failed = message
        log.error(message)
