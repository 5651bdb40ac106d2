"""
Configuration using Pydantic for type-safe settings management.

Settings come from one of three places:

- the action inputs of a GitHub Actions run (:meth:`ReleaseSettings.from_action_inputs`)
- a YAML file for local runs (:meth:`ReleaseSettings.from_yaml`)
- ``JIRA_RELEASE_*`` environment variables (plain construction)
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jira_release.exceptions import ConfigurationError
from jira_release.providers.jira_rest import normalize_base_url

if TYPE_CHECKING:
    from jira_release.actions.core import ActionsCore

PROJECT_KEY_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


class ReleaseSettings(BaseSettings):
    """Settings for one release synchronization run."""

    model_config = SettingsConfigDict(
        env_prefix="JIRA_RELEASE_",
        case_sensitive=False,
    )

    github_token: SecretStr = Field(..., description="Token for the GitHub API")
    github_api_url: str = Field(default="https://api.github.com", description="GitHub API base URL")
    github_server_url: str = Field(
        default="https://github.com", description="GitHub web URL used in pull request links"
    )
    jira_host: str = Field(..., description="Jira site name, host name or URL")
    jira_email: str = Field(..., description="Jira account email")
    jira_token: SecretStr = Field(..., description="Jira API token")
    project_prefix: str = Field(..., description="Jira project key, e.g. VP for VP-123")
    jira_version_prefix: str | None = Field(default=None, description="Label prepended to version names")
    skip_subtask: bool = Field(default=False, description="Do not update subtasks")
    skip_child: bool = Field(default=False, description="Do not update child issues")
    component: str | None = Field(default=None, description="Component added to every updated issue")
    status: str | None = Field(default=None, description="Status every updated issue is moved to")
    released: bool = Field(default=True, description="Mark the Jira version as released")

    @field_validator("jira_version_prefix", "component", "status", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("project_prefix")
    @classmethod
    def validate_project_prefix(cls, value: str) -> str:
        value = value.strip()
        if not PROJECT_KEY_PATTERN.match(value):
            raise ValueError(f"project_prefix must be a Jira project key, got: {value!r}")
        return value

    @field_validator("jira_host")
    @classmethod
    def validate_jira_host(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("jira_host must not be empty")
        return value

    @property
    def jira_base_url(self) -> str:
        """Base URL of the Jira site.

        ``your-domain`` becomes ``https://your-domain.atlassian.net``, a bare
        host name gets an ``https://`` scheme and a full URL is kept.
        """
        return normalize_base_url(self.jira_host)

    @classmethod
    def from_action_inputs(cls, core: ActionsCore) -> ReleaseSettings:
        """Build settings from the inputs of the current action run.

        Raises:
            ConfigurationError: If a required input is missing or invalid
        """
        values: dict[str, Any] = {
            "github_token": core.get_input("github-token", required=True),
            "jira_host": core.get_input("jira-host", required=True),
            "jira_email": core.get_input("jira-email", required=True),
            "jira_token": core.get_input("jira-token", required=True),
            "project_prefix": core.get_input("project-prefix", required=True),
            "jira_version_prefix": core.get_input("jira-version-prefix"),
            "skip_subtask": core.get_boolean_input("skip-subtask", default=False),
            "skip_child": core.get_boolean_input("skip-child", default=False),
            "component": core.get_input("component"),
            "status": core.get_input("status"),
            "released": core.get_boolean_input("released", default=True),
        }

        for key, env_name in (("github_api_url", "GITHUB_API_URL"), ("github_server_url", "GITHUB_SERVER_URL")):
            if core.environ.get(env_name):
                values[key] = core.environ[env_name]

        return cls._validate(values)

    @classmethod
    def from_yaml(cls, config_path: str) -> ReleaseSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} and ${VAR_NAME:-default} substitution so tokens
        can stay out of the file.

        Raises:
            ConfigurationError: If config file is invalid or missing required fields
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file) as f:
                yaml_content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        # Accept the action input spelling (jira-host) as well as jira_host
        return cls._validate({str(key).replace("-", "_"): value for key, value in config_dict.items()})

    @classmethod
    def _validate(cls, values: dict[str, Any]) -> ReleaseSettings:
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        YAML comment lines are left unchanged.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))
