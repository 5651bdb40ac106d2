"""
Logging configuration using structlog.

Three output formats are supported:

- ``json``: one JSON object per line
- ``console``: human-readable, colourless key=value lines
- ``actions``: GitHub Actions workflow commands, so warnings and errors
  show up as annotations on the workflow run
"""

import os
import sys
from typing import Any

import structlog

LOG_FORMATS = ("json", "console", "actions")

_COMMANDS = {
    "debug": "::debug::",
    "warning": "::warning::",
    "error": "::error::",
    "critical": "::error::",
}


def escape_command_data(value: str) -> str:
    """Escape a message for use in a workflow command."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def render_workflow_command(logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
    """Render an event as a GitHub Actions workflow command line.

    ``info`` events are printed as plain text; other levels are prefixed with
    the matching ``::level::`` command.
    """
    event_dict.pop("timestamp", None)
    level = event_dict.pop("level", method_name)
    event = str(event_dict.pop("event", ""))
    context = " ".join(f"{key}={value}" for key, value in event_dict.items())
    message = f"{event} {context}".strip()

    prefix = _COMMANDS.get(level)
    if prefix is None:
        return message
    return f"{prefix}{escape_command_data(message)}"


def default_log_format() -> str:
    """Use workflow commands when running inside GitHub Actions."""
    return "actions" if os.environ.get("GITHUB_ACTIONS") == "true" else "console"


def configure_logging(log_level: str = "INFO", log_format: str | None = None) -> None:
    """Configure structured logging.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: One of ``json``, ``console`` or ``actions``; defaults to
            :func:`default_log_format`
    """
    log_format = log_format or default_log_format()
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unknown log format: {log_format}")

    renderer: Any
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    elif log_format == "actions":
        renderer = render_workflow_command
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level.upper()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )
