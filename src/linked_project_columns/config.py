"""Action inputs and logging setup."""

import logging
import os
import re
import sys
from collections.abc import Mapping

from pydantic import BaseModel, Field, SecretStr

from .models import APIConfiguration, ConfigurationError

DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"

# A token is either wrapped in matching quotes (commas allowed inside) or a
# bare run of characters up to the next comma.
INPUT_LIST_REGEX = re.compile(r"""\s*(?:(["'])(.+?)\1|([^"',]+))\s*""")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_input(name: str, required: bool = False, environ: Mapping[str, str] | None = None) -> str:
    """Read an action input from ``INPUT_<NAME>``, stripped.

    Raises:
        ConfigurationError: if ``required`` and the input is empty
    """
    env = os.environ if environ is None else environ
    key = "INPUT_" + name.replace(" ", "_").upper()
    value = (env.get(key) or "").strip()
    if required and not value:
        raise ConfigurationError(f"Input required and not supplied: {name}")
    return value


def get_bool_input(name: str, environ: Mapping[str, str] | None = None) -> bool:
    return get_input(name, environ=environ).lower() == "true"


def parse_input_list(value: str | None) -> list[str]:
    """Split a list input into tokens.

    ``'bug, "needs, triage"'`` -> ``['bug', 'needs, triage']``
    """
    if not value:
        return []
    tokens = []
    for match in INPUT_LIST_REGEX.finditer(value):
        token = (match.group(2) or match.group(3) or "").strip()
        if token:
            tokens.append(token)
    return tokens


class ActionConfig(BaseModel):
    """Fully resolved inputs for one sync run."""

    source_column_ids: list[str]
    target_column_id: str
    github_token: SecretStr
    type_filter: str = ""
    content_filters: list[str] = Field(default_factory=list)
    label_filters: list[str] = Field(default_factory=list)
    state_filter: str = ""
    automation_notice: bool = False
    source_column_notices: bool = False
    dry_run: bool = False
    api_url: str = DEFAULT_GRAPHQL_URL
    timeout: float = 30.0
    request_delay: float = 0.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ActionConfig":
        """Resolve and validate every input.

        Required inputs are checked in the order source column, target
        column, token, before anything else is parsed.
        """
        env = os.environ if environ is None else environ

        source_column_ids = parse_input_list(get_input("source_column_id", required=True, environ=env))
        if not source_column_ids:
            raise ConfigurationError("Input required and not supplied: source_column_id")
        target_column_id = get_input("target_column_id", required=True, environ=env)
        github_token = get_input("github_token", required=True, environ=env)

        if get_input("automation_notice", environ=env):
            automation_notice = get_bool_input("automation_notice", environ=env)
        else:
            automation_notice = get_bool_input("add_note", environ=env)

        api_url = get_input("github_graphql_url", environ=env) or env.get("GITHUB_GRAPHQL_URL") or DEFAULT_GRAPHQL_URL

        return cls(
            source_column_ids=source_column_ids,
            target_column_id=target_column_id,
            github_token=SecretStr(github_token),
            type_filter=get_input("type_filter", environ=env),
            content_filters=parse_input_list(get_input("content_filter", environ=env)),
            label_filters=parse_input_list(get_input("label_filter", environ=env)),
            state_filter=get_input("state_filter", environ=env),
            automation_notice=automation_notice,
            source_column_notices=get_bool_input("source_column_notices", environ=env),
            dry_run=get_bool_input("dry_run", environ=env),
            api_url=api_url,
            timeout=_float_input("timeout", 30.0, env),
            request_delay=_float_input("request_delay", 0.0, env),
        )

    def get_api_config(self) -> APIConfiguration:
        return APIConfiguration(
            api_key=self.github_token,
            base_url=self.api_url,
            timeout=self.timeout,
            request_delay=self.request_delay,
        )


def _float_input(name: str, default: float, environ: Mapping[str, str]) -> float:
    raw = get_input(name, environ=environ)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as err:
        raise ConfigurationError(f"Input {name} must be a number, got {raw!r}") from err


class ActionsFormatter(logging.Formatter):
    """Render warnings and errors as GitHub Actions workflow commands."""

    COMMANDS = {logging.WARNING: "warning", logging.ERROR: "error", logging.CRITICAL: "error"}

    def format(self, record: logging.LogRecord) -> str:
        command = self.COMMANDS.get(record.levelno)
        if command is None:
            return super().format(record)
        # Workflow commands are single-line; escape as the runner expects
        message = record.getMessage().replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        return f"::{command}::{message}"


def setup_logging(level: int | str = logging.INFO, environ: Mapping[str, str] | None = None) -> None:
    """Attach a single stderr handler to the package logger."""
    env = os.environ if environ is None else environ
    package_logger = logging.getLogger("linked_project_columns")
    package_logger.setLevel(level)

    for handler in list(package_logger.handlers):
        if getattr(handler, "_linked_columns_handler", False):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if env.get("GITHUB_ACTIONS") == "true":
        handler.setFormatter(ActionsFormatter(LOG_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._linked_columns_handler = True  # type: ignore[attr-defined]
    package_logger.addHandler(handler)
