"""Command line entry point, usable directly or as a GitHub Action step.

Inputs come from ``INPUT_<NAME>`` environment variables (the Actions
convention); options given on the command line take precedence. The token is
only read from the environment (``INPUT_GITHUB_TOKEN``).

Usage:
    python -m linked_project_columns --source-column-id <id> --target-column-id <id> [--dry-run]
"""

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Mapping, Sequence

from .client.api_client import ProjectColumnsClient
from .config import ActionConfig, setup_logging
from .models import ColumnSyncError
from .sync import SyncSummary, sync_columns

logger = logging.getLogger(__name__)

# argparse dests, named after the action inputs they override
_INPUT_OPTIONS = (
    "source_column_id",
    "target_column_id",
    "type_filter",
    "content_filter",
    "label_filter",
    "state_filter",
)
_FLAG_OPTIONS = ("automation_notice", "source_column_notices", "dry_run")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linked-project-columns",
        description="Mirror GitHub project columns into a target column",
    )
    parser.add_argument("--source-column-id", help="Source column id(s), comma separated")
    parser.add_argument("--target-column-id", help="Target column id")
    parser.add_argument("--type-filter", help="Only mirror this card type (note or content)")
    parser.add_argument("--content-filter", help="Regular expressions matched against card titles/notes")
    parser.add_argument("--label-filter", help="Only mirror issues/PRs with one of these labels")
    parser.add_argument("--state-filter", help="Only mirror issues/PRs in this state (open, closed, merged)")
    parser.add_argument("--automation-notice", action="store_true", default=None,
                        help="Keep a DO NOT EDIT note at the top of the target column")
    parser.add_argument("--source-column-notices", action="store_true", default=None,
                        help="Keep a header note above the cards of each source column")
    parser.add_argument("--dry-run", action="store_true", default=None,
                        help="Log planned changes without modifying the target column")
    parser.add_argument("--log-level", default=os.environ.get("LOG_LEVEL", "INFO"),
                        help="Logging level (default INFO)")
    return parser


def resolve_inputs(args: argparse.Namespace, environ: Mapping[str, str]) -> dict[str, str]:
    """Environment inputs with command line options layered on top."""
    inputs = dict(environ)
    for name in _INPUT_OPTIONS:
        value = getattr(args, name)
        if value is not None:
            inputs[f"INPUT_{name.upper()}"] = value
    for name in _FLAG_OPTIONS:
        if getattr(args, name):
            inputs[f"INPUT_{name.upper()}"] = "true"
    return inputs


def set_failed(message: str) -> None:
    """Report a failed run to the Actions runner and exit non-zero."""
    print(f"::error::{message}", flush=True)
    sys.exit(1)


async def run(config: ActionConfig) -> SyncSummary:
    async with ProjectColumnsClient(config.get_api_config()) as client:
        return await sync_columns(config, client)


def main(argv: Sequence[str] | None = None, environ: Mapping[str, str] | None = None) -> int:
    env = os.environ if environ is None else environ
    args = build_parser().parse_args(argv)
    try:
        setup_logging(args.log_level.upper(), environ=env)
        config = ActionConfig.from_env(resolve_inputs(args, env))
        asyncio.run(run(config))
    except ColumnSyncError as err:
        logger.debug("run failed", exc_info=True)
        set_failed(str(err))
    except Exception as err:  # noqa: BLE001
        # unexpected failures still end the run with their message
        logger.exception(f"run failed with {type(err).__name__}")
        set_failed(str(err))
    return 0

