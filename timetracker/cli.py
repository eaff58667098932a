"""
Command-line entry point.

Usage:
    timetracker --database timetracker.sqlite
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import yaml

from timetracker import __version__
from timetracker.domain.errors import ConfigurationError, TimeTrackerError
from timetracker.infra.config import AppSettings, get_settings
from timetracker.infra.logging_setup import configure_logging
from timetracker.infra.repository import Store
from timetracker.ui.navigator import Navigator
from timetracker.ui.terminal import TerminalSession

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timetracker",
        description="Track time spent on projects and tasks from the terminal.",
    )
    parser.add_argument(
        "-d", "--database",
        required=True,
        help="path to the SQLite database file (created if missing)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


async def run_app(database: str, settings: AppSettings) -> None:
    """Open the store and drive the UI until the user quits"""
    store = await Store.open(database)
    try:
        with TerminalSession(settings) as term:
            term.input_source.start()
            navigator = Navigator(store, term.renderer, term.input_source)
            await navigator.run()
    finally:
        await store.close()


def load_configuration() -> AppSettings:
    """Read settings and start file logging, reporting bad values as ConfigurationError"""
    try:
        settings = get_settings()
        configure_logging(settings)
    except (ValueError, OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_configuration()
    except ConfigurationError as e:
        # Logging may not be set up, so report on stderr only
        print(f"error: {e}", file=sys.stderr)
        return 1

    logger.info(f"Starting {settings.app_name} {__version__} with database {args.database}")

    try:
        asyncio.run(run_app(args.database, settings))
    except TimeTrackerError as e:
        logger.exception("Fatal error")
        print(f"error: {e}", file=sys.stderr)
        return 1

    logger.info("Exited normally")
    return 0
