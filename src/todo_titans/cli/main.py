# src/todo_titans/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console client on one
asyncio event loop (all controller callbacks happen on that loop).
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import close_app_state, create_app_state
from ..config import get_settings
from ..connectors.console_connector import run_console
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(state: AppState) -> None:
    try:
        await run_console(state)
    finally:
        await close_app_state(state)


def main() -> None:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_app_state(settings=settings)

    try:
        asyncio.run(_run(state))
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt, shutting down...")
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
