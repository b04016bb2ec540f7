# src/smart_todo/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (loading persisted data), refreshes the
weather if the cached value is stale, then runs the console REPL.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.api import ensure_fresh_weather
from ..core.errors import ExternalDataError
from ..logging_setup import level_from_name, setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    setup_logging(log_dir=settings.data_dir, console_level=level_from_name(settings.log_level))

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)

    if settings.refresh_weather_on_start:
        try:
            asyncio.run(ensure_fresh_weather(state))
        except ExternalDataError as e:
            logger.warning("Weather unavailable at startup: %s", e)

    try:
        run_console_loop(state)
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
