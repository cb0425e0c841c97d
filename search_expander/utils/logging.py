from __future__ import annotations

import logging
import os

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def setup_logging(level: str | int | None = None) -> None:
    """
    Configure logging for the expander and its host.
    Falls back to EXPANDER_LOG_LEVEL, then INFO.
    """
    if level is None:
        level = os.getenv("EXPANDER_LOG_LEVEL", "INFO")

    if isinstance(level, str):
        level = _LEVELS.get(level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    # aiohttp is chatty at DEBUG; keep it at the app's floor of WARNING.
    logging.getLogger("aiohttp").setLevel(max(level, logging.WARNING))
