"""Logging setup."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "trackedclient"


def setup_logging(level: str = "INFO", verbose: bool = False, console: Optional[Console] = None) -> logging.Logger:
    """Configure the package logger with a Rich handler.

    Args:
        level: Logging level name
        verbose: Force DEBUG level and show file paths
        console: Console to write to (default: stderr)

    Returns:
        The configured package logger
    """
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(log_level)

    # Replace handlers from earlier calls
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    handler.setLevel(log_level)
    logger.addHandler(handler)

    # kubernetes client logs every request at DEBUG
    if not verbose:
        logging.getLogger("kubernetes").setLevel(logging.WARNING)

    return logger
