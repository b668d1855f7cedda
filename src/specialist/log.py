"""Logging setup for the specialist command line."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from specialist.console import err_console

_LOGGER_NAME = "specialist"


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Send specialist log records to stderr through rich.

    Warnings and above are shown by default; ``verbose`` lowers the level
    to DEBUG.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)

    # Reset handlers so repeated invocations in one process do not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(console=err_console, show_path=verbose, rich_tracebacks=verbose)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    return logger
