"""Shared logger for the signaling relay."""

import logging

from rich.logging import RichHandler

LOGGER_NAME = "sigrelay"


def define_log_level(level: str = "INFO", name: str = LOGGER_NAME) -> logging.Logger:
    """Configure and return the shared relay logger.

    Calling this again replaces the handler instead of stacking a new one,
    so the CLI can adjust the level after import.
    """
    _logger = logging.getLogger(name)
    _logger.setLevel(level.upper())

    for handler in list(_logger.handlers):
        _logger.removeHandler(handler)

    handler = RichHandler(rich_tracebacks=True, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    _logger.addHandler(handler)
    _logger.propagate = False
    return _logger


logger = define_log_level()
