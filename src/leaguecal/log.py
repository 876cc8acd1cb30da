"""
Shared logging configuration for leaguecal.

Rich-based console logging; library modules only call logging.getLogger.
"""
import logging

from rich.logging import RichHandler

LOGGER_NAME = "leaguecal"


def init_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure Rich logging for the leaguecal logger hierarchy.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG")
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = RichHandler(show_path=False)
    handler.setFormatter(logging.Formatter(
        "%(name)s: %(message)s", datefmt="[%X]",
    ))
    logger.addHandler(handler)
    logger.propagate = False

    logger.debug(f"Logging initialized at {level.upper()}")
    return logger
