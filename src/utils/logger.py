"""Logging setup shared by the scanner, API, and CLI entry points."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Attach a stdout handler to the root logger, once.

    Later calls leave existing handlers alone, so library users who
    configured logging themselves keep their setup.

    Args:
        level: Logging level name; unknown names fall back to INFO.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    root = logging.getLogger()

    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(numeric_level)


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for ``name`` (usually ``__name__``)."""
    return logging.getLogger(name)
