"""
Logging configuration for chartcore.

Importing chartcore only attaches a ``NullHandler`` to the ``"chartcore"``
logger; records propagate to whatever the host application configured.
An application that wants chartcore's own output calls ``setup_logging()``:

  - Console (stderr): DEBUG if verbose, WARNING+ otherwise
  - File: always DEBUG, only when ``log_to_file`` is set

console_format setting:
    - "simple": (default) bare messages for DEBUG/INFO, [LEVEL] prefix for WARNING+
    - "full":   same structured format as the file handler
    - "clean":  no console output at all (file logging still active if enabled)

Records carry a tag via ``extra=tagged("x")`` (registry, layer, mixin,
draw); the file format includes it so activity can be grepped.
"""

import logging
import sys
from datetime import datetime

from .config import get_settings


LOGGER_NAME = "chartcore"

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def tagged(tag: str) -> dict:
    """Return ``extra`` dict for logger calls: ``logger.debug("...", extra=tagged("x"))``."""
    return {"log_tag": tag}


class _TagFilter(logging.Filter):
    """Guarantees every record has a ``log_tag`` attribute for the formatters."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "log_tag"):
            record.log_tag = ""
        return True


class _ConsoleFormatter(logging.Formatter):
    """Console formatter: shows [LEVEL] prefix only for WARNING and above.

    DEBUG/INFO messages print bare (e.g. ``  [Bars] Drew 3 layer(s), 0 mixin(s)``).
    WARNING/ERROR messages include the level (e.g. ``  [WARNING] ...``).
    """

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return f"  [{record.levelname}] {record.getMessage()}"
        return f"  {record.getMessage()}"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Route chartcore's logger to its own console/file handlers.

    Replaces any handlers from a previous call and stops propagation to
    the root logger.

    Args:
        verbose: If True, show DEBUG level on console; otherwise WARNING+ only

    Returns:
        The configured ``"chartcore"`` logger
    """
    settings = get_settings()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # Capture everything, filter at handler level
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.filters.clear()
    logger.addFilter(_TagFilter())

    file_format = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(log_tag)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    if settings.log_to_file:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        session_timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        file_handler = logging.FileHandler(
            settings.log_dir / f"chartcore_{session_timestamp}.log", encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

    if settings.console_format != "clean":
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
        if settings.console_format == "full":
            console_handler.setFormatter(file_format)
        else:
            console_handler.setFormatter(_ConsoleFormatter())
        logger.addHandler(console_handler)
    else:
        logger.addHandler(logging.NullHandler())

    return logger


def get_logger() -> logging.Logger:
    """Return the ``"chartcore"`` logger without configuring it."""
    return logging.getLogger(LOGGER_NAME)
