"""Logging for the label scan CLI and API.

Log records go to stderr so the CLI's JSON output on stdout stays
parseable. ``make_match_logger`` turns extraction match events into
log records when match tracing is switched on.
"""

import logging
import sys
from collections.abc import Callable
from typing import Any, TextIO

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Install a single root handler for the CLI or API process.

    Does nothing if the root logger already has handlers, so a host
    application (or the test runner) keeps its own setup.

    Args:
        level: Level name from ``log_level`` in the app config. Unknown
            names fall back to INFO.
        stream: Destination stream, stderr by default.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()

    if root.handlers:
        return

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)
    root.setLevel(numeric_level)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a ``labelscan`` module."""
    return logging.getLogger(name)


def make_match_logger(
    logger: logging.Logger, level: int = logging.DEBUG
) -> Callable[[Any], None]:
    """Build an extraction diagnostic sink that writes to ``logger``.

    Args:
        logger: Logger receiving one record per matched field.
        level: Level of the emitted records.

    Returns:
        A callable accepting a ``MatchEvent``.
    """

    def _sink(event: Any) -> None:
        where = (
            f"line {event.line_number}"
            if event.line_number is not None
            else "joined text"
        )
        logger.log(
            level,
            "%s=%r from %s (pattern %s, %s pass)",
            event.field_name,
            event.value,
            where,
            event.pattern,
            event.pass_name,
        )

    return _sink
