"""
Logging setup.

The curses selector owns the terminal, so structured logs go to a JSON-lines
file instead of stdout/stderr.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

import structlog

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_log_stream: TextIO | None = None


def configure_logging(log_file: Path | None, level: str = "info") -> None:
    """
    Route structlog output to `log_file` (stderr when None).

    Unknown level names fall back to info. A log file that cannot be opened
    also falls back to stderr. Reconfiguring closes the previous file.
    """
    global _log_stream

    if _log_stream is not None:
        _log_stream.close()
        _log_stream = None

    factory = structlog.PrintLoggerFactory(file=sys.stderr)
    open_error = None
    if log_file is not None:
        log_file = Path(log_file).expanduser()
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            _log_stream = log_file.open("a", encoding="utf-8")
        except OSError as exc:
            open_error = str(exc)
        else:
            factory = structlog.WriteLoggerFactory(file=_log_stream)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            LEVELS.get(level.lower(), logging.INFO)
        ),
        logger_factory=factory,
        cache_logger_on_first_use=False,
    )

    if open_error is not None:
        structlog.get_logger().warning(
            "log_file_unavailable", log_file=str(log_file), error=open_error
        )
