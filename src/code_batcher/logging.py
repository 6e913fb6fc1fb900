from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

LOGGER_NAME = "code_batcher"

_LOGGING_CONFIGURED = False


def _route_records(filename: str | Path | None) -> None:
    """Send stdlib log records to ``filename``, or to stderr when unset.

    ``force=True`` drops whatever handlers a previous call installed.
    """
    handler: logging.Handler
    if filename:
        handler = logging.FileHandler(str(filename), encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    logging.basicConfig(level=logging.INFO, handlers=[handler], format="%(message)s", force=True)


def setup_logging(filename: str | Path | None = None) -> structlog.BoundLogger:
    """Return the package logger, emitting one JSON object per event.

    The first call wires structlog (ISO timestamp, level, exception text,
    JSON line) on top of stdlib logging and writes to stderr. Any call
    given a ``filename`` moves the output to that file, which is how the
    ``--log-file`` option takes effect after import.

    Args:
        filename: file to append log lines to, stderr if None

    Returns:
        structlog.BoundLogger: the ``code_batcher`` logger
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if filename or not _LOGGING_CONFIGURED:
        _route_records(filename)

    if not _LOGGING_CONFIGURED:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_CONFIGURED = True

    return structlog.get_logger(LOGGER_NAME)


logger = setup_logging()
