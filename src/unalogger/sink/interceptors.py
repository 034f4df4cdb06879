"""
Interceptor for capturing standard library and third-party logs.
"""

from __future__ import annotations

import logging

from unalogger.levels import Level

from .core import StructuredSink


def _to_level(levelno: int) -> Level:
    if levelno >= logging.CRITICAL:
        return Level.FATAL
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.INFO:
        return Level.INFO
    return Level.DEBUG


class RedirectStdLibHandler(logging.Handler):
    """
    Redirect standard library logging records into a structured sink.

    Records are written locally only; they are never forwarded to the
    error-reporting backend. CRITICAL records do not trigger the fatal path.
    """

    def __init__(self, sink: StructuredSink, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._sink = sink

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # Skip structlog's own records to avoid loops
            if "structlog" in record.name:
                return

            fields = {"stdlib_logger": record.name, "stdlib_level": record.levelname}
            if record.exc_info and record.exc_info[1] is not None:
                fields["error"] = str(record.exc_info[1])

            self._sink.write(_to_level(record.levelno), record.getMessage(), fields)
        except Exception:
            self.handleError(record)


def install_stdlib_redirect(sink: StructuredSink, level: int = logging.INFO) -> RedirectStdLibHandler:
    """Replace the root logger's handlers with a redirect into ``sink``."""
    handler = RedirectStdLibHandler(sink)
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    return handler
