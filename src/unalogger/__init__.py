"""
unalogger: structured logging facade with error reporting.

Provides leveled JSON logging compatible with Google Cloud Logging and an
opt-in path that forwards errors and escaped exceptions to Google Cloud Error
Reporting.

Usage:
    import unalogger

    log = unalogger.new_logger("billing")
    log.info("invoice sent", "invoice_id", 42)

    unalogger.init_error_reporting(unalogger.ServiceIdentity("my-project", "billing", "v1.0"))
    with unalogger.report_panics():
        run_job()
    unalogger.close_client()

The module-level functions operate on a process-wide default context. Hosts
that prefer explicit wiring create their own ``LoggingContext``.

Library: structlog + orjson for rendering, google-cloud-error-reporting for
the remote backend, pydantic-settings for configuration.
"""

from __future__ import annotations

import threading
from typing import Any, Optional

from .context import LoggingContext
from .exceptions import (
    REPANIC_PREFIX,
    FileRedirectFailed,
    InitError,
    InvalidArguments,
    ProgrammerError,
    RepanickedError,
    ReportSubmissionError,
    UnaLoggerError,
)
from .facade import UnaLogger
from .guard import F, PanicReportGuard
from .levels import Level, parse_level
from .reporting import ErrorReportClient, ReportContext, ServiceIdentity

_default_context: Optional[LoggingContext] = None
_default_lock = threading.Lock()


def default_context() -> LoggingContext:
    """Return the process-wide context, creating it on first use."""
    global _default_context
    with _default_lock:
        if _default_context is None:
            _default_context = LoggingContext()
        return _default_context


def set_default_context(context: Optional[LoggingContext]) -> None:
    """Install ``context`` as the process-wide context (``None`` resets it)."""
    global _default_context
    with _default_lock:
        _default_context = context


def new_logger(name: str, file_name: Optional[str] = None) -> UnaLogger:
    return default_context().new_logger(name, file_name)


def set_level(level: Level | str) -> None:
    default_context().set_global_level(level)


def init_error_reporting(identity: Optional[ServiceIdentity] = None) -> ErrorReportClient:
    return default_context().init_error_reporting(identity)


def setup_error_reporting(
    identity: Optional[ServiceIdentity] = None,
    report_context: Optional[ReportContext] = None,
) -> tuple[ErrorReportClient, PanicReportGuard]:
    return default_context().setup_error_reporting(identity, report_context)


def close_client() -> None:
    default_context().close_client()


def report_error(err: Any) -> None:
    default_context().report_error(err)


def report_panics(report_context: Optional[ReportContext] = None) -> PanicReportGuard:
    return default_context().report_panics(report_context)


def catch_and_report(func: F) -> F:
    return default_context().catch_and_report(func)


__all__ = [
    "REPANIC_PREFIX",
    "ErrorReportClient",
    "FileRedirectFailed",
    "InitError",
    "InvalidArguments",
    "Level",
    "LoggingContext",
    "PanicReportGuard",
    "ProgrammerError",
    "RepanickedError",
    "ReportContext",
    "ReportSubmissionError",
    "ServiceIdentity",
    "UnaLogger",
    "UnaLoggerError",
    "catch_and_report",
    "close_client",
    "default_context",
    "init_error_reporting",
    "new_logger",
    "parse_level",
    "report_error",
    "report_panics",
    "set_default_context",
    "set_level",
    "setup_error_reporting",
]
