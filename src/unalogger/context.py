"""
Logging context: the state shared by every logger of a host application.

A ``LoggingContext`` owns
- the logger registry, used to fan a global level change out to every logger;
- the one-shot schema defaults flag;
- the error-reporting client handle.

All three are guarded by one lock. File creation and network calls happen
outside of it.
"""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path
from typing import Any, Callable, Optional, TextIO

from unalogger.config import Settings
from unalogger.config import settings as default_settings
from unalogger.exceptions import FileRedirectFailed, ProgrammerError, ReportSubmissionError
from unalogger.facade import UnaLogger
from unalogger.guard import F, PanicReportGuard
from unalogger.levels import Level, parse_level
from unalogger.reporting import ClientFactory, ErrorReportClient, ReportContext, ServiceIdentity
from unalogger.sink import LogSchema, RedirectStdLibHandler, StructuredSink, install_stdlib_redirect, terminate

INTERNAL_LOGGER_NAME = "unalogger"


class LoggingContext:
    """Registry of loggers plus the error-reporting client they report to.

    Args:
        settings: Configuration source; defaults to the environment-driven
            ``unalogger.config.settings``.
        schema: Rendering schema shared by all sinks of this context.
        client_factory: Builds the Google Error Reporting client (injectable
            for tests).
        exit_fn: Process exit hook used by ``fatal``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        schema: Optional[LogSchema] = None,
        client_factory: Optional[ClientFactory] = None,
        exit_fn: Callable[[int], Any] = terminate,
    ) -> None:
        self._settings = settings or default_settings
        self._schema = schema or LogSchema()
        self._client_factory = client_factory
        self._exit_fn = exit_fn

        self._lock = threading.Lock()
        self._loggers: list[UnaLogger] = []
        self._defaults_applied = False
        self._level = parse_level(self._settings.log_level)
        self._client: Optional[ErrorReportClient] = None
        self._internal: Optional[StructuredSink] = None

    # =========================================================================
    # State
    # =========================================================================

    @property
    def schema(self) -> LogSchema:
        return self._schema

    @property
    def level(self) -> Level:
        return self._level

    @property
    def defaults_applied(self) -> bool:
        return self._defaults_applied

    @property
    def loggers(self) -> tuple[UnaLogger, ...]:
        with self._lock:
            return tuple(self._loggers)

    @property
    def client(self) -> Optional[ErrorReportClient]:
        return self._client

    # =========================================================================
    # Internal logging
    # =========================================================================

    def _apply_defaults_locked(self) -> None:
        if not self._defaults_applied:
            self._schema.apply_cloud_defaults()
            self._defaults_applied = True

    def _internal_sink(self) -> StructuredSink:
        if self._internal is None:
            with self._lock:
                self._apply_defaults_locked()
            self._internal = StructuredSink(
                INTERNAL_LOGGER_NAME,
                schema=self._schema,
                writer=sys.stderr,
                exit_fn=self._exit_fn,
            )
        return self._internal

    def internal_error(self, msg: str, err: BaseException, **fields: Any) -> None:
        """Log a library failure locally. Never reported remotely."""
        record: dict[str, Any] = {"error": str(err)}
        code = getattr(err, "code", None)
        if code:
            record["code"] = code
        record.update(fields)
        self._internal_sink().write(Level.ERROR, msg, record)

    def _on_report_failure(self, exc: ReportSubmissionError) -> None:
        self.internal_error("error report failed", exc)

    # =========================================================================
    # Logger registry
    # =========================================================================

    def _open_target(self, file_name: str) -> tuple[Optional[TextIO], Optional[FileRedirectFailed]]:
        path = Path(file_name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            return open(path, "w", encoding="utf-8"), None
        except OSError as exc:
            return None, FileRedirectFailed(path=str(path), reason=exc.strerror or str(exc))

    def new_logger(self, name: str, file_name: Optional[str] = None) -> UnaLogger:
        """Create and register a logger.

        Output goes to ``file_name`` (or the configured ``UNA_LOG_FILE_PATH``)
        when that file can be created, otherwise to stdout. A failed redirect
        is kept on ``logger.redirect_failure`` and logged once.
        """
        log_settings = self._settings.logging
        target = file_name or log_settings.file_path

        writer: Optional[TextIO] = None
        failure: Optional[FileRedirectFailed] = None
        if target:
            writer, failure = self._open_target(target)

        sink = StructuredSink(
            name,
            schema=self._schema,
            writer=writer,
            level=self._level,
            fmt=log_settings.format.value,
            logger_width=log_settings.console_logger_width,
            exit_fn=self._exit_fn,
        )
        logger = UnaLogger(name, sink, self, redirect_failure=failure)

        with self._lock:
            sink.set_level(self._level)
            self._loggers.append(logger)
            self._apply_defaults_locked()

        if failure is not None:
            self.internal_error("log file redirect failed", failure, logger=name)
        return logger

    def set_global_level(self, level: Level | str) -> None:
        """Set ``level`` on every registered logger and on loggers created afterwards."""
        resolved = parse_level(level)
        with self._lock:
            self._level = resolved
            for logger in self._loggers:
                logger.underlying().set_level(resolved)

    def intercept_stdlib(self, name: str = "stdlib", level: int = logging.INFO) -> RedirectStdLibHandler:
        """Route root ``logging`` records through a registered logger named ``name``."""
        logger = self.new_logger(name)
        return install_stdlib_redirect(logger.underlying(), level)

    # =========================================================================
    # Error reporting
    # =========================================================================

    def init_error_reporting(self, identity: Optional[ServiceIdentity] = None) -> ErrorReportClient:
        """Create the error-reporting client and make it the context's client.

        A previous client is replaced without being closed; call
        ``close_client`` first if it holds resources that matter.

        Raises:
            InitError: If the client cannot be constructed.
        """
        report_settings = self._settings.error_reporting
        if identity is None:
            identity = ServiceIdentity(
                project_id=report_settings.project_id,
                service=report_settings.service,
                version=report_settings.version,
            )

        client = ErrorReportClient(
            identity,
            timeout=report_settings.timeout,
            client_factory=self._client_factory,
            on_failure=self._on_report_failure,
        )
        with self._lock:
            previous, self._client = self._client, client
        if previous is not None and not previous.closed:
            self._internal_sink().write(
                Level.DEBUG,
                "replaced error reporting client without closing it",
                {"service": previous.identity.service},
            )
        return client

    def setup_error_reporting(
        self,
        identity: Optional[ServiceIdentity] = None,
        report_context: Optional[ReportContext] = None,
    ) -> tuple[ErrorReportClient, PanicReportGuard]:
        """Initialize reporting and return the client with a guard bound to this context."""
        client = self.init_error_reporting(identity)
        return client, self.report_panics(report_context)

    def close_client(self) -> None:
        """Close the error-reporting client.

        The closed client stays on the context: a guard fired afterwards still
        re-raises (its report fails and is logged locally), and ``report_error``
        becomes a no-op.

        Raises:
            ProgrammerError: If no client was initialized or it is already closed.
        """
        with self._lock:
            client = self._client
        if client is None:
            raise ProgrammerError("close_client() called without a prior init_error_reporting()")
        if client.closed:
            raise ProgrammerError("close_client() called on an already closed client")
        client.close()

    def report_error(self, err: Any) -> None:
        """Report ``err`` in the background. No-op without a client."""
        client = self._client
        if client is None:
            return
        client.submit_async(err)

    def report_error_sync(self, err: Any) -> None:
        """Report ``err`` and wait, bounded by the configured deadline. No-op without a client."""
        client = self._client
        if client is None:
            return
        try:
            client.submit_sync(err)
        except ReportSubmissionError as exc:
            self.internal_error("error report failed", exc)

    def report_panics(self, report_context: Optional[ReportContext] = None) -> PanicReportGuard:
        """Guard for a unit of work; see ``PanicReportGuard``."""
        return PanicReportGuard(self, report_context)

    def catch_and_report(self, func: F, *, report_context: Optional[ReportContext] = None) -> F:
        """Decorator: run ``func`` under a fresh panic-report guard on every call."""
        return self.report_panics(report_context)(func)
