"""
Panic-report guard.

Wraps a unit of work; if an exception escapes it, the exception is reported
synchronously to the error-reporting backend and a ``RepanickedError`` is
raised in its place so unwinding continues:

    with context.report_panics():
        run_job()

The guard is one-shot: once it has fired, firing it again does nothing.
"""

from __future__ import annotations

import functools
import threading
from types import TracebackType
from typing import TYPE_CHECKING, Any, Callable, Optional, TypeVar

from unalogger.exceptions import ProgrammerError, ReportSubmissionError, RepanickedError
from unalogger.reporting import ReportContext

if TYPE_CHECKING:
    from unalogger.context import LoggingContext

F = TypeVar("F", bound=Callable[..., Any])


def describe_fault(exc: BaseException) -> str:
    """Display string for a fault; falls back to the type name for empty messages."""
    return str(exc) or type(exc).__name__


class PanicReportGuard:
    """Scope-exit action that reports an in-flight exception and re-raises it wrapped."""

    def __init__(self, context: LoggingContext, report_context: Optional[ReportContext] = None) -> None:
        self._context = context
        self._report_context = report_context
        self._fired = False
        self._lock = threading.Lock()

    @property
    def fired(self) -> bool:
        return self._fired

    def __enter__(self) -> PanicReportGuard:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_value: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> bool:
        self.fire(exc_value)
        return False

    def fire(self, exc: Optional[BaseException] = None) -> None:
        """Run the guard against ``exc`` (the in-flight exception, if any).

        Raises:
            ProgrammerError: If error reporting was never initialized.
            RepanickedError: After reporting ``exc``.
        """
        with self._lock:
            if self._fired:
                return
            self._fired = True

        client = self._context.client
        if client is None:
            raise ProgrammerError("report_panics requires init_error_reporting() to be called first")

        # SystemExit, KeyboardInterrupt and friends keep unwinding untouched
        if exc is None or not isinstance(exc, Exception):
            return

        display = describe_fault(exc)
        try:
            client.submit_sync(exc, self._report_context)
        except ReportSubmissionError as report_exc:
            self._context.internal_error("panic report failed", report_exc, panic=display)

        raise RepanickedError(display) from exc

    def __call__(self, func: F) -> F:
        """Decorate ``func`` so each call runs under a fresh guard."""
        context = self._context
        report_context = self._report_context

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with PanicReportGuard(context, report_context):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]
