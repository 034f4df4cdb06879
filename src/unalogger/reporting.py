"""
Google Cloud Error Reporting client wrapper.

Wraps ``google.cloud.error_reporting.Client`` with the two delivery modes the
facade needs: fire-and-forget submission on a background worker, and a
synchronous, deadline-bounded submission for the crash path.
"""

from __future__ import annotations

import queue
import threading
import traceback
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Optional

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import error_reporting

from unalogger.exceptions import InitError, ReportSubmissionError

ClientFactory = Callable[..., Any]
FailureCallback = Callable[[ReportSubmissionError], None]


@dataclass(frozen=True)
class ServiceIdentity:
    """Who is reporting: project, service name and version."""

    project_id: Optional[str] = None
    service: Optional[str] = None
    version: Optional[str] = None


@dataclass(frozen=True)
class ReportContext:
    """Optional request details attached to a report."""

    user: Optional[str] = None
    http_context: Optional[error_reporting.HTTPContext] = None


def format_error(error: Any) -> str:
    """Render an error for the backend.

    Exceptions carrying a traceback are rendered with it so the backend can
    group them; everything else uses its display string.
    """
    if isinstance(error, BaseException) and error.__traceback__ is not None:
        return "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return str(error)


class ErrorReportClient:
    """Handle to the remote error-reporting endpoint.

    Args:
        identity: Project/service/version reported with every error.
        timeout: Default deadline in seconds for ``submit_sync``.
        client_factory: Builds the underlying Google client; defaults to
            ``google.cloud.error_reporting.Client``.
        on_failure: Called with a ``ReportSubmissionError`` when a
            fire-and-forget submission fails.

    Raises:
        InitError: If the underlying client cannot be constructed.
    """

    def __init__(
        self,
        identity: ServiceIdentity,
        *,
        timeout: float = 5.0,
        client_factory: Optional[ClientFactory] = None,
        on_failure: Optional[FailureCallback] = None,
    ) -> None:
        factory = client_factory or error_reporting.Client
        try:
            self._client = factory(
                project=identity.project_id,
                service=identity.service,
                version=identity.version,
            )
        except (GoogleAuthError, GoogleAPIError, OSError, ValueError, TypeError) as exc:
            raise InitError(
                project_id=identity.project_id,
                service=identity.service,
                reason=str(exc) or type(exc).__name__,
            ) from exc

        self._identity = identity
        self._timeout = timeout
        self._on_failure = on_failure
        self._closed = False
        self._lock = threading.Lock()
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        # daemon threads: a hung report must never hold up interpreter exit
        self._worker = threading.Thread(target=self._drain, name="unalogger-report", daemon=True)
        self._worker.start()

    @property
    def identity(self) -> ServiceIdentity:
        return self._identity

    @property
    def closed(self) -> bool:
        return self._closed

    def _send(self, message: str, report_context: Optional[ReportContext]) -> None:
        if report_context is None:
            self._client.report(message)
        else:
            self._client.report(message, http_context=report_context.http_context, user=report_context.user)

    def _drain(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                return
            message, report_context, future = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                self._send(message, report_context)
            except Exception as exc:
                future.set_exception(exc)
            else:
                future.set_result(None)

    def _check_delivery(self, message: str, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None or self._on_failure is None:
            return
        self._on_failure(ReportSubmissionError(reason=str(exc) or type(exc).__name__, message=message))

    def submit_async(self, error: Any, report_context: Optional[ReportContext] = None) -> Optional[Future]:
        """Queue a report without waiting for it. Returns None once closed."""
        message = format_error(error)
        future: Future = Future()
        future.add_done_callback(lambda f: self._check_delivery(message, f))
        with self._lock:
            if self._closed:
                return None
            self._queue.put((message, report_context, future))
        return future

    def submit_sync(
        self,
        error: Any,
        report_context: Optional[ReportContext] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Deliver a report and wait for it, at most ``timeout`` seconds.

        The delivery runs on its own daemon thread, so a report still hanging
        after the deadline does not keep the process alive.

        Raises:
            ReportSubmissionError: If delivery fails or the deadline passes.
        """
        message = format_error(error)
        if self._closed:
            raise ReportSubmissionError(reason="client is closed", message=message)

        deadline = self._timeout if timeout is None else timeout
        outcome: list[Optional[BaseException]] = []

        def deliver() -> None:
            try:
                self._send(message, report_context)
            except Exception as exc:
                outcome.append(exc)
            else:
                outcome.append(None)

        sender = threading.Thread(target=deliver, name="unalogger-report-sync", daemon=True)
        sender.start()
        sender.join(deadline)

        if not outcome:
            raise ReportSubmissionError(reason=f"timed out after {deadline}s", message=message)
        exc = outcome[0]
        if exc is not None:
            raise ReportSubmissionError(reason=str(exc) or type(exc).__name__, message=message) from exc

    def close(self, timeout: Optional[float] = None) -> None:
        """Wait for queued reports, at most ``timeout`` seconds, then release the transport."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(None)
        self._worker.join(self._timeout if timeout is None else timeout)
        close = getattr(self._client, "close", None)
        if close is not None:
            close()
