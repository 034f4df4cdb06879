"""
Exception hierarchy for unalogger.

All library errors share ``UnaLoggerError`` as their root so callers can catch
them in one place. A few also derive from the builtin that matches their
nature (``ValueError`` for bad arguments, ``AssertionError`` for wiring bugs,
``RuntimeError`` for re-raised faults).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

REPANIC_PREFIX = "Repanicked from logger: "


class UnaLoggerError(Exception):
    """Base exception for unalogger."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class InitError(UnaLoggerError):
    """The error-reporting client could not be constructed."""

    def __init__(self, *, project_id: Optional[str], service: Optional[str], reason: str) -> None:
        super().__init__(
            f"Failed to initialize error reporting for project '{project_id}' (service '{service}'): {reason}",
            code="INIT_FAILED",
            details={"project_id": project_id, "service": service, "reason": reason},
        )


class ReportSubmissionError(UnaLoggerError):
    """A report could not be delivered to the error-reporting backend.

    Only ever logged locally; never escalated to the caller of a logging method.
    """

    def __init__(self, *, reason: str, message: Optional[str] = None) -> None:
        super().__init__(
            f"Failed to submit error report: {reason}",
            code="REPORT_SUBMISSION_FAILED",
            details={"reason": reason, "report": message},
        )


class InvalidArguments(UnaLoggerError, ValueError):
    """Malformed key-value pairs were passed to a logging call."""

    def __init__(self, *, count: int) -> None:
        super().__init__(
            f"Key-value pairs must have an even length, got {count} argument(s)",
            code="INVALID_ARGUMENTS",
            details={"count": count},
        )


class FileRedirectFailed(UnaLoggerError):
    """The log file could not be created; output stays on the default writer."""

    def __init__(self, *, path: str, reason: str) -> None:
        super().__init__(
            f"Could not redirect log output to '{path}': {reason}",
            code="FILE_REDIRECT_FAILED",
            details={"path": path, "reason": reason},
        )


class ProgrammerError(UnaLoggerError, AssertionError):
    """Wiring bug, e.g. closing or guarding without an initialized client.

    Not meant to be caught: letting it escape terminates the process.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, code="PROGRAMMER_ERROR")


class RepanickedError(UnaLoggerError, RuntimeError):
    """Raised by the panic-report guard after an intercepted fault was reported.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, original: str) -> None:
        super().__init__(
            f"{REPANIC_PREFIX}{original}",
            code="REPANICKED",
            details={"original": original},
        )
        self.original = original
