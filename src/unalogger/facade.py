"""
Facade logger handed out to application components.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, TextIO

from unalogger.exceptions import FileRedirectFailed, InvalidArguments
from unalogger.levels import Level
from unalogger.sink import StructuredSink

if TYPE_CHECKING:
    from unalogger.context import LoggingContext


def pairs_to_fields(pairs: tuple[Any, ...], fields: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Merge alternating key/value ``pairs`` and keyword ``fields`` into one mapping.

    Keys are coerced to strings. Keyword fields win on conflicts.

    Raises:
        InvalidArguments: If ``pairs`` has an odd length.
    """
    if len(pairs) % 2:
        raise InvalidArguments(count=len(pairs))
    merged = {str(pairs[i]): pairs[i + 1] for i in range(0, len(pairs), 2)}
    if fields:
        merged.update(fields)
    return merged


def to_labels(values: dict[str, Any]) -> dict[str, str]:
    """Format every value to its display string."""
    return {key: str(value) for key, value in values.items()}


class UnaLogger:
    """Per-component logger wrapping a ``StructuredSink``.

    ``error`` and ``fatal`` attach the error and the labels to the record and
    forward the error to the context's error-reporting client, if any.
    """

    def __init__(
        self,
        name: str,
        sink: StructuredSink,
        context: LoggingContext,
        redirect_failure: Optional[FileRedirectFailed] = None,
    ) -> None:
        self._name = name
        self._sink = sink
        self._context = context
        self.redirect_failure = redirect_failure

    def __repr__(self) -> str:
        return f"UnaLogger(name={self._name!r}, level={self._sink.level.name})"

    @property
    def name(self) -> str:
        return self._name

    def underlying(self) -> StructuredSink:
        """The raw sink, for direct level queries and advanced wiring."""
        return self._sink

    def set_writer(self, writer: TextIO) -> None:
        """Send this logger's output to ``writer`` from now on."""
        self._sink.bind_writer(writer)

    def debug(self, msg: str, *pairs: Any, **fields: Any) -> None:
        if self._sink.is_debug():
            self._sink.write(Level.DEBUG, msg, pairs_to_fields(pairs, fields))

    def info(self, msg: str, *pairs: Any, **fields: Any) -> None:
        if self._sink.is_info():
            self._sink.write(Level.INFO, msg, pairs_to_fields(pairs, fields))

    def _error_fields(self, err: Any, pairs: tuple[Any, ...], fields: dict[str, Any]) -> dict[str, Any]:
        record: dict[str, Any] = {}
        if err is not None:
            record["error"] = str(err)
        labels = to_labels(pairs_to_fields(pairs, fields))
        if labels:
            record["labels"] = labels
        return record

    def error(self, msg: str, err: Any, *pairs: Any, **fields: Any) -> None:
        """Log at error severity, then report ``err`` in the background."""
        self._sink.write(Level.ERROR, msg, self._error_fields(err, pairs, fields))
        if err is not None:
            self._context.report_error(err)

    def fatal(self, msg: str, err: Any, *pairs: Any, **fields: Any) -> None:
        """Log at fatal severity, report ``err`` synchronously, then terminate."""
        record = self._error_fields(err, pairs, fields)
        report = (lambda: self._context.report_error_sync(err)) if err is not None else None
        self._sink.fatal(msg, record, before_exit=report)
