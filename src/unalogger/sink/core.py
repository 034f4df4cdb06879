"""
Structured log sink built on structlog.

A ``StructuredSink`` is the leveled writer behind every facade logger. It owns
a structlog pipeline (level filter -> schema remapping -> renderer) over a
``structlog.PrintLogger`` bound to a writable text stream.
"""

from __future__ import annotations

import os
import sys
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Literal, Mapping, TextIO

import orjson
import structlog
from structlog.typing import BindableLogger, EventDict, WrappedLogger

from unalogger.levels import METHOD_NAMES, Level, level_for_method, parse_level

from .formatters import ConsoleFormatter
from .schema import LogSchema

LogFormat = Literal["console", "json"]


def orjson_dumps(v: Any, *, default: Any = None) -> str:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(
        v,
        default=default,
        option=orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC | orjson.OPT_NON_STR_KEYS,
    ).decode()


_INT64_MIN = -(2**63)
_UINT64_MAX = 2**64 - 1


def _sanitize(value: Any) -> Any:
    """Convert values orjson rejects without consulting ``default`` (big ints, odd keys)."""
    if isinstance(value, dict):
        return {str(k): _sanitize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_sanitize(v) for v in value]
    if isinstance(value, int) and not isinstance(value, bool) and not _INT64_MIN <= value <= _UINT64_MAX:
        return str(value)
    return value


def terminate(code: int) -> None:
    """Exit the process with ``code``.

    ``SystemExit`` only unwinds the current thread, so outside the main thread
    the process is ended with ``os._exit`` after flushing the std streams.
    """
    if threading.current_thread() is threading.main_thread():
        sys.exit(code)
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (AttributeError, OSError, ValueError):
            pass
    os._exit(code)


class StructuredSink:
    """Leveled structured writer.

    Args:
        name: Logger name added to every record.
        schema: Shared rendering schema (field names and severity labels).
        writer: Output stream; defaults to ``sys.stdout``.
        level: Initial threshold.
        fmt: ``"json"`` (one object per line) or ``"console"``.
        exit_fn: Called with exit code 1 after a fatal record is flushed;
            defaults to ``terminate``.
    """

    def __init__(
        self,
        name: str,
        *,
        schema: LogSchema,
        writer: TextIO | None = None,
        level: Level | str = Level.INFO,
        fmt: LogFormat = "json",
        logger_width: int = 24,
        exit_fn: Callable[[int], Any] = terminate,
    ) -> None:
        self._name = name
        self._schema = schema
        self._level = parse_level(level)
        self._fmt = fmt
        self._exit = exit_fn
        self._console = ConsoleFormatter(schema=schema, logger_width=logger_width)
        self._writer: TextIO = writer or sys.stdout
        self._logger = self._build(self._writer)

    # ------------------------------------------------------------------
    # Processors
    # ------------------------------------------------------------------

    def _filter_level(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        """Drop events below the current threshold."""
        if level_for_method(method_name) < self._level:
            raise structlog.DropEvent
        return event_dict

    def _apply_schema(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        """Place severity, message and timestamp first, under the schema's field names."""
        schema = self._schema
        record: EventDict = {
            schema.level_key: schema.label(level_for_method(method_name)),
            schema.message_key: event_dict.pop("event", ""),
            schema.time_key: datetime.now(timezone.utc).isoformat(),
            "logger": self._name,
        }
        # reserved fields win over caller fields
        for key, value in event_dict.items():
            record.setdefault(key, value)
        return record

    def _render(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
        if self._fmt == "console":
            return self._console.format(event_dict)
        try:
            return orjson_dumps(event_dict, default=repr)
        except orjson.JSONEncodeError:
            pass
        try:
            return orjson_dumps(_sanitize(event_dict), default=repr)
        except orjson.JSONEncodeError:
            # last resort: every non-string value as its repr
            return orjson_dumps({str(k): v if isinstance(v, str) else repr(v) for k, v in event_dict.items()})

    def _build(self, writer: TextIO) -> BindableLogger:
        return structlog.wrap_logger(
            structlog.PrintLogger(file=writer),
            processors=[self._filter_level, self._apply_schema, self._render],
            wrapper_class=structlog.BoundLogger,
            context_class=dict,
        )

    # ------------------------------------------------------------------
    # Capability set
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def level(self) -> Level:
        return self._level

    @property
    def writer(self) -> TextIO:
        return self._writer

    def set_level(self, level: Level | str) -> None:
        self._level = parse_level(level)

    def is_enabled(self, level: Level | str) -> bool:
        return parse_level(level) >= self._level

    def is_debug(self) -> bool:
        return self.is_enabled(Level.DEBUG)

    def is_info(self) -> bool:
        return self.is_enabled(Level.INFO)

    def bind_writer(self, writer: TextIO) -> None:
        """Redirect all further output to ``writer``."""
        self._writer = writer
        self._logger = self._build(writer)

    def write(self, level: Level | str, message: str, fields: Mapping[str, Any] | None = None) -> None:
        """Emit one record. Write failures are swallowed so logging never breaks the caller."""
        method = METHOD_NAMES[parse_level(level)]
        try:
            bound = self._logger.bind(**fields) if fields else self._logger
            getattr(bound, method)(message)
        except Exception:
            pass

    def flush(self) -> None:
        flush = getattr(self._writer, "flush", None)
        if flush is not None:
            try:
                flush()
            except (OSError, ValueError):
                pass

    def fatal(
        self,
        message: str,
        fields: Mapping[str, Any] | None = None,
        before_exit: Callable[[], Any] | None = None,
    ) -> None:
        """Emit a fatal record, flush, run ``before_exit``, then terminate through ``exit_fn``."""
        self.write(Level.FATAL, message, fields)
        self.flush()
        if before_exit is not None:
            before_exit()
        self._exit(1)
