"""
Human-readable console rendering for development.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .schema import LogSchema

COLORS = {
    "reset": "\033[0m",
    "dim": "\033[2m",
    "timestamp": "\033[90m",
    "logger": "\033[35m",
    "key": "\033[34m",
}

_SEVERITY_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[1;31m",
}


def colorize(text: str, color: str) -> str:
    """Apply ANSI color to text."""
    return f"{COLORS.get(color, '')}{text}{COLORS['reset']}"


class ConsoleFormatter:
    """Renders an already-remapped record as ``time | SEVERITY | logger | message k=v``."""

    TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
    LEVEL_WIDTH = 8
    SEPARATOR = " | "

    def __init__(
        self,
        *,
        schema: LogSchema,
        logger_width: int = 24,
        use_color: bool = False,
    ) -> None:
        self._schema = schema
        self._logger_width = logger_width
        self._use_color = use_color

    @staticmethod
    def _fit_right(text: str, width: int) -> str:
        if width <= 0:
            return text
        if len(text) > width:
            text = text[-width:] if width <= 3 else "..." + text[-(width - 3) :]
        return f"{text:>{width}}"

    def _format_timestamp(self, raw: Any) -> str:
        if raw:
            try:
                dt = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
                if dt.tzinfo is None:
                    dt = dt.replace(tzinfo=timezone.utc)
                return dt.astimezone().strftime(self.TIMESTAMP_FORMAT)
            except ValueError:
                pass
        return datetime.now().strftime(self.TIMESTAMP_FORMAT)

    def _color(self, text: str, color: str) -> str:
        return colorize(text, color) if self._use_color else text

    def format(self, record: dict[str, Any]) -> str:
        schema = self._schema
        severity = str(record.get(schema.level_key, "info")).upper()
        reserved = {schema.level_key, schema.message_key, schema.time_key, "logger"}

        extras = [
            f"{self._color(str(k), 'key')}={self._color(str(v), 'dim')}"
            for k, v in record.items()
            if k not in reserved
        ]
        message = str(record.get(schema.message_key, ""))
        if extras:
            message = f"{message} " + " ".join(extras)

        level_text = self._fit_right(severity, self.LEVEL_WIDTH)
        if self._use_color and severity in _SEVERITY_COLORS:
            level_text = f"{_SEVERITY_COLORS[severity]}{level_text}{COLORS['reset']}"

        return self.SEPARATOR.join(
            [
                self._color(self._format_timestamp(record.get(schema.time_key)), "timestamp"),
                level_text,
                self._color(self._fit_right(str(record.get("logger", "root")), self._logger_width), "logger"),
                message,
            ]
        )
