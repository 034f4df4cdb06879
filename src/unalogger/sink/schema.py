"""
Field names and severity labels used when rendering log records.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from unalogger.levels import Level


def _default_labels() -> dict[Level, str]:
    return {
        Level.DEBUG: "debug",
        Level.INFO: "info",
        Level.ERROR: "error",
        Level.FATAL: "critical",
    }


@dataclass
class LogSchema:
    """Mutable rendering schema shared by every sink of a context.

    Starts with structlog's native names and is switched to the Cloud Logging
    vocabulary once, when the first logger is created.
    """

    level_key: str = "level"
    message_key: str = "event"
    time_key: str = "timestamp"
    level_labels: dict[Level, str] = field(default_factory=_default_labels)

    def apply_cloud_defaults(self) -> None:
        """Remap field names and labels to the Cloud Logging ``LogEntry`` format.

        https://cloud.google.com/logging/docs/reference/v2/rest/v2/LogEntry
        """
        self.level_key = "severity"
        self.message_key = "message"
        self.time_key = "timestamp"
        self.level_labels = {
            Level.DEBUG: "DEBUG",
            Level.INFO: "INFO",
            Level.ERROR: "ERROR",
            Level.FATAL: "CRITICAL",
        }

    def label(self, level: Level) -> str:
        return self.level_labels.get(level, level.name)
