"""
Log levels understood by the facade and their string mapping.
"""

from __future__ import annotations

from enum import IntEnum


class Level(IntEnum):
    """Severity thresholds, numerically aligned with the stdlib ``logging`` levels."""

    DEBUG = 10
    INFO = 20
    ERROR = 40
    FATAL = 50


# structlog method name used to emit each level
METHOD_NAMES: dict[Level, str] = {
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.ERROR: "error",
    Level.FATAL: "critical",
}

_METHOD_LEVELS: dict[str, Level] = {
    "debug": Level.DEBUG,
    "info": Level.INFO,
    "error": Level.ERROR,
    "critical": Level.FATAL,
    "fatal": Level.FATAL,
}

_ALIASES: dict[str, Level] = {
    "DEBUG": Level.DEBUG,
    "INFO": Level.INFO,
    "ERROR": Level.ERROR,
    "ERR": Level.ERROR,
    "FATAL": Level.FATAL,
    "CRITICAL": Level.FATAL,
}


def parse_level(value: Level | str | int) -> Level:
    """Coerce a level name, number or ``Level`` into a ``Level``.

    Raises:
        ValueError: If the value does not name a known level.
    """
    if isinstance(value, Level):
        return value
    if isinstance(value, int):
        return Level(value)
    level = _ALIASES.get(str(value).strip().upper())
    if level is None:
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def level_for_method(method_name: str) -> Level:
    """Map a structlog method name back to its level (unknown names count as INFO)."""
    return _METHOD_LEVELS.get(method_name, Level.INFO)
