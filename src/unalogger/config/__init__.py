"""
unalogger Configuration Module.

Nested settings, one class per concern, each with its own environment prefix:

    from unalogger.config import settings

    settings.logging.level          # UNA_LOG_LEVEL
    settings.error_reporting.service  # UNA_ERROR_REPORTING_SERVICE
"""

from functools import cached_property

from pydantic_settings import BaseSettings, SettingsConfigDict

from .error_reporting import ErrorReportingSettings
from .logging import LogFormat, LoggingSettings, LogLevel


class Settings(BaseSettings):
    """Composite settings aggregating the logging and error-reporting domains."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @cached_property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()

    @cached_property
    def error_reporting(self) -> ErrorReportingSettings:
        return ErrorReportingSettings()

    @property
    def log_level(self) -> str:
        return self.logging.level.value

    @property
    def log_format(self) -> str:
        return self.logging.format.value


# Singleton instance
settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "LoggingSettings",
    "ErrorReportingSettings",
    "LogLevel",
    "LogFormat",
]
