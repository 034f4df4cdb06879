"""
Logging Configuration.
"""

from enum import Enum
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    ERROR = "ERROR"
    FATAL = "FATAL"


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class LoggingSettings(BaseSettings):
    """Logging output configuration."""

    model_config = SettingsConfigDict(
        env_prefix="UNA_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    level: LogLevel = Field(default=LogLevel.INFO, description="Initial global log level")
    format: LogFormat = Field(default=LogFormat.JSON, description="Output format")
    file_path: Optional[str] = Field(
        default=None,
        description="Default file to redirect logger output to (stdout when unset)",
    )
    console_logger_width: int = Field(default=24, description="Console logger column width")
