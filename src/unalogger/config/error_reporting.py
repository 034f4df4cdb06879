"""
Error Reporting Configuration.

Identity and delivery settings for Google Cloud Error Reporting.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ErrorReportingSettings(BaseSettings):
    """
    Error reporting settings.
    Prefix: UNA_ERROR_REPORTING_
    """

    model_config = SettingsConfigDict(
        env_prefix="UNA_ERROR_REPORTING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    project_id: Optional[str] = Field(
        default=None,
        description="GCP project ID (falls back to the ambient credentials' project)",
    )
    service: Optional[str] = Field(default=None, description="Service name reported with each error")
    version: Optional[str] = Field(default=None, description="Service version reported with each error")
    timeout: float = Field(
        default=5.0,
        gt=0,
        description="Deadline in seconds for synchronous reports on the crash path",
    )
