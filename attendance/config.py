"""Attendance manager configuration loaded from environment variables."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class AttendanceConfig(BaseSettings):
    """Settings are read from ATTENDANCE_* environment variables or a local .env file."""

    # Export
    export_extension: str = Field(
        default="xlsx",
        description="Extension used in generated export file names",
    )
    single_sheet_name: str = Field(
        default="Attendance List",
        description="Sheet name of a single-subject export",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "ATTENDANCE_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


_config: Optional[AttendanceConfig] = None


def get_config() -> AttendanceConfig:
    """Get the configuration singleton."""
    global _config
    if _config is None:
        _config = AttendanceConfig()
    return _config


def reset_config() -> None:
    global _config
    _config = None
