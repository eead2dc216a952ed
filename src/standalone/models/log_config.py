"""
Pydantic schema for logging configuration files.

A logging configuration file (e.g. constellation-log.yaml) replaces the
bootstrap console logger once it has been found and validated.

Example:
    level: info
    colors: false
    file: /var/log/constellation/echo.log
    append: true
    categories:
      config: debug
      signal: trace
"""

from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from standalone.models.enums import LogCategory, LogLevel
from standalone.utils.enum_helper import EnumHelper
from standalone.utils.logger import parse_log_level


def _coerce_level(value: Any) -> Any:
    # YAML 1.1 reads a bare `off` as False
    if value is False:
        return LogLevel.OFF
    if isinstance(value, str):
        return parse_log_level(value)
    return value


class LogConfig(BaseModel):
    """Permanent logger settings."""
    model_config = ConfigDict(extra="forbid")

    level: LogLevel = Field(
        LogLevel.INFO,
        description="Minimum level (error, warn, info, debug, trace, off)"
    )
    colors: bool = Field(
        True,
        description="ANSI colors on console output"
    )
    console: bool = Field(
        True,
        description="Keep writing to the console"
    )
    file: Optional[Path] = Field(
        None,
        description="Log file; relative paths are taken from the config file's directory"
    )
    append: bool = Field(
        True,
        description="Append to the log file instead of truncating it"
    )
    categories: Dict[LogCategory, LogLevel] = Field(
        default_factory=dict,
        description="Per-category minimum level overrides"
    )

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value: Any) -> Any:
        return _coerce_level(value)

    @field_validator("categories", mode="before")
    @classmethod
    def _parse_categories(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {
            EnumHelper.to_enum(LogCategory, k): _coerce_level(v)
            for k, v in value.items()
        }
