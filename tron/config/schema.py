"""
Configuration Schema and Models

Defines Pydantic models for tron.yaml: the dotfiles repository root,
the managed config entries and logging options.

Author: Tron Project
License: MIT
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class LogLevel(str, Enum):
    """Logging level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DotfilesConfig(BaseModel):
    """Location of the dotfiles repository."""

    repo_path: str = Field(
        description="Repository root; may contain ~, $HOME, $APPDATA or $LOCALAPPDATA"
    )


class ConfigEntry(BaseModel):
    """A managed file that lives both in the repository and on the system."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        description="Unique identifier used on the command line"
    )
    category: str = Field(
        description="Free-form grouping label"
    )
    repo_path: str = Field(
        description="Path relative to the repository root"
    )
    system_path: str = Field(
        description="Deployed location; may contain environment tokens"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        """Reject blank names."""
        if not v.strip():
            raise ValueError("Config name must not be empty")
        return v


class LoggingConfig(BaseModel):
    """Logging options."""

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    level: LogLevel = Field(
        default=LogLevel.WARNING,
        description="Application logging level"
    )
    file: Optional[str] = Field(
        default=None,
        description="Log file path (None disables file logging)"
    )
    json_format: bool = Field(
        default=False,
        description="Emit log records as JSON"
    )
    rotation_size: int = Field(
        default=10485760,  # 10MB
        description="Log file size before rotation (bytes)"
    )
    retention_count: int = Field(
        default=5,
        description="Number of rotated log files to keep"
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.upper()
        return v


class TronConfig(BaseModel):
    """
    Root configuration model for Tron.

    Loaded from tron.yaml; the repository root and logging options can be
    overridden by environment variables.
    """

    model_config = ConfigDict(validate_assignment=True)

    dotfiles: DotfilesConfig
    config: List[ConfigEntry] = Field(
        default=[],
        description="Managed config entries"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("config")
    @classmethod
    def validate_unique_names(cls, v):
        """Ensure no duplicate entry names."""
        names = [entry.name for entry in v]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate config names detected in configuration: {', '.join(duplicates)}")
        return v
