# src/logtiming/config.py
"""
Configuration schema and loading for logtiming.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Example YAML:
    logging:
      level: INFO
      json_output: true
    timing:
      completion_level: DEBUG
      abandonment_level: ERROR
      warning_threshold_ms: 250
"""

from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from logtiming.clock import DEFAULT_CLOCK, Clock
from logtiming.enums import LogLevel
from logtiming.leveled import LeveledOperation, operation_at
from logtiming.protocols import LoggerSink

_INTERNAL_DYNACONF_KEYS = frozenset({"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"})


def _coerce_level(value: Any) -> Any:
    """Accept level names in any case ("warning", "INFO") as well as numbers."""
    if isinstance(value, str):
        name = value.strip().upper()
        if name == "WARN":
            name = "WARNING"
        if name in LogLevel.__members__:
            return LogLevel[name]
        if name.isdigit():
            return int(name)
    return value


class LoggingSettings(BaseModel):
    """Output configuration passed to logtiming.logging.configure_logging()."""

    model_config = {"frozen": True}

    level: LogLevel = Field(default=LogLevel.INFO, description="Minimum level written by the root logger")
    json_output: bool = Field(default=False, description="Render JSON instead of console output")

    @field_validator("level", mode="before")
    @classmethod
    def parse_level(cls, v: Any) -> Any:
        return _coerce_level(v)

    @property
    def level_name(self) -> str:
        return logging.getLevelName(int(self.level))


class TimingSettings(BaseModel):
    """Levels and escalation threshold for configured operations."""

    model_config = {"frozen": True}

    completion_level: LogLevel = Field(default=LogLevel.INFO, description="Level of completion events")
    abandonment_level: LogLevel = Field(default=LogLevel.WARNING, description="Level of abandonment events")
    warning_threshold_ms: float | None = Field(
        default=None,
        gt=0,
        description="Raise events to WARNING when the operation ran longer than this",
    )

    @field_validator("completion_level", "abandonment_level", mode="before")
    @classmethod
    def parse_level(cls, v: Any) -> Any:
        return _coerce_level(v)

    @property
    def warning_threshold(self) -> timedelta | None:
        if self.warning_threshold_ms is None:
            return None
        return timedelta(milliseconds=self.warning_threshold_ms)

    def create_factory(self, sink: LoggerSink, *, clock: Clock = DEFAULT_CLOCK) -> LeveledOperation:
        """Build a gated operation factory for these levels on ``sink``."""
        return operation_at(
            sink,
            self.completion_level,
            self.abandonment_level,
            self.warning_threshold,
            clock=clock,
        )


class LogTimingSettings(BaseModel):
    """Top-level settings."""

    model_config = {"frozen": True}

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    timing: TimingSettings = Field(default_factory=TimingSettings)


def load_settings(config_path: Path) -> LogTimingSettings:
    """Load settings from a YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (LOGTIMING_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic schema - lowest priority

    Environment variable format: LOGTIMING_TIMING__warning_threshold_ms=500.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="LOGTIMING",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in _INTERNAL_DYNACONF_KEYS}
    raw_config = {k: _lower_keys(v) for k, v in raw_config.items()}

    return LogTimingSettings(**raw_config)


def _lower_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value
