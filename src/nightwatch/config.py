"""Configuration management for Nightwatch."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from nightwatch.exceptions import ConfigError
from nightwatch.models import FailurePolicy
from nightwatch.patterns import PATTERNS_FILE_ENV
from nightwatch.signals.conflicts import MAX_CONSIDERED, MAX_OVERLAPS
from nightwatch.signals.fatigue import (
    COMMIT_LIMIT,
    DEFAULT_TIMEZONE,
    FATIGUE_THRESHOLD,
    LATE_END_HOUR,
    LATE_START_HOUR,
    WINDOW_DAYS,
)
from nightwatch.signals.ownership import DEFAULT_LOOKBACK_DAYS
from nightwatch.signals.safety import SENSITIVE_PENALTY

CONFIG_FILE = ".nightwatch.json"
TIMEZONE_ENV = "NIGHTWATCH_TIMEZONE"


class FatigueConfig(BaseModel):
    """Late-night commit detection."""

    timezone: str = DEFAULT_TIMEZONE
    commit_limit: int = COMMIT_LIMIT
    window_days: int = WINDOW_DAYS
    late_start_hour: int = LATE_START_HOUR
    late_end_hour: int = LATE_END_HOUR
    threshold: int = FATIGUE_THRESHOLD


class OwnershipConfig(BaseModel):
    """Ownership fingerprint."""

    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    on_lookup_failure: FailurePolicy = FailurePolicy.SKIP


class ConflictConfig(BaseModel):
    """Overlap detection against other open PRs."""

    max_considered: int = MAX_CONSIDERED
    limit: int = MAX_OVERLAPS
    on_fetch_failure: FailurePolicy = FailurePolicy.SKIP


class ReportConfig(BaseModel):
    """Report composition."""

    sensitive_penalty: int = SENSITIVE_PENALTY
    domain_rules: list[tuple[str, str]] = Field(default_factory=list)  # empty = built-in rules


class NightwatchConfig(BaseModel):
    """Full Nightwatch configuration."""

    patterns_file: str | None = None
    cache_file_lists: bool = True
    fatigue: FatigueConfig = Field(default_factory=FatigueConfig)
    ownership: OwnershipConfig = Field(default_factory=OwnershipConfig)
    conflicts: ConflictConfig = Field(default_factory=ConflictConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)


def apply_env_overrides(config: NightwatchConfig) -> NightwatchConfig:
    """Environment variables win over the config file."""
    patterns_file = os.environ.get(PATTERNS_FILE_ENV)
    if patterns_file:
        config.patterns_file = patterns_file
    tz_name = os.environ.get(TIMEZONE_ENV)
    if tz_name:
        config.fatigue.timezone = tz_name
    return config


def load_config(root: Path, apply_env: bool = True) -> NightwatchConfig:
    """Load configuration from <root>/.nightwatch.json, then apply env overrides."""
    config_path = root / CONFIG_FILE
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text())
            config = NightwatchConfig(**data)
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            raise ConfigError(f"Invalid {CONFIG_FILE}: {e}") from e
    else:
        config = NightwatchConfig()
    return apply_env_overrides(config) if apply_env else config


def save_config(root: Path, config: NightwatchConfig) -> None:
    """Save configuration to <root>/.nightwatch.json."""
    config_path = root / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(mode="json"), indent=2))


def set_config_value(config: NightwatchConfig, key: str, value: Any) -> NightwatchConfig:
    """Set a nested config value using dot notation (e.g., 'fatigue.timezone')."""
    parts = key.split(".")
    data = config.model_dump()
    target = data
    for part in parts[:-1]:
        if part not in target or not isinstance(target[part], dict):
            raise KeyError(f"Invalid config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Invalid config key: {key}")
    target[parts[-1]] = value
    try:
        return NightwatchConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e
