"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from datetime import timezone, tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from .errors import ConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class StorageConfig(BaseModel):
    data_file: str = "data/trades.json"
    backup_dir: str = "."  # Where `export` writes dated backups


class AnalyticsConfig(BaseModel):
    combination_min_count: int = Field(default=2, ge=1)  # Noise floor
    combination_top_n: int = Field(default=5, ge=1)
    breakdown_top_n: int = Field(default=10, ge=1)
    timezone: str = "UTC"  # Calendar buckets and window midnights

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value.upper() == "UTC":
            return "UTC"
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @property
    def tzinfo(self) -> tzinfo:
        if self.timezone == "UTC":
            return timezone.utc
        return ZoneInfo(self.timezone)


class CoachConfig(BaseModel):
    enabled: bool = True
    api_key_env: str = "ANTHROPIC_API_KEY"  # Name of env var holding the key
    base_url: str = "https://api.anthropic.com"
    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 1024
    timeout_seconds: float = 60.0
    recent_trades: int = Field(default=20, ge=1)  # Prompt context size


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    storage: StorageConfig = Field(default_factory=StorageConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    coach: CoachConfig = Field(default_factory=CoachConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "TRADEPULSE_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).  A path that does
            not exist is ignored so a default location can always be passed.
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            try:
                with open(path, "rb") as f:
                    data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if overrides:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value

    return Settings(**data)
