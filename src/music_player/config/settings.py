"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages


class PlayerSettings(BaseModel):
    """Playback engine behaviour."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    default_volume: int = Field(
        default=50,
        ge=0,
        le=100,
        validation_alias=AliasChoices("default_volume", "volume"),
    )
    auto_advance_delay_seconds: float = Field(
        default=0.5,
        ge=0.0,
        le=10.0,
        validation_alias=AliasChoices("auto_advance_delay_seconds", "auto_advance_delay"),
    )


class AudioSettings(BaseModel):
    """Audio backend configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    backend: Literal["simulated", "ffplay"] = "simulated"
    ffplay_path: str = "ffplay"
    ffprobe_path: str = "ffprobe"

    # Simulated backend clock
    tick_interval_seconds: float = Field(default=0.25, gt=0.0, le=5.0)
    start_latency_seconds: float = Field(default=0.05, ge=0.0, le=5.0)
    default_track_seconds: float = Field(default=30.0, gt=0.0)
    rejected_uri_prefixes: tuple[str, ...] = Field(
        default_factory=tuple,
        validation_alias=AliasChoices("rejected_uri_prefixes", "reject"),
    )

    @field_validator("rejected_uri_prefixes", mode="before")
    @classmethod
    def split_prefixes(cls, v: tuple[str, ...] | list[str] | str) -> tuple[str, ...]:
        """Accept a comma-separated string or a JSON array."""
        if isinstance(v, str):
            return tuple(p.strip() for p in v.split(",") if p.strip())
        return tuple(v)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - PLAYER__DEFAULT_VOLUME, PLAYER__AUTO_ADVANCE_DELAY_SECONDS
    - AUDIO__BACKEND, AUDIO__FFPLAY_PATH, AUDIO__TICK_INTERVAL_SECONDS, etc.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    player: PlayerSettings = Field(default_factory=PlayerSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
