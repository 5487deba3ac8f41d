"""
Unit Tests for Application Settings Configuration

Tests for:
- Default values
- Aliases and range validation on PlayerSettings and AudioSettings
- Loading nested settings from environment variables
- Log level validation
- Settings caching and clearing
"""

import pytest
from pydantic import ValidationError

from music_player.config.settings import (
    AudioSettings,
    PlayerSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

# =============================================================================
# PlayerSettings Tests
# =============================================================================


class TestPlayerSettings:
    """Unit tests for PlayerSettings configuration."""

    def test_create_with_defaults(self):
        """Should create PlayerSettings with default values."""
        player = PlayerSettings()

        assert player.default_volume == 50
        assert player.auto_advance_delay_seconds == 0.5

    def test_volume_alias(self):
        """Should accept 'volume' alias for default_volume."""
        assert PlayerSettings(volume=70).default_volume == 70

    def test_delay_alias(self):
        """Should accept 'auto_advance_delay' alias."""
        assert PlayerSettings(auto_advance_delay=1.5).auto_advance_delay_seconds == 1.5

    def test_volume_above_maximum(self):
        """Should raise ValidationError for volume above 100."""
        with pytest.raises(ValidationError, match="less than or equal to 100"):
            PlayerSettings(default_volume=101)

    def test_volume_below_minimum(self):
        """Should raise ValidationError for negative volume."""
        with pytest.raises(ValidationError, match="greater than or equal to 0"):
            PlayerSettings(default_volume=-1)

    def test_negative_delay(self):
        """Should raise ValidationError for a negative auto-advance delay."""
        with pytest.raises(ValidationError):
            PlayerSettings(auto_advance_delay_seconds=-0.1)

    def test_immutability(self):
        """Should be immutable (frozen)."""
        player = PlayerSettings()

        with pytest.raises(ValidationError):
            player.default_volume = 10


# =============================================================================
# AudioSettings Tests
# =============================================================================


class TestAudioSettings:
    """Unit tests for AudioSettings configuration."""

    def test_create_with_defaults(self):
        """Should default to the simulated backend."""
        audio = AudioSettings()

        assert audio.backend == "simulated"
        assert audio.ffplay_path == "ffplay"
        assert audio.ffprobe_path == "ffprobe"
        assert audio.tick_interval_seconds == 0.25
        assert audio.default_track_seconds == 30.0
        assert audio.rejected_uri_prefixes == ()

    def test_ffplay_backend(self):
        """Should accept the ffplay backend."""
        assert AudioSettings(backend="ffplay").backend == "ffplay"

    def test_unknown_backend(self):
        """Should reject unknown backends."""
        with pytest.raises(ValidationError):
            AudioSettings(backend="alsa")

    def test_prefixes_from_comma_string(self):
        """Should split a comma-separated prefix string."""
        audio = AudioSettings(rejected_uri_prefixes="blocked://, https://bad.example ,")

        assert audio.rejected_uri_prefixes == ("blocked://", "https://bad.example")

    def test_prefixes_from_list(self):
        """Should accept a list of prefixes via the 'reject' alias."""
        audio = AudioSettings(reject=["blocked://"])

        assert audio.rejected_uri_prefixes == ("blocked://",)

    def test_tick_interval_must_be_positive(self):
        """Should reject a zero tick interval."""
        with pytest.raises(ValidationError, match="greater than 0"):
            AudioSettings(tick_interval_seconds=0)


# =============================================================================
# Settings Tests
# =============================================================================


class TestSettings:
    """Unit tests for the top-level Settings."""

    @pytest.fixture(autouse=True)
    def isolated_env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        for name in ("ENVIRONMENT", "DEBUG", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

    def test_defaults(self):
        """Should load defaults with no environment."""
        settings = Settings()

        assert settings.environment == "development"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.player == PlayerSettings()
        assert settings.audio == AudioSettings()

    def test_nested_from_env(self, monkeypatch):
        """Should read nested settings using the '__' delimiter."""
        monkeypatch.setenv("PLAYER__DEFAULT_VOLUME", "65")
        monkeypatch.setenv("PLAYER__AUTO_ADVANCE_DELAY_SECONDS", "0.25")
        monkeypatch.setenv("AUDIO__BACKEND", "ffplay")

        settings = Settings()

        assert settings.player.default_volume == 65
        assert settings.player.auto_advance_delay_seconds == 0.25
        assert settings.audio.backend == "ffplay"

    def test_from_env_file(self, tmp_path):
        """Should read values from a .env file in the working directory."""
        (tmp_path / ".env").write_text("ENVIRONMENT=test\nPLAYER__DEFAULT_VOLUME=10\n")

        settings = Settings()

        assert settings.environment == "test"
        assert settings.player.default_volume == 10

    def test_log_level_uppercased(self, monkeypatch):
        """Should normalise the log level to upper case."""
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert Settings().log_level == "DEBUG"

    def test_invalid_log_level(self):
        """Should raise ValidationError for an unknown log level."""
        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings(log_level="VERBOSE")

    def test_invalid_environment(self):
        """Should raise ValidationError for an unknown environment."""
        with pytest.raises(ValidationError):
            Settings(environment="staging")


# =============================================================================
# Caching Tests
# =============================================================================


class TestSettingsCache:
    """Tests for get_settings caching."""

    def test_get_settings_cached(self):
        """Should return the same instance on repeated calls."""
        assert get_settings() is get_settings()

    def test_clear_settings_cache(self):
        """Should build a new instance after the cache is cleared."""
        first = get_settings()
        clear_settings_cache()

        assert get_settings() is not first
