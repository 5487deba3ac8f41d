"""
Tests for main.py - Main Entry Point

Tests for the main entry point including:
- Logging configuration
- Track list loading
- Argument parsing
- Exit codes for bad input
- An end-to-end run on the simulated backend
"""

import json
import logging
from unittest.mock import MagicMock, mock_open, patch

import pytest

from music_player.config.settings import AudioSettings, PlayerSettings, Settings
from music_player.main import build_parser, load_tracks, main, setup_logging


def _record(track_id, name, duration="0.03", audio=None):
    return {
        "id": track_id,
        "name": name,
        "artist_name": "Test Artist",
        "audio": audio or f"sim://{track_id}",
        "duration": duration,
    }


@pytest.fixture
def track_file(tmp_path):
    path = tmp_path / "tracks.json"
    path.write_text(json.dumps([_record("1", "First"), _record("2", "Second")]))
    return path


@pytest.fixture
def fast_settings():
    return Settings(
        _env_file=None,
        player=PlayerSettings(auto_advance_delay_seconds=0.0),
        audio=AudioSettings(
            tick_interval_seconds=0.01,
            start_latency_seconds=0.0,
            rejected_uri_prefixes=("blocked://",),
        ),
    )


class TestLoggingSetup:
    """Tests for logging configuration."""

    def _make_valid_config(self) -> dict:
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "handlers": {},
            "loggers": {"asyncio": {"level": "WARNING"}},
            "root": {"level": "INFO", "handlers": []},
        }

    def test_dictconfig_called_when_json_exists(self):
        """Should call dictConfig when logging_config.json exists."""
        config = self._make_valid_config()
        m = mock_open(read_data=json.dumps(config))
        with (
            patch("builtins.open", m),
            patch("logging.config.dictConfig") as mock_dc,
        ):
            setup_logging()

            mock_dc.assert_called_once_with(config)

    def test_fallback_to_basicconfig_when_json_missing(self):
        """Should fallback to basicConfig when logging_config.json is missing."""
        with (
            patch("builtins.open", side_effect=FileNotFoundError),
            patch("logging.basicConfig") as mock_bc,
        ):
            setup_logging()

            mock_bc.assert_called_once()
            assert mock_bc.call_args[1]["level"] == logging.INFO

    def test_fallback_to_basicconfig_when_json_malformed(self):
        """Should fallback to basicConfig when JSON is malformed."""
        m = mock_open(read_data="{invalid json")
        with (
            patch("builtins.open", m),
            patch("logging.basicConfig") as mock_bc,
        ):
            setup_logging()

            mock_bc.assert_called_once()

    def test_root_logger_level_overridden(self):
        """Should override root logger level with the provided log_level."""
        m = mock_open(read_data=json.dumps(self._make_valid_config()))
        with (
            patch("builtins.open", m),
            patch("logging.config.dictConfig"),
            patch("logging.getLogger") as mock_get_logger,
        ):
            mock_root = MagicMock()
            mock_get_logger.return_value = mock_root

            setup_logging("DEBUG")

            mock_root.setLevel.assert_called_once_with(logging.DEBUG)


class TestLoadTracks:
    """Tests for reading track lists."""

    def test_load_array(self, track_file):
        """Should read a JSON array of catalog records."""
        tracks = load_tracks(track_file)

        assert [t.name for t in tracks] == ["First", "Second"]

    def test_load_catalog_response(self, tmp_path):
        """Should read records nested under 'results'."""
        path = tmp_path / "response.json"
        path.write_text(json.dumps({"headers": {}, "results": [_record("9", "Nine")]}))

        assert [str(t.id) for t in load_tracks(path)] == ["9"]

    def test_invalid_record(self, tmp_path):
        """Should raise ValueError for a record without audio."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"id": "1", "name": "N", "artist_name": "A"}]))

        with pytest.raises(ValueError, match="audio"):
            load_tracks(path)


class TestArgumentParser:
    """Tests for the CLI argument parser."""

    def test_play_arguments(self):
        """Should parse the play subcommand options."""
        args = build_parser().parse_args(
            ["play", "tracks.json", "--start", "2", "--volume", "70", "--backend", "ffplay"]
        )

        assert args.action == "play"
        assert str(args.file) == "tracks.json"
        assert args.start == "2"
        assert args.volume == 70
        assert args.backend == "ffplay"

    def test_action_required(self):
        """Should exit when no subcommand is given."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_unknown_backend(self):
        """Should reject unknown backends."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["play", "tracks.json", "--backend", "alsa"])


class TestMainFunction:
    """Tests for the main entry point function."""

    def _run(self, settings, argv):
        with (
            patch("music_player.config.settings.get_settings", return_value=settings),
            patch("music_player.main.setup_logging"),
        ):
            return main(argv)

    def test_missing_file(self, fast_settings, tmp_path):
        """Should return 1 when the track list cannot be read."""
        assert self._run(fast_settings, ["play", str(tmp_path / "nope.json")]) == 1

    def test_empty_file(self, fast_settings, tmp_path):
        """Should return 1 when the track list is empty."""
        path = tmp_path / "empty.json"
        path.write_text("[]")

        assert self._run(fast_settings, ["play", str(path)]) == 1

    def test_unknown_start_track(self, fast_settings, track_file):
        """Should return 2 when the start id is not in the list."""
        assert self._run(fast_settings, ["play", str(track_file), "--start", "99"]) == 2

    def test_plays_whole_list(self, fast_settings, track_file, capsys):
        """Should play every track in order and exit cleanly."""
        exit_code = self._run(fast_settings, ["play", str(track_file), "--backend", "simulated"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "[1/2] Test Artist - First" in out
        assert "[2/2] Test Artist - Second" in out
        assert out.index("First") < out.index("Second")

    def test_start_from_given_track(self, fast_settings, track_file, capsys):
        """Should begin with the requested track."""
        exit_code = self._run(fast_settings, ["play", str(track_file), "--start", "2"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "First" not in out
        assert "[2/2] Test Artist - Second" in out

    def test_rejected_track_skipped(self, fast_settings, tmp_path, capsys):
        """Should move on when a track refuses to play."""
        path = tmp_path / "tracks.json"
        path.write_text(
            json.dumps(
                [
                    _record("1", "Blocked", audio="blocked://1"),
                    _record("2", "Open"),
                ]
            )
        )

        exit_code = self._run(fast_settings, ["play", str(path)])

        assert exit_code == 0
        assert "[2/2] Test Artist - Open" in capsys.readouterr().out
