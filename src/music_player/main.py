#!/usr/bin/env python3
"""Main entry point for the music player.

Plays a JSON list of catalog track records through the playback engine,
auto-advancing until the list is exhausted.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.config
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from music_player.domain.music.entities import Track
from music_player.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from music_player.config.container import Container

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO") -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(_LOGGING_CONFIG_PATH) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.warning(
            "Could not load %s, falling back to basic config", _LOGGING_CONFIG_PATH
        )
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    logging.getLogger().setLevel(resolved_level)


def load_tracks(path: Path) -> list[Track]:
    """Read catalog records from ``path``.

    Accepts either a JSON array of records or a catalog response object
    with the records under ``results``.
    """
    with open(path, encoding="utf-8") as f:
        data: Any = json.load(f)
    if isinstance(data, dict):
        data = data.get("results", [])
    return [Track.from_catalog(record) for record in data]


async def run_player(
    container: Container,
    tracks: Sequence[Track],
    *,
    start_id: str | None = None,
    volume: int | None = None,
) -> None:
    """Play ``tracks`` from ``start_id`` (or the first) until the queue runs out."""
    from music_player.domain.shared.events import (
        PlaybackRejected,
        QueueExhausted,
        TrackStarted,
    )

    engine = container.playback_engine
    bus = container.event_bus
    finished = asyncio.Event()

    async def on_started(event: TrackStarted) -> None:
        state = engine.state
        track = state.current_track
        if track is not None:
            position = f"[{state.current_index + 1}/{len(engine.queue)}]"
            print(f"{position} {track.display_title} ({track.duration_formatted})")

    async def on_rejected(event: PlaybackRejected) -> None:
        # Nothing will complete, so skip ahead ourselves.
        if engine.has_next:
            engine.play_next()
        else:
            finished.set()

    async def on_exhausted(event: QueueExhausted) -> None:
        finished.set()

    bus.subscribe(TrackStarted, on_started)
    bus.subscribe(PlaybackRejected, on_rejected)
    bus.subscribe(QueueExhausted, on_exhausted)

    if volume is not None:
        engine.set_volume(volume)

    start = tracks[0]
    if start_id is not None:
        start = next(t for t in tracks if str(t.id) == start_id)
    engine.play_track(start, tracks)

    await finished.wait()
    logger.info(LogTemplates.APP_FINISHED)


async def _serve(container: Container, tracks: Sequence[Track], args: argparse.Namespace) -> None:
    try:
        await run_player(container, tracks, start_id=args.start, volume=args.volume)
    finally:
        await container.shutdown()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        description="Play a list of tracks through the playback engine.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s play tracks.json                    # Simulated playback
  %(prog)s play tracks.json --backend ffplay   # Real audio via ffplay
  %(prog)s play tracks.json --start 1532771 --volume 80
        """,
    )

    subparsers = parser.add_subparsers(dest="action", required=True)
    play = subparsers.add_parser("play", help="play a JSON list of catalog tracks")
    play.add_argument("file", type=Path, help="JSON file with catalog track records")
    play.add_argument("--start", "-s", default=None, help="id of the track to start with")
    play.add_argument(
        "--volume",
        "-v",
        type=int,
        default=None,
        help="initial volume 0-100 (default: from settings)",
    )
    play.add_argument(
        "--backend",
        "-b",
        choices=("simulated", "ffplay"),
        default=None,
        help="audio backend (default: from settings)",
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    from music_player.config.container import create_container
    from music_player.config.settings import get_settings
    from music_player.infrastructure.audio.simulated import SimulatedAudioFactory

    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.backend is not None:
        audio = settings.audio.model_copy(update={"backend": args.backend})
        settings = settings.model_copy(update={"audio": audio})
    setup_logging(settings.log_level)

    try:
        tracks = load_tracks(args.file)
    except (OSError, ValueError) as e:
        logger.error(ErrorMessages.TRACK_FILE_UNREADABLE, args.file, e)
        return 1
    if not tracks:
        logger.error(ErrorMessages.TRACK_FILE_EMPTY, args.file)
        return 1
    if args.start is not None and all(str(t.id) != args.start for t in tracks):
        logger.error(ErrorMessages.START_TRACK_NOT_FOUND, args.start, args.file)
        return 2

    logger.info(LogTemplates.APP_STARTING, settings.environment, settings.audio.backend)
    logger.info(LogTemplates.APP_LOADED_TRACKS, len(tracks), args.file)

    container = create_container(settings)
    factory = container.audio_factory
    if isinstance(factory, SimulatedAudioFactory):
        for track in tracks:
            if track.duration_hint:
                factory.register_duration(track.playable_uri, track.duration_hint)

    try:
        asyncio.run(_serve(container, tracks, args))
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.APP_INTERRUPTED)
        return 0
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
