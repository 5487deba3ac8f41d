"""
Music Bounded Context

Domain logic for tracks, the playback queue, liked tracks and playback state.
"""

from music_player.domain.music.entities import (
    LikedTracks,
    PlaybackQueue,
    PlaybackState,
    Track,
    format_time,
)
from music_player.domain.music.value_objects import (
    AudioEvent,
    Direction,
    PlaybackStatus,
    TrackId,
)

__all__ = [
    # Entities
    "Track",
    "PlaybackQueue",
    "LikedTracks",
    "PlaybackState",
    # Value Objects
    "TrackId",
    "PlaybackStatus",
    "Direction",
    "AudioEvent",
    # Helpers
    "format_time",
]
