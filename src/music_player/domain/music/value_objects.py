"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated

from pydantic import PlainSerializer, PlainValidator

from music_player.domain.shared.messages import ErrorMessages


@dataclass(frozen=True)
class TrackId:
    """Opaque catalog identity of a track."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError(ErrorMessages.EMPTY_TRACK_ID)

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)

    @classmethod
    def coerce(cls, value: TrackId | str | int) -> TrackId:
        """Accept a TrackId, or a raw catalog id (string or integer)."""
        if isinstance(value, TrackId):
            return value
        return cls(str(value))


# Pydantic-compatible type alias for TrackId fields.
# Serializes as plain string in JSON, stores as TrackId in the model.
TrackIdField = Annotated[
    TrackId,
    PlainValidator(TrackId.coerce),
    PlainSerializer(lambda v: v.value, return_type=str),
]


class PlaybackStatus(Enum):
    """Transport status with enforced transitions.

    State transitions:
    - IDLE -> LOADING (play_track, or resume of a track whose start was rejected)
    - LOADING -> PLAYING (start confirmed)
    - LOADING -> IDLE (start rejected)
    - LOADING -> PAUSED (paused before the start confirmed)
    - PLAYING -> PAUSED (pause)
    - PAUSED -> LOADING (resume)
    - PLAYING -> LOADING (auto-advance or play_track)
    - PLAYING -> IDLE (natural completion)
    - Any -> IDLE (shutdown)
    """

    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"

    def can_transition_to(self, target: PlaybackStatus) -> bool:
        """Check if transition to target status is valid."""
        if target == PlaybackStatus.IDLE or target == PlaybackStatus.LOADING:
            return True
        valid_transitions = {
            PlaybackStatus.IDLE: set(),
            PlaybackStatus.LOADING: {PlaybackStatus.PLAYING, PlaybackStatus.PAUSED},
            PlaybackStatus.PLAYING: {PlaybackStatus.PAUSED},
            PlaybackStatus.PAUSED: set(),
        }
        return target in valid_transitions[self]

    @property
    def is_active(self) -> bool:
        return self in {PlaybackStatus.LOADING, PlaybackStatus.PLAYING, PlaybackStatus.PAUSED}

    @property
    def is_playing(self) -> bool:
        """LOADING counts as playing: start requests are reported optimistically."""
        return self in {PlaybackStatus.LOADING, PlaybackStatus.PLAYING}


class Direction(Enum):
    """Queue navigation direction."""

    NEXT = 1
    PREVIOUS = -1

    @property
    def step(self) -> int:
        return self.value


class AudioEvent(Enum):
    """Lifecycle events an audio resource reports back to the engine."""

    DURATION_KNOWN = "duration_known"
    POSITION_CHANGED = "position_changed"
    COMPLETED = "completed"
    # Output stopped on its own before the end of the track
    FAILED = "failed"
