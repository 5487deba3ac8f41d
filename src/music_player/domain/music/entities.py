"""Core domain entities for the music bounded context."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from music_player.domain.music.value_objects import (
    Direction,
    PlaybackStatus,
    TrackId,
    TrackIdField,
)
from music_player.domain.shared.messages import ErrorMessages
from music_player.domain.shared.types import (
    DurationSeconds,
    NonEmptyStr,
    NonNegativeFloat,
    QueueIndex,
    TrackNameStr,
    VolumePercent,
)


def format_time(seconds: float | None) -> str:
    """Format a number of seconds as M:SS, or H:MM:SS past the hour."""
    if seconds is None:
        return "Unknown"

    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class Track(BaseModel):
    """Immutable value object representing a playable track.

    Identity is ``id`` alone: two records with the same id are the same
    track even when their descriptive fields differ.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    id: TrackIdField
    name: TrackNameStr
    artist_name: TrackNameStr
    playable_uri: NonEmptyStr
    image_uri: NonEmptyStr | None = None
    duration_hint: DurationSeconds | None = None

    @property
    def duration_formatted(self) -> str:
        return format_time(self.duration_hint)

    @property
    def display_title(self) -> str:
        """Get "Artist - Name" display title."""
        return f"{self.artist_name} - {self.name}"

    def same_as(self, other: Track) -> bool:
        return self.id == other.id

    @classmethod
    def from_catalog(cls, record: Mapping[str, Any]) -> Track:
        """Build a track from a catalog record (``id``, ``name``, ``artist_name``, ``audio``...)."""
        for required in ("id", "name", "artist_name", "audio"):
            if not record.get(required):
                raise ValueError(ErrorMessages.MISSING_CATALOG_FIELD.format(field=required))

        duration = record.get("duration")
        image = record.get("image")
        return cls(
            id=TrackId.coerce(record["id"]),
            name=str(record["name"]),
            artist_name=str(record["artist_name"]),
            playable_uri=str(record["audio"]),
            image_uri=str(image) if image else None,
            duration_hint=float(duration) if duration else None,
        )


class PlaybackState(BaseModel):
    """Read-only snapshot of what the player is doing, for presentation code.

    ``is_playing`` is best-effort: it turns true as soon as a start is
    requested and only drops back if the host rejects the start.
    """

    model_config = ConfigDict(frozen=True)

    current_track: Track | None = None
    status: PlaybackStatus = PlaybackStatus.IDLE
    current_time: NonNegativeFloat = 0.0
    duration: NonNegativeFloat = 0.0
    volume: VolumePercent = 50
    current_index: QueueIndex = -1
    has_next: bool = False
    has_previous: bool = False

    @property
    def is_playing(self) -> bool:
        return self.status.is_playing

    @property
    def progress_percentage(self) -> float:
        if self.duration <= 0:
            return 0.0
        return min(100.0, self.current_time / self.duration * 100)

    @property
    def time_display(self) -> str:
        return f"{format_time(self.current_time)} / {format_time(self.duration)}"


class PlaybackQueue(BaseModel):
    """Ordered, caller-supplied sequence of tracks with a cursor.

    ``current_index`` is -1 when nothing is selected, otherwise a valid
    index into ``tracks``.
    """

    model_config = ConfigDict(strict=True)

    tracks: tuple[Track, ...] = ()
    current_index: QueueIndex = -1

    @model_validator(mode="after")
    def _check_cursor(self) -> PlaybackQueue:
        if self.current_index >= len(self.tracks):
            raise ValueError(
                f"current_index {self.current_index} out of range for {len(self.tracks)} tracks"
            )
        return self

    def __len__(self) -> int:
        return len(self.tracks)

    @property
    def is_empty(self) -> bool:
        return not self.tracks

    @property
    def has_next(self) -> bool:
        return self.current_index < len(self.tracks) - 1

    @property
    def has_previous(self) -> bool:
        return self.current_index > 0

    @property
    def current_track(self) -> Track | None:
        if self.current_index < 0:
            return None
        return self.tracks[self.current_index]

    def index_of(self, track_id: TrackId | str) -> int:
        """Return the position of ``track_id`` in the queue, or -1."""
        wanted = TrackId.coerce(track_id)
        for index, track in enumerate(self.tracks):
            if track.id == wanted:
                return index
        return -1

    def set_queue(self, tracks: Iterable[Track], start_id: TrackId | str | None = None) -> None:
        """Replace the queue and place the cursor on ``start_id`` (or the first track)."""
        self.tracks = tuple(tracks)
        self.current_index = 0 if self.tracks else -1
        if start_id is not None:
            position = self.index_of(start_id)
            if position != -1:
                self.current_index = position

    def focus(self, track: Track) -> bool:
        """Move the cursor onto ``track``; collapse to ``[track]`` if it is absent.

        Returns True when the track was found in the existing queue.
        """
        position = self.index_of(track.id)
        if position != -1:
            self.current_index = position
            return True
        self.set_queue([track])
        return False

    def peek(self, direction: Direction) -> Track | None:
        """Return the neighbour in ``direction`` without moving the cursor."""
        if self.is_empty:
            return None
        if direction is Direction.NEXT and not self.has_next:
            return None
        if direction is Direction.PREVIOUS and not self.has_previous:
            return None
        return self.tracks[self.current_index + direction.step]

    def advance(self, direction: Direction) -> Track | None:
        """Move the cursor one step and return the new current track.

        Returns None, leaving the cursor untouched, when there is no neighbour.
        """
        track = self.peek(direction)
        if track is not None:
            self.current_index += direction.step
        return track


class LikedTracks:
    """Identity-keyed set of favourite tracks, kept in the order they were liked."""

    def __init__(self, tracks: Iterable[Track] = ()) -> None:
        self._entries: dict[TrackId, Track] = {}
        # Slot vacated by the most recent unlike, so an immediate re-like restores it.
        self._vacated: tuple[TrackId, int] | None = None
        for track in tracks:
            self._entries.setdefault(track.id, track)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Track]:
        return iter(self._entries.values())

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Track):
            return item.id in self._entries
        if isinstance(item, TrackId | str):
            return TrackId.coerce(item) in self._entries
        return False

    @property
    def tracks(self) -> tuple[Track, ...]:
        return tuple(self._entries.values())

    def is_liked(self, track_id: TrackId | str) -> bool:
        return TrackId.coerce(track_id) in self._entries

    def toggle(self, track: Track) -> bool:
        """Flip membership of ``track``; return True if it is now liked."""
        if track.id in self._entries:
            position = list(self._entries).index(track.id)
            del self._entries[track.id]
            self._vacated = (track.id, position)
            return False

        vacated, self._vacated = self._vacated, None
        if vacated is not None and vacated[0] == track.id:
            items = list(self._entries.items())
            items.insert(vacated[1], (track.id, track))
            self._entries = dict(items)
        else:
            self._entries[track.id] = track
        return True
