import asyncio

import pytest

from music_player.application.interfaces.audio_resource import AudioResourceFactory
from music_player.domain.music.entities import Track
from music_player.domain.music.value_objects import AudioEvent, TrackId
from music_player.domain.shared.exceptions import AudioResourceError, PlaybackRejectedError
from music_player.infrastructure.audio.base import BaseAudioResource

# ============================================================================
# Fake Audio Backend
# ============================================================================


class FakeAudioResource(BaseAudioResource):
    """Scriptable audio resource.

    ``start_mode`` decides what ``play()`` does: "confirm" succeeds at once,
    "reject" raises at once, "manual" waits for confirm_start()/reject_start().
    """

    def __init__(self, uri: str, start_mode: str = "confirm") -> None:
        super().__init__(uri)
        self.start_mode = start_mode
        self.play_calls = 0
        self.pause_calls = 0
        self.seeks: list[float] = []
        self.volumes: list[float] = []
        self._position = 0.0
        self._pending: list[asyncio.Future[None]] = []

    @property
    def position(self) -> float:
        return self._position

    @position.setter
    def position(self, seconds: float) -> None:
        self.seeks.append(seconds)
        self._position = seconds

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self.volumes.append(value)
        self._volume = value

    async def play(self) -> None:
        self.play_calls += 1
        if self.start_mode == "reject":
            raise PlaybackRejectedError(self.uri, "not allowed")
        if self.start_mode == "manual":
            future = asyncio.get_running_loop().create_future()
            self._pending.append(future)
            await future

    def pause(self) -> None:
        self.pause_calls += 1

    def confirm_start(self) -> None:
        self._pending.pop(0).set_result(None)

    def reject_start(self, reason: str = "autoplay blocked") -> None:
        self._pending.pop(0).set_exception(PlaybackRejectedError(self.uri, reason))

    def fire(self, event: AudioEvent, value: float = 0.0) -> None:
        """Deliver an event to whoever is still subscribed."""
        self._emit(event, value)


class FakeAudioFactory(AudioResourceFactory):
    def __init__(self) -> None:
        self.created: list[FakeAudioResource] = []
        self.start_mode = "confirm"
        self.fail_next_create = False

    @property
    def last(self) -> FakeAudioResource:
        return self.created[-1]

    def create(self, uri: str) -> FakeAudioResource:
        if self.fail_next_create:
            self.fail_next_create = False
            raise AudioResourceError(uri, "unsupported format")
        resource = FakeAudioResource(uri, self.start_mode)
        self.created.append(resource)
        return resource


async def settle(rounds: int = 5) -> None:
    """Let scheduled start tasks and event deliveries run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


# ============================================================================
# Global State Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_globals():
    """Start every test with a fresh settings cache and event bus."""
    from music_player.config.settings import clear_settings_cache
    from music_player.domain.shared.events import reset_event_bus

    clear_settings_cache()
    reset_event_bus()
    yield
    clear_settings_cache()
    reset_event_bus()


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


def _track(track_id: str, name: str) -> Track:
    return Track(
        id=TrackId(track_id),
        name=name,
        artist_name="Test Artist",
        playable_uri=f"https://cdn.example.com/{track_id}.mp3",
        image_uri=f"https://img.example.com/{track_id}.jpg",
        duration_hint=180.0,
    )


@pytest.fixture
def make_track():
    """Factory for tracks with predictable URIs."""
    return _track


@pytest.fixture
def track_a():
    return _track("a", "Alpha")


@pytest.fixture
def track_b():
    return _track("b", "Bravo")


@pytest.fixture
def track_c():
    return _track("c", "Charlie")


@pytest.fixture
def abc(track_a, track_b, track_c):
    return [track_a, track_b, track_c]


# ============================================================================
# Engine Fixtures
# ============================================================================


@pytest.fixture
def fake_factory():
    return FakeAudioFactory()


@pytest.fixture
def event_bus():
    from music_player.domain.shared.events import EventBus

    return EventBus()


@pytest.fixture
def player_settings():
    from music_player.config.settings import PlayerSettings

    return PlayerSettings(default_volume=50, auto_advance_delay_seconds=0.01)


@pytest.fixture
def engine(fake_factory, player_settings, event_bus):
    """Playback engine wired to the fake audio backend."""
    from music_player.application.services.playback_service import PlaybackEngine

    return PlaybackEngine(
        audio_factory=fake_factory,
        settings=player_settings,
        event_bus=event_bus,
    )
