"""
Simulated Audio Backend

Clock-driven stand-in for a real audio device. Positions advance with the
event loop's clock, the duration is reported on the first start, and the
track completes when the clock reaches the end. Useful for headless runs
and for exercising the engine end to end.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping

from music_player.application.interfaces.audio_resource import AudioResourceFactory
from music_player.config.settings import AudioSettings
from music_player.domain.music.value_objects import AudioEvent
from music_player.domain.shared.exceptions import PlaybackRejectedError
from music_player.domain.shared.messages import ErrorMessages, LogTemplates

from .base import BaseAudioResource

logger = logging.getLogger(__name__)


class SimulatedAudioResource(BaseAudioResource):
    """Virtual playback of a track of known length."""

    def __init__(
        self,
        uri: str,
        *,
        duration: float,
        tick_interval: float = 0.25,
        start_latency: float = 0.0,
        reject_reason: str | None = None,
    ) -> None:
        super().__init__(uri)
        self._duration = duration
        self._tick_interval = tick_interval
        self._start_latency = start_latency
        self._reject_reason = reject_reason
        self._position = 0.0
        self._duration_reported = False
        self._ticker: asyncio.Task[None] | None = None

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def is_running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def position(self) -> float:
        return self._position

    @position.setter
    def position(self, seconds: float) -> None:
        self._position = min(self._duration, max(0.0, float(seconds)))

    async def play(self) -> None:
        if self._start_latency:
            await asyncio.sleep(self._start_latency)
        if self._disposed:
            raise PlaybackRejectedError(self.uri, ErrorMessages.RESOURCE_DISPOSED)
        if self._reject_reason:
            raise PlaybackRejectedError(self.uri, self._reject_reason)

        if not self._duration_reported:
            self._duration_reported = True
            self._emit(AudioEvent.DURATION_KNOWN, self._duration)
        if not self.is_running:
            self._ticker = asyncio.get_running_loop().create_task(self._run())

    def pause(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        last = loop.time()
        try:
            while self._position < self._duration:
                await asyncio.sleep(self._tick_interval)
                now = loop.time()
                self._position = min(self._duration, self._position + (now - last))
                last = now
                self._emit(AudioEvent.POSITION_CHANGED, self._position)
        except asyncio.CancelledError:
            logger.debug(LogTemplates.SIMULATED_TICK_STOPPED, self.uri)
            raise

        if self._ticker is not asyncio.current_task():
            # Paused by a listener during the final tick.
            return
        self._ticker = None
        self._emit(AudioEvent.COMPLETED, self._position)

    def _release(self) -> None:
        self.pause()


class SimulatedAudioFactory(AudioResourceFactory):
    """Creates simulated resources; URIs with a rejected prefix refuse to start."""

    def __init__(
        self,
        settings: AudioSettings | None = None,
        durations: Mapping[str, float] | None = None,
    ) -> None:
        self._settings = settings or AudioSettings()
        self._durations = dict(durations or {})
        self.created: list[SimulatedAudioResource] = []

    def register_duration(self, uri: str, seconds: float) -> None:
        self._durations[uri] = seconds

    def create(self, uri: str) -> SimulatedAudioResource:
        reject_reason = None
        if any(uri.startswith(prefix) for prefix in self._settings.rejected_uri_prefixes):
            reject_reason = ErrorMessages.SIMULATED_REJECTION

        resource = SimulatedAudioResource(
            uri,
            duration=self._durations.get(uri, self._settings.default_track_seconds),
            tick_interval=self._settings.tick_interval_seconds,
            start_latency=self._settings.start_latency_seconds,
            reject_reason=reject_reason,
        )
        self.created.append(resource)
        return resource
