"""Dependency Injection Container

Owns the single playback engine of the application and the collaborators it
is built from. Components are created on first access and cached; the
engine is handed to presentation code from here rather than looked up
globally.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..application.interfaces.audio_resource import AudioResourceFactory
    from ..application.services.playback_service import PlaybackEngine
    from ..domain.shared.events import EventBus
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed.
    """

    settings: Settings

    _event_bus: EventBus | None = None
    _audio_factory: AudioResourceFactory | None = None
    _playback_engine: PlaybackEngine | None = None

    # === Events ===

    @property
    def event_bus(self) -> EventBus:
        """Get the event bus shared by the engine and its observers."""
        if self._event_bus is None:
            from ..domain.shared.events import get_event_bus

            self._event_bus = get_event_bus()
        return self._event_bus

    # === Infrastructure Adapters ===

    @property
    def audio_factory(self) -> AudioResourceFactory:
        """Get the audio backend selected by ``settings.audio.backend``."""
        if self._audio_factory is None:
            if self.settings.audio.backend == "ffplay":
                from ..infrastructure.audio.ffplay import FfplayAudioFactory

                self._audio_factory = FfplayAudioFactory(self.settings.audio)
            else:
                from ..infrastructure.audio.simulated import SimulatedAudioFactory

                self._audio_factory = SimulatedAudioFactory(self.settings.audio)
        return self._audio_factory

    # === Application Services ===

    @property
    def playback_engine(self) -> PlaybackEngine:
        """Get the playback engine."""
        if self._playback_engine is None:
            from ..application.services.playback_service import PlaybackEngine

            self._playback_engine = PlaybackEngine(
                audio_factory=self.audio_factory,
                settings=self.settings.player,
                event_bus=self.event_bus,
            )
        return self._playback_engine

    # === Lifecycle ===

    async def shutdown(self) -> None:
        """Stop playback and release the audio resource."""
        if self._playback_engine is not None:
            try:
                self._playback_engine.shutdown()
            except Exception as exc:
                logger.warning("Failed shutting down playback engine: %r", exc)

        if self._event_bus is not None:
            self._event_bus.clear()

        logger.info(LogTemplates.CONTAINER_SHUTDOWN)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
