"""Listener bookkeeping shared by the audio backends."""

from __future__ import annotations

import logging
from collections import defaultdict

from music_player.application.interfaces.audio_resource import (
    AudioListener,
    AudioResource,
    Subscription,
)
from music_player.domain.music.value_objects import AudioEvent

logger = logging.getLogger(__name__)


class BaseAudioResource(AudioResource):
    """Implements subscribe/unsubscribe/volume; subclasses drive the sound."""

    def __init__(self, uri: str) -> None:
        self.uri = uri
        self._listeners: dict[AudioEvent, list[Subscription]] = defaultdict(list)
        self._volume = 1.0
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = min(1.0, max(0.0, float(value)))

    def subscribe(self, event: AudioEvent, listener: AudioListener) -> Subscription:
        subscription = Subscription(resource=self, event=event, listener=listener)
        self._listeners[event].append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        listeners = self._listeners.get(subscription.event, [])
        if subscription in listeners:
            listeners.remove(subscription)

    def listener_count(self, event: AudioEvent | None = None) -> int:
        if event is not None:
            return len(self._listeners.get(event, []))
        return sum(len(subs) for subs in self._listeners.values())

    def _emit(self, event: AudioEvent, value: float) -> None:
        for subscription in list(self._listeners.get(event, [])):
            try:
                subscription.listener(value)
            except Exception:
                logger.exception("Error in %s listener for %s", event.value, self.uri)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._release()
        self._listeners.clear()

    def _release(self) -> None:
        """Stop output and free backend resources."""
