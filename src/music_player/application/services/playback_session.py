"""Binding between the engine and one live audio resource."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ...domain.music.value_objects import AudioEvent
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ..interfaces.audio_resource import AudioResource, Subscription

logger = logging.getLogger(__name__)

SessionListener = Callable[["PlaybackSession", float], None]


class PlaybackSession:
    """One track bound to one audio resource, with its four subscriptions.

    A session is never reused: the engine builds a new one for every
    ``play_track`` and detaches the old one first. Once detached, nothing
    the old resource reports reaches the engine.
    """

    def __init__(self, track: Track, resource: AudioResource) -> None:
        self.track = track
        self.resource = resource
        self.active = True
        # Set once the resource confirms a start; a later rejection is a failed resume.
        self.started = False
        self.completed = False
        self._subscriptions: list[Subscription] = []

    def bind(
        self,
        *,
        on_duration: SessionListener,
        on_position: SessionListener,
        on_completed: SessionListener,
        on_failed: SessionListener,
    ) -> None:
        """Subscribe to the resource's duration, progress, completion and failure events."""
        for event, handler in (
            (AudioEvent.DURATION_KNOWN, on_duration),
            (AudioEvent.POSITION_CHANGED, on_position),
            (AudioEvent.COMPLETED, on_completed),
            (AudioEvent.FAILED, on_failed),
        ):
            self._subscriptions.append(
                self.resource.subscribe(event, self._forward(event, handler))
            )

    def _forward(self, event: AudioEvent, handler: SessionListener) -> Callable[[float], None]:
        def listener(value: float) -> None:
            if not self.active:
                logger.debug(LogTemplates.STALE_EVENT_IGNORED, event.value, self.track.id)
                return
            handler(self, value)

        return listener

    @property
    def subscription_count(self) -> int:
        return sum(1 for s in self._subscriptions if s.active)

    def detach(self) -> None:
        """Silence the resource, cancel every subscription and release it.

        Runs to completion even if the resource misbehaves.
        """
        if not self.active:
            return
        self.active = False

        try:
            self.resource.pause()
        except Exception:
            logger.exception("Error pausing superseded resource for %s", self.track.id)

        for subscription in self._subscriptions:
            try:
                subscription.cancel()
            except Exception:
                logger.exception("Error cancelling subscription for %s", self.track.id)
        self._subscriptions.clear()

        try:
            self.resource.dispose()
        except Exception:
            logger.exception(LogTemplates.RESOURCE_DISPOSE_FAILED, self.track.id)

        logger.debug(LogTemplates.SESSION_DETACHED, self.track.id)
