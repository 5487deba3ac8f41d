"""Domain events and the in-process bus that delivers them to presentation code."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from music_player.domain.music.entities import PlaybackState
from music_player.domain.music.value_objects import TrackIdField
from music_player.domain.shared.types import NonEmptyStr, QueueIndex

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="DomainEvent")
EventHandler = Callable[[T], Awaitable[None]]


class DomainEvent(BaseModel):
    """Base class for all domain events."""

    model_config = ConfigDict(frozen=True)

    event_id: NonEmptyStr = Field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


# === Playback Events ===


class TrackStarted(DomainEvent):
    track_id: TrackIdField
    track_name: str = ""
    queue_index: QueueIndex = -1


class PlaybackRejected(DomainEvent):
    track_id: TrackIdField
    reason: str = ""


class PlaybackPaused(DomainEvent):
    track_id: TrackIdField


class PlaybackResumed(DomainEvent):
    track_id: TrackIdField


class TrackCompleted(DomainEvent):
    track_id: TrackIdField
    will_advance: bool = False


class QueueExhausted(DomainEvent):
    last_track_id: TrackIdField


# === Library Events ===


class TrackLikeToggled(DomainEvent):
    track_id: TrackIdField
    liked: bool


# === Observable State ===


class PlaybackStateChanged(DomainEvent):
    state: PlaybackState


# === Event Bus ===


class EventBus:
    """In-memory pub/sub event bus for domain events.

    Handlers are called concurrently. Exceptions in handlers are logged
    but do not prevent other handlers from running.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler[Any]]] = defaultdict(list)

    def subscribe(self, event_type: type[T], handler: EventHandler[T]) -> None:
        self._handlers[event_type].append(handler)
        logger.debug("Subscribed handler to: %s", event_type.__name__)

    def unsubscribe(self, event_type: type[T], handler: EventHandler[T]) -> None:
        handlers = self._handlers[event_type]
        if handler in handlers:
            handlers.remove(handler)
            logger.debug("Unsubscribed handler from %s", event_type.__name__)

    def has_handlers(self, event_type: type[DomainEvent]) -> bool:
        return bool(self._handlers.get(event_type))

    async def publish(self, event: DomainEvent) -> None:
        event_type = type(event)
        handlers = list(self._handlers.get(event_type, []))

        if not handlers:
            return

        async def safe_call(handler: EventHandler[Any]) -> None:
            try:
                await handler(event)
            except Exception as e:
                logger.exception("Error in handler for %s: %s", event_type.__name__, e)

        async with asyncio.TaskGroup() as tg:
            for handler in handlers:
                tg.create_task(safe_call(handler))

    def clear(self) -> None:
        """Remove all handlers."""
        self._handlers.clear()
        logger.debug("Cleared all event handlers")


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get or create the process-wide event bus."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Reset the process-wide event bus (for testing)."""
    global _event_bus
    if _event_bus is not None:
        _event_bus.clear()
    _event_bus = None
