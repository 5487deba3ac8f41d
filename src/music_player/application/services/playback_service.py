"""Playback engine - owns the audio session, the queue and the liked tracks."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ...domain.music.entities import LikedTracks, PlaybackQueue, PlaybackState, Track
from ...domain.music.value_objects import Direction, PlaybackStatus, TrackId
from ...domain.shared.events import (
    DomainEvent,
    EventBus,
    PlaybackPaused,
    PlaybackRejected,
    PlaybackResumed,
    PlaybackStateChanged,
    QueueExhausted,
    TrackCompleted,
    TrackLikeToggled,
    TrackStarted,
    get_event_bus,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...domain.shared.types import VOLUME_MAX, VOLUME_MIN
from .playback_session import PlaybackSession

if TYPE_CHECKING:
    from ...config.settings import PlayerSettings
    from ..interfaces.audio_resource import AudioResourceFactory

logger = logging.getLogger(__name__)


class PlaybackEngine:
    """Transport, queue and like-set authority for a single player.

    All operations are synchronous and must be called from code running on
    the event loop; start requests complete in the background. No operation
    raises: failures of the audio backend are logged and reflected in
    :attr:`state`.
    """

    def __init__(
        self,
        *,
        audio_factory: AudioResourceFactory,
        settings: PlayerSettings | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        from ...config.settings import PlayerSettings

        self._factory = audio_factory
        self._settings = settings or PlayerSettings()
        self._bus = event_bus or get_event_bus()

        self._queue = PlaybackQueue()
        self._liked = LikedTracks()
        self._session: PlaybackSession | None = None

        self._current_track: Track | None = None
        self._status = PlaybackStatus.IDLE
        self._current_time = 0.0
        self._duration = 0.0
        self._volume = self._settings.default_volume

        self._auto_advance: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed = False

    # === Observable state ===

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            current_track=self._current_track,
            status=self._status,
            current_time=self._current_time,
            duration=self._duration,
            volume=self._volume,
            current_index=self._queue.current_index,
            has_next=self._queue.has_next,
            has_previous=self._queue.has_previous,
        )

    @property
    def current_track(self) -> Track | None:
        return self._current_track

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def is_playing(self) -> bool:
        return self._status.is_playing

    @property
    def current_time(self) -> float:
        return self._current_time

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def volume(self) -> int:
        return self._volume

    @property
    def queue(self) -> tuple[Track, ...]:
        return self._queue.tracks

    @property
    def current_index(self) -> int:
        return self._queue.current_index

    @property
    def has_next(self) -> bool:
        return self._queue.has_next

    @property
    def has_previous(self) -> bool:
        return self._queue.has_previous

    @property
    def liked_tracks(self) -> tuple[Track, ...]:
        return self._liked.tracks

    @property
    def session(self) -> PlaybackSession | None:
        return self._session

    @property
    def auto_advance_pending(self) -> bool:
        return self._auto_advance is not None

    # === Transport ===

    def play_track(self, track: Track, queue: Sequence[Track] | None = None) -> None:
        """Play ``track``, optionally replacing the queue with ``queue``.

        Without ``queue`` the track is looked up in the existing queue by id;
        if it is not there the queue becomes just ``[track]``.
        """
        if self._closed:
            logger.warning("play_track called after shutdown; ignoring %s", track.id)
            return

        # The old resource must be silent and unsubscribed before anything else happens.
        self._end_session()

        if queue is not None:
            self._queue.set_queue(queue, start_id=track.id)
            if self._queue.index_of(track.id) == -1:
                logger.info(LogTemplates.QUEUE_COLLAPSED, track.id)
                self._queue.set_queue([track])
            logger.debug(LogTemplates.QUEUE_REPLACED, len(self._queue), self._queue.current_index)
        elif self._queue.focus(track):
            logger.debug(LogTemplates.QUEUE_REPOSITIONED, self._queue.current_index, track.id)
        else:
            logger.info(LogTemplates.QUEUE_COLLAPSED, track.id)

        self._start_session(track)

    def play_next(self) -> None:
        self._step(Direction.NEXT)

    def play_previous(self) -> None:
        self._step(Direction.PREVIOUS)

    def pause_track(self) -> None:
        session = self._session
        if session is None:
            return

        try:
            session.resource.pause()
        except Exception:
            logger.exception("Error pausing %s", session.track.id)

        if self._status.is_playing:
            self._transition(PlaybackStatus.PAUSED)
            logger.debug(LogTemplates.PLAYBACK_PAUSED, session.track.id)
            self._publish(PlaybackPaused(track_id=session.track.id))
        self._notify()

    def toggle_play_pause(self) -> None:
        if self._current_track is None:
            return

        if self._status.is_playing:
            self.pause_track()
            return

        session = self._session
        if session is None:
            # The resource could not be created last time; try again from scratch.
            self._start_session(self._current_track)
            return

        self._cancel_auto_advance()
        if session.completed:
            session.completed = False
            self._seek_resource(session, 0.0)

        logger.debug(LogTemplates.PLAYBACK_RESUMING, session.track.id, self._current_time)
        self._transition(PlaybackStatus.LOADING)
        self._request_start(session)
        self._publish(PlaybackResumed(track_id=session.track.id))
        self._notify()

    def seek_to(self, time: float) -> None:
        session = self._session
        if session is None:
            return

        # The next resume starts from the seek target.
        self._cancel_auto_advance()
        session.completed = False
        self._seek_resource(session, time)
        self._current_time = max(0.0, float(time))
        logger.debug(LogTemplates.PLAYBACK_SEEK, session.track.id, self._current_time)
        self._notify()

    def seek_to_percentage(self, percentage: float) -> None:
        """Seek to ``percentage`` (0-100) of the known duration."""
        if self._session is None or self._duration <= 0:
            return
        fraction = min(100.0, max(0.0, float(percentage))) / 100
        self.seek_to(self._duration * fraction)

    def set_volume(self, volume: int) -> None:
        """Store the volume preference (0-100) and apply it to the active resource."""
        self._volume = int(min(VOLUME_MAX, max(VOLUME_MIN, volume)))
        if self._session is not None:
            self._apply_volume(self._session)
        logger.debug(LogTemplates.VOLUME_CHANGED, self._volume)
        self._notify()

    # === Likes ===

    def toggle_like(self, track: Track) -> bool:
        """Like or unlike ``track``; return True if it is now liked."""
        liked = self._liked.toggle(track)
        logger.info(LogTemplates.TRACK_LIKED if liked else LogTemplates.TRACK_UNLIKED, track.id)
        self._publish(TrackLikeToggled(track_id=track.id, liked=liked))
        return liked

    def is_track_liked(self, track_id: TrackId | str) -> bool:
        return self._liked.is_liked(track_id)

    # === Lifecycle ===

    def shutdown(self) -> None:
        """Stop and release the active resource. The engine ignores later play requests."""
        if self._closed:
            return
        self._closed = True

        self._end_session()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

        self._current_track = None
        self._current_time = 0.0
        self._duration = 0.0
        self._status = PlaybackStatus.IDLE
        logger.info(LogTemplates.ENGINE_SHUTDOWN)

    # === Session management ===

    def _step(self, direction: Direction) -> None:
        if self._closed:
            return
        track = self._queue.advance(direction)
        if track is None:
            logger.debug(
                LogTemplates.QUEUE_NO_NEIGHBOUR,
                direction.name.lower(),
                self._queue.current_index,
                len(self._queue),
            )
            return
        self._end_session()
        self._start_session(track)

    def _end_session(self) -> None:
        self._cancel_auto_advance()
        session, self._session = self._session, None
        if session is not None:
            session.detach()

    def _start_session(self, track: Track) -> None:
        self._end_session()

        self._current_track = track
        self._current_time = 0.0
        self._duration = 0.0
        logger.info(LogTemplates.SESSION_STARTING, track.id, track.display_title)

        try:
            resource = self._factory.create(track.playable_uri)
        except Exception as exc:
            logger.warning(LogTemplates.RESOURCE_CREATE_FAILED, track.playable_uri, exc)
            self._transition(PlaybackStatus.IDLE)
            self._publish(PlaybackRejected(track_id=track.id, reason=str(exc)))
            self._notify()
            return

        session = PlaybackSession(track, resource)
        self._apply_volume(session)
        session.bind(
            on_duration=self._on_duration,
            on_position=self._on_position,
            on_completed=self._on_completed,
            on_failed=self._on_failed,
        )
        self._session = session

        self._transition(PlaybackStatus.LOADING)
        self._request_start(session)
        self._publish(
            TrackStarted(
                track_id=track.id,
                track_name=track.name,
                queue_index=self._queue.current_index,
            )
        )
        self._notify()

    def _request_start(self, session: PlaybackSession) -> None:
        task = asyncio.get_running_loop().create_task(self._await_start(session))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _await_start(self, session: PlaybackSession) -> None:
        try:
            await session.resource.play()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if not self._is_current(session):
                logger.debug(LogTemplates.STALE_START_IGNORED, session.track.id)
                return
            logger.warning(LogTemplates.PLAYBACK_REJECTED, session.track.id, exc)
            if self._status.is_playing:
                self._transition(
                    PlaybackStatus.PAUSED if session.started else PlaybackStatus.IDLE
                )
            self._publish(PlaybackRejected(track_id=session.track.id, reason=str(exc)))
            self._notify()
            return

        if not self._is_current(session):
            logger.debug(LogTemplates.STALE_START_IGNORED, session.track.id)
            return

        session.started = True
        if self._status is PlaybackStatus.LOADING:
            self._transition(PlaybackStatus.PLAYING)
            logger.debug(LogTemplates.PLAYBACK_CONFIRMED, session.track.id)
            self._notify()
        elif self._status is PlaybackStatus.PAUSED:
            # Paused while the start was in flight; the resource is now running.
            try:
                session.resource.pause()
            except Exception:
                logger.exception("Error pausing %s", session.track.id)

    def _is_current(self, session: PlaybackSession) -> bool:
        return session.active and session is self._session

    def _apply_volume(self, session: PlaybackSession) -> None:
        try:
            session.resource.volume = self._volume / 100
        except Exception:
            logger.exception("Error applying volume to %s", session.track.id)

    def _seek_resource(self, session: PlaybackSession, seconds: float) -> None:
        try:
            session.resource.position = seconds
        except Exception:
            logger.exception("Error seeking %s", session.track.id)

    def _transition(self, target: PlaybackStatus) -> bool:
        if not self._status.can_transition_to(target):
            logger.debug("Ignoring status change %s -> %s", self._status.value, target.value)
            return False
        self._status = target
        return True

    # === Resource callbacks ===

    def _on_duration(self, session: PlaybackSession, duration: float) -> None:
        if not self._is_current(session):
            return
        self._duration = max(0.0, duration)
        self._notify()

    def _on_position(self, session: PlaybackSession, position: float) -> None:
        if not self._is_current(session):
            return
        self._current_time = max(0.0, position)
        self._notify()

    def _on_completed(self, session: PlaybackSession, _position: float) -> None:
        if not self._is_current(session):
            return

        track = session.track
        logger.info(LogTemplates.TRACK_COMPLETED, track.id)
        session.completed = True
        self._current_time = 0.0
        self._transition(PlaybackStatus.IDLE)

        will_advance = self._queue.has_next
        self._publish(TrackCompleted(track_id=track.id, will_advance=will_advance))
        if will_advance:
            delay = self._settings.auto_advance_delay_seconds
            logger.debug(LogTemplates.AUTO_ADVANCE_SCHEDULED, delay)
            self._auto_advance = asyncio.get_running_loop().call_later(
                delay, self._fire_auto_advance, session
            )
        else:
            logger.info(LogTemplates.QUEUE_EXHAUSTED, track.id)
            self._publish(QueueExhausted(last_track_id=track.id))
        self._notify()

    def _on_failed(self, session: PlaybackSession, position: float) -> None:
        if not self._is_current(session):
            return

        logger.warning(LogTemplates.PLAYBACK_FAILED, session.track.id, position)
        self._current_time = max(0.0, position)
        if self._status.is_playing:
            self._transition(
                PlaybackStatus.PAUSED if session.started else PlaybackStatus.IDLE
            )
        self._publish(
            PlaybackRejected(track_id=session.track.id, reason=ErrorMessages.OUTPUT_INTERRUPTED)
        )
        self._notify()

    def _fire_auto_advance(self, session: PlaybackSession) -> None:
        self._auto_advance = None
        if not self._is_current(session):
            logger.debug(LogTemplates.AUTO_ADVANCE_STALE)
            return
        self.play_next()

    def _cancel_auto_advance(self) -> None:
        if self._auto_advance is not None:
            self._auto_advance.cancel()
            self._auto_advance = None

    # === Events ===

    def _notify(self) -> None:
        if self._bus.has_handlers(PlaybackStateChanged):
            self._publish(PlaybackStateChanged(state=self.state))

    def _publish(self, event: DomainEvent) -> None:
        if not self._bus.has_handlers(type(event)):
            return
        task = asyncio.get_running_loop().create_task(self._bus.publish(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
