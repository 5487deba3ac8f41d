"""
FFplay Audio Backend

Infrastructure component that plays audio through an ``ffplay`` child
process. Duration is probed with ``ffprobe``; pause and resume stop and
continue the process; seeks and volume changes respawn it at the current
offset. POSIX only (relies on SIGSTOP/SIGCONT).
"""

from __future__ import annotations

import asyncio
import logging
import signal
from asyncio.subprocess import DEVNULL, PIPE, Process
from dataclasses import dataclass

from music_player.application.interfaces.audio_resource import AudioResourceFactory
from music_player.config.settings import AudioSettings
from music_player.domain.music.value_objects import AudioEvent
from music_player.domain.shared.exceptions import AudioResourceError, PlaybackRejectedError
from music_player.domain.shared.messages import ErrorMessages, LogTemplates

from .base import BaseAudioResource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FfplayConfig:
    """Configuration for ffplay/ffprobe invocation."""

    ffplay_path: str = "ffplay"
    ffprobe_path: str = "ffprobe"

    # How often the position is reported while playing
    poll_interval: float = 0.25

    # A process that dies within this window counts as a rejected start
    startup_grace: float = 0.3

    # Time a terminated process gets before it is killed outright
    terminate_timeout: float = 2.0

    def get_play_args(self, uri: str, offset: float, volume: float) -> list[str]:
        """Build the ffplay command line.

        Args:
            uri: Playable URI or path.
            offset: Start offset in seconds.
            volume: Gain in [0.0, 1.0], mapped onto ffplay's 0-100 scale.

        Returns:
            Argument vector for ``create_subprocess_exec``.
        """
        return [
            self.ffplay_path,
            "-nodisp",
            "-autoexit",
            "-loglevel",
            "error",
            "-volume",
            str(round(volume * 100)),
            "-ss",
            f"{offset:.2f}",
            uri,
        ]

    def get_duration_args(self, uri: str) -> list[str]:
        """Build the ffprobe command line that prints the duration in seconds."""
        return [
            self.ffprobe_path,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            uri,
        ]


class FfplayAudioResource(BaseAudioResource):
    """One URI played by (successive) ffplay processes.

    At most one process is tracked at a time. Every kill bumps
    ``_generation``; a spawn that finishes under an older generation
    terminates its own process instead of adopting it.
    """

    def __init__(self, uri: str, config: FfplayConfig | None = None) -> None:
        super().__init__(uri)
        self._config = config or FfplayConfig()
        self._process: Process | None = None
        self._watcher: asyncio.Task[None] | None = None
        self._restarting: asyncio.Task[None] | None = None
        self._reapers: set[asyncio.Task[None]] = set()
        self._generation = 0
        self._duration: float | None = None
        self._duration_read = False
        self._paused = False

        # Position is derived from the loop clock relative to the last (re)start.
        self._anchor_position = 0.0
        self._anchor_time: float | None = None

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    @property
    def restart_pending(self) -> bool:
        """A seek or volume change is bringing up a replacement process."""
        return self._restarting is not None and not self._restarting.done()

    @property
    def position(self) -> float:
        if self._anchor_time is None or self._paused:
            return self._anchor_position
        elapsed = asyncio.get_running_loop().time() - self._anchor_time
        position = self._anchor_position + elapsed
        if self._duration is not None:
            position = min(position, self._duration)
        return position

    @position.setter
    def position(self, seconds: float) -> None:
        upper = self._duration if self._duration is not None else float("inf")
        target = min(upper, max(0.0, float(seconds)))
        self._respawn_at(target)

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        value = min(1.0, max(0.0, float(value)))
        if value == self._volume:
            return
        self._volume = value
        if self.is_running or self.restart_pending:
            self._respawn_at(self.position)

    async def play(self) -> None:
        """Start, or continue a paused process.

        Raises:
            PlaybackRejectedError: If ffplay is missing or exits immediately.
        """
        if self._disposed:
            raise PlaybackRejectedError(self.uri, ErrorMessages.RESOURCE_DISPOSED)

        if self.restart_pending:
            # Take over the pending restart; its offset is already the anchor.
            self._kill()

        if self.is_running:
            if self._paused:
                self._send(signal.SIGCONT)
                self._paused = False
                self._anchor_time = asyncio.get_running_loop().time()
            return

        if not self._duration_read:
            self._duration_read = True
            self._duration = await self._read_duration()
            if self._duration is not None:
                self._emit(AudioEvent.DURATION_KNOWN, self._duration)

        while not await self._spawn(self._anchor_position):
            logger.debug(LogTemplates.FFPLAY_SUPERSEDED, self.uri, self._anchor_position)

    def pause(self) -> None:
        if self.restart_pending:
            self._kill()
            return
        if not self.is_running or self._paused:
            return
        self._anchor_position = self.position
        self._paused = True
        self._send(signal.SIGSTOP)

    def _release(self) -> None:
        self._kill()

    async def _read_duration(self) -> float | None:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self._config.get_duration_args(self.uri), stdout=PIPE, stderr=PIPE
            )
            stdout, stderr = await proc.communicate()
            if proc.returncode != 0:
                raise AudioResourceError(self.uri, stderr.decode(errors="replace").strip())
            return float(stdout.decode().strip())
        except (OSError, ValueError, AudioResourceError) as exc:
            logger.warning(LogTemplates.FFPROBE_FAILED, self.uri, exc)
            return None

    async def _spawn(self, offset: float) -> bool:
        """Start ffplay at ``offset`` and adopt the process.

        Returns False, with the new process terminated, when a kill
        happened while it was starting.
        """
        generation = self._generation
        args = self._config.get_play_args(self.uri, offset, self._volume)
        try:
            proc = await asyncio.create_subprocess_exec(
                *args, stdin=DEVNULL, stdout=DEVNULL, stderr=PIPE
            )
        except FileNotFoundError as exc:
            raise PlaybackRejectedError(
                self.uri,
                ErrorMessages.EXECUTABLE_NOT_FOUND.format(name=self._config.ffplay_path),
            ) from exc

        exited = False
        try:
            await asyncio.wait_for(asyncio.shield(proc.wait()), self._config.startup_grace)
            exited = True
        except TimeoutError:
            pass
        except BaseException:
            self._terminate(proc)
            raise

        if self._disposed:
            self._terminate(proc)
            raise PlaybackRejectedError(self.uri, ErrorMessages.RESOURCE_DISPOSED)
        if generation != self._generation:
            self._terminate(proc)
            return False

        if exited:
            if proc.returncode == 0:
                # Clip shorter than the grace window: it simply finished.
                self._anchor_position = self._duration or offset
                self._emit(AudioEvent.COMPLETED, self._anchor_position)
                return True
            stderr = await proc.stderr.read() if proc.stderr else b""
            reason = stderr.decode(errors="replace").strip() or f"exit code {proc.returncode}"
            raise PlaybackRejectedError(self.uri, reason)

        self._process = proc
        self._paused = False
        self._anchor_position = offset
        self._anchor_time = asyncio.get_running_loop().time() - self._config.startup_grace
        logger.debug(LogTemplates.FFPLAY_STARTED, self.uri, proc.pid, offset)
        self._watcher = asyncio.get_running_loop().create_task(self._watch(proc))
        return True

    async def _watch(self, proc: Process) -> None:
        while proc.returncode is None:
            try:
                await asyncio.wait_for(asyncio.shield(proc.wait()), self._config.poll_interval)
            except TimeoutError:
                if not self._paused and proc is self._process:
                    self._emit(AudioEvent.POSITION_CHANGED, self.position)

        if proc is not self._process:
            # Replaced by a seek/volume respawn, or killed on dispose.
            return

        position = self.position
        self._process = None
        self._anchor_time = None
        if proc.returncode == 0:
            self._anchor_position = position if self._duration is None else self._duration
            logger.debug(LogTemplates.FFPLAY_EXITED, self.uri, proc.returncode)
            self._emit(AudioEvent.COMPLETED, self._anchor_position)
            return

        # Died mid-track; play() resumes from the position reached.
        self._anchor_position = position
        logger.warning(LogTemplates.FFPLAY_EXITED, self.uri, proc.returncode)
        self._emit(AudioEvent.FAILED, position)

    def _respawn_at(self, offset: float) -> None:
        was_playing = (self.is_running and not self._paused) or self.restart_pending
        self._kill()
        self._anchor_position = offset
        self._anchor_time = None
        if was_playing and not self._disposed:
            self._restarting = asyncio.get_running_loop().create_task(self._restart(offset))

    async def _restart(self, offset: float) -> None:
        try:
            await self._spawn(offset)
        except PlaybackRejectedError as exc:
            logger.warning(LogTemplates.PLAYBACK_REJECTED, self.uri, exc)
            self._emit(AudioEvent.FAILED, offset)

    def _send(self, sig: signal.Signals) -> None:
        if self._process is not None and self._process.returncode is None:
            try:
                self._process.send_signal(sig)
            except ProcessLookupError:
                pass

    def _kill(self) -> None:
        self._generation += 1
        if self._restarting is not None:
            self._restarting.cancel()
            self._restarting = None
        proc, self._process = self._process, None
        if self._watcher is not None:
            self._watcher.cancel()
            self._watcher = None
        if proc is not None:
            self._terminate(proc)
        self._paused = False

    def _terminate(self, proc: Process) -> None:
        if proc.returncode is not None:
            return
        try:
            # A stopped process must be continued before it can act on SIGTERM.
            proc.send_signal(signal.SIGCONT)
            proc.terminate()
        except ProcessLookupError:
            return
        reaper = asyncio.get_running_loop().create_task(self._reap(proc))
        self._reapers.add(reaper)
        reaper.add_done_callback(self._reapers.discard)

    async def _reap(self, proc: Process) -> None:
        try:
            await asyncio.wait_for(proc.wait(), self._config.terminate_timeout)
        except TimeoutError:
            logger.warning(LogTemplates.FFPLAY_KILLED, self.uri, proc.pid)
            try:
                proc.kill()
            except ProcessLookupError:
                return
            await proc.wait()


class FfplayAudioFactory(AudioResourceFactory):
    """Creates ffplay-backed resources from audio settings."""

    def __init__(self, settings: AudioSettings | None = None) -> None:
        settings = settings or AudioSettings()
        self._config = FfplayConfig(
            ffplay_path=settings.ffplay_path,
            ffprobe_path=settings.ffprobe_path,
            poll_interval=settings.tick_interval_seconds,
        )

    def create(self, uri: str) -> FfplayAudioResource:
        return FfplayAudioResource(uri, self._config)
