"""Port interfaces for the host's audio playback capability."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.value_objects import AudioEvent

AudioListener = Callable[[float], None]
"""Receives seconds: the duration for DURATION_KNOWN, otherwise the position."""


@dataclass(eq=False)
class Subscription:
    """Handle returned by :meth:`AudioResource.subscribe`.

    Cancelling is explicit; a listener stays attached until ``cancel()`` runs.
    """

    resource: AudioResource
    event: AudioEvent
    listener: AudioListener
    active: bool = field(default=True)

    def cancel(self) -> None:
        if self.active:
            self.resource.unsubscribe(self)
            self.active = False


class AudioResource(ABC):
    """A playable handle bound to one URI."""

    uri: str

    @abstractmethod
    async def play(self) -> None:
        """Start or resume output.

        Raises PlaybackRejectedError (or any exception) when the host refuses.
        """
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @property
    @abstractmethod
    def position(self) -> float:
        """Current playback position in seconds."""
        ...

    @position.setter
    @abstractmethod
    def position(self, seconds: float) -> None:
        """Seek; clamping to the valid range is the resource's job."""
        ...

    @property
    @abstractmethod
    def volume(self) -> float:
        """Output gain in [0.0, 1.0]."""
        ...

    @volume.setter
    @abstractmethod
    def volume(self, value: float) -> None:
        ...

    @abstractmethod
    def subscribe(self, event: AudioEvent, listener: AudioListener) -> Subscription:
        ...

    @abstractmethod
    def unsubscribe(self, subscription: Subscription) -> None:
        ...

    @abstractmethod
    def dispose(self) -> None:
        """Stop output and release the underlying resource. Idempotent."""
        ...


class AudioResourceFactory(ABC):
    """Creates audio resources for playable URIs."""

    @abstractmethod
    def create(self, uri: str) -> AudioResource:
        """Create a handle for ``uri``.

        Raises AudioResourceError when no handle can be produced at all.
        """
        ...
