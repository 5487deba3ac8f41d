"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class AudioResourceError(DomainError):
    """Raised by audio backends when a resource cannot be created or driven."""

    def __init__(
        self, uri: str, message: str | None = None, code: str = "AUDIO_RESOURCE_ERROR"
    ) -> None:
        super().__init__(message or f"Audio resource for '{uri}' failed", code=code)
        self.uri = uri


class PlaybackRejectedError(AudioResourceError):
    """Raised when the host environment refuses to start playback."""

    def __init__(self, uri: str, reason: str | None = None) -> None:
        msg = f"Playback of '{uri}' was rejected"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(uri, msg, code="PLAYBACK_REJECTED")
        self.reason = reason
