"""
Shared Domain Kernel

Contains types, messages and exceptions shared across the domain.
"""

from music_player.domain.shared.exceptions import (
    AudioResourceError,
    DomainError,
    PlaybackRejectedError,
)

__all__ = [
    "DomainError",
    "AudioResourceError",
    "PlaybackRejectedError",
]
