# ruff: noqa: N999
"""
Domain Layer

Contains pure playback logic organized by bounded contexts:
- shared/: Cross-cutting types, messages, events and exceptions
- music/: Track, queue, like set and playback state
"""

from music_player.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
