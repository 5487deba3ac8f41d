"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the playback engine
and the host's audio backends. These are the "ports" in hexagonal
architecture.
"""

from music_player.application.interfaces.audio_resource import (
    AudioListener,
    AudioResource,
    AudioResourceFactory,
    Subscription,
)

__all__ = [
    "AudioListener",
    "AudioResource",
    "AudioResourceFactory",
    "Subscription",
]
