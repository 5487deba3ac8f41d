"""Audio infrastructure - simulated and ffplay-backed resources."""

from music_player.infrastructure.audio.base import BaseAudioResource
from music_player.infrastructure.audio.ffplay import (
    FfplayAudioFactory,
    FfplayAudioResource,
    FfplayConfig,
)
from music_player.infrastructure.audio.simulated import (
    SimulatedAudioFactory,
    SimulatedAudioResource,
)

__all__ = [
    "BaseAudioResource",
    "FfplayAudioFactory",
    "FfplayAudioResource",
    "FfplayConfig",
    "SimulatedAudioFactory",
    "SimulatedAudioResource",
]
