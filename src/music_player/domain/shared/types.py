"""Reusable Pydantic Annotated types for domain-wide validation.

Constrained types are defined here once, so models can simply annotate
their fields::

    from music_player.domain.shared.types import NonEmptyStr, VolumePercent

    class MyModel(BaseModel):
        name: NonEmptyStr
        volume: VolumePercent
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

NonNegativeFloat = Annotated[float, Field(ge=0.0)]
"""Float >= 0.0."""

VolumePercent = Annotated[int, Field(ge=0, le=100)]
"""User-facing volume on a 0 … 100 scale."""

QueueIndex = Annotated[int, Field(ge=-1)]
"""Queue cursor: -1 for no selection, otherwise a zero-based index."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

TrackNameStr = Annotated[str, Field(min_length=1, max_length=500)]
"""Track or artist name: 1-500 characters."""


# ── Domain-specific numeric constraints ─────────────────────────────

DurationSeconds = Annotated[float, Field(ge=0.0, le=86_400.0)]
"""Track duration in seconds: 0 … 86 400 (24 hours)."""

VOLUME_MIN: int = 0
VOLUME_MAX: int = 100
