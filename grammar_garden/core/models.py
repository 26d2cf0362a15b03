"""Read-only views handed to callers."""

from __future__ import annotations

from dataclasses import dataclass

from grammar_garden.core.levels import Zone


@dataclass
class ZoneState:
    """Map state for a single zone: unlock status and whether the player is in it."""

    zone: Zone
    unlocked: bool
    level_count: int
    is_current: bool = False
