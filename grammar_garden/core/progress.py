from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

MAX_HEALTH = 100

COSMETIC_SLOTS = ("hat", "apron", "tool")
FERTILIZER_SLOT = "fertilizer_count"
CONSUMABLE_SLOTS = (FERTILIZER_SLOT,)
DEFENSE_SLOT = "snake_active"
DEFENSE_SLOTS = (DEFENSE_SLOT,)


@dataclass(frozen=True)
class Sequential:
    """Walking a zone's levels in order."""

    zone_id: str
    index: int


@dataclass(frozen=True)
class Review:
    """Replaying the mistake queue; ``resume`` is where sequential play picks up again."""

    level_id: int
    resume: Sequential


Position = Union[Sequential, Review]


def default_inventory() -> Dict[str, Any]:
    inventory: Dict[str, Any] = {slot: None for slot in COSMETIC_SLOTS}
    inventory.update({slot: 0 for slot in CONSUMABLE_SLOTS})
    inventory.update({slot: False for slot in DEFENSE_SLOTS})
    return inventory


@dataclass
class ProgressState:
    position: Position
    soft_currency: int = 0
    hard_currency: int = 0
    mistake_queue: List[int] = field(default_factory=list)
    garden_health: int = MAX_HEALTH
    is_threat_active: bool = False
    rounds_until_threat_leaves: int = 0
    inventory: Dict[str, Any] = field(default_factory=default_inventory)

    @property
    def sequential_position(self) -> Sequential:
        if isinstance(self.position, Review):
            return self.position.resume
        return self.position

    @property
    def current_zone_id(self) -> str:
        return self.sequential_position.zone_id

    @property
    def current_level_index(self) -> int:
        return self.sequential_position.index

    @property
    def is_in_review_mode(self) -> bool:
        return isinstance(self.position, Review)

    @property
    def fertilizer_count(self) -> int:
        return int(self.inventory.get(FERTILIZER_SLOT, 0))

    def has_active_defense(self) -> bool:
        return any(bool(self.inventory.get(slot)) for slot in DEFENSE_SLOTS)

    def change_health(self, delta: int) -> None:
        self.garden_health = max(0, min(MAX_HEALTH, self.garden_health + delta))

    def to_record(self) -> Dict[str, Any]:
        """Flat record written to disk."""
        return {
            "current_zone_id": self.current_zone_id,
            "current_level_index": self.current_level_index,
            "soft_currency": self.soft_currency,
            "hard_currency": self.hard_currency,
            "mistake_queue": list(self.mistake_queue),
            "is_in_review_mode": self.is_in_review_mode,
            "garden_health": self.garden_health,
            "is_threat_active": self.is_threat_active,
            "rounds_until_threat_leaves": self.rounds_until_threat_leaves,
            "inventory": dict(self.inventory),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any], default_zone_id: str = "") -> "ProgressState":
        """Build state from a flat record merged over the defaults.

        Raises ``TypeError`` or ``ValueError`` when a value has the wrong
        type or cannot be coerced.
        """
        merged = default_record(default_zone_id)
        merged.update(record)

        saved_queue = merged["mistake_queue"]
        if not isinstance(saved_queue, list):
            raise TypeError(f"mistake_queue must be a list, got {saved_queue!r}")
        queue = [_as_int("mistake_queue entry", level_id) for level_id in saved_queue]
        sequential = Sequential(
            zone_id=str(merged["current_zone_id"]),
            index=_as_int("current_level_index", merged["current_level_index"]),
        )
        return cls(
            position=position_for(sequential, queue, _as_bool("is_in_review_mode", merged["is_in_review_mode"])),
            soft_currency=_as_int("soft_currency", merged["soft_currency"]),
            hard_currency=_as_int("hard_currency", merged["hard_currency"]),
            mistake_queue=queue,
            garden_health=_as_int("garden_health", merged["garden_health"]),
            is_threat_active=_as_bool("is_threat_active", merged["is_threat_active"]),
            rounds_until_threat_leaves=_as_int("rounds_until_threat_leaves", merged["rounds_until_threat_leaves"]),
            inventory=_merge_inventory(record.get("inventory")),
        )


def position_for(sequential: Sequential, queue: List[int], reviewing: bool) -> Position:
    """Review the queue head if reviewing and the queue has one, else stay on ``sequential``."""
    if reviewing and queue:
        return Review(level_id=queue[0], resume=sequential)
    return sequential


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError(f"{name} must be a number, got {value!r}")
    return int(value)


def _as_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"{name} must be true or false, got {value!r}")
    return value


def _merge_inventory(saved: Any) -> Dict[str, Any]:
    inventory = default_inventory()
    if saved is None:
        return inventory
    if not isinstance(saved, dict):
        raise TypeError("inventory must be a mapping")
    for slot, value in saved.items():
        if slot in COSMETIC_SLOTS:
            if value is not None and not isinstance(value, str):
                raise TypeError(f"inventory slot {slot} must hold an item id, got {value!r}")
        elif slot in CONSUMABLE_SLOTS:
            value = _as_int(f"inventory slot {slot}", value)
            if value < 0:
                raise ValueError(f"inventory slot {slot} cannot be negative")
        elif slot in DEFENSE_SLOTS:
            value = _as_bool(f"inventory slot {slot}", value)
        inventory[slot] = value
    return inventory


def default_record(zone_id: str = "") -> Dict[str, Any]:
    return {
        "current_zone_id": zone_id,
        "current_level_index": 0,
        "soft_currency": 0,
        "hard_currency": 0,
        "mistake_queue": [],
        "is_in_review_mode": False,
        "garden_health": MAX_HEALTH,
        "is_threat_active": False,
        "rounds_until_threat_leaves": 0,
        "inventory": default_inventory(),
    }


class ProgressStore:
    """Saves the progress record as JSON. Default file: ~/.grammar_garden/progress.json.

    Failures never reach the caller: a bad or missing file loads as ``None``
    and a failed write is only logged, so play continues in memory.
    """

    def __init__(self, file_path: Optional[Path] = None, default_zone_id: str = "") -> None:
        self._file_path = file_path or Path.home() / ".grammar_garden" / "progress.json"
        self._default_zone_id = default_zone_id

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load(self) -> Optional[ProgressState]:
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load progress from %s: %s", self._file_path, e)
            return None
        if not isinstance(payload, dict):
            logger.warning("Could not load progress from %s: expected a JSON object", self._file_path)
            return None
        try:
            return ProgressState.from_record(payload, self._default_zone_id)
        except (TypeError, ValueError) as e:
            logger.warning("Malformed progress record in %s: %s", self._file_path, e)
            return None

    def save(self, state: ProgressState) -> None:
        payload = state.to_record()
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save progress to %s: %s", self._file_path, e)

    def reset(self) -> None:
        """Delete the saved record. Only called when the player resets progress."""
        try:
            self._file_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove progress file %s: %s", self._file_path, e)
