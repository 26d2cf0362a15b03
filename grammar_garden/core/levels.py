from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import yaml

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class Level:
    id: int
    word: str
    root: str
    decoys: Tuple[str, ...]
    pos: str
    pos_decoys: Tuple[str, ...]


@dataclass(frozen=True)
class Zone:
    id: str
    title: str
    levels: Tuple[Level, ...]
    locked: bool = False


class ContentCatalog:
    """Read-only collection of zones and their levels.

    Loads ``zone*.yaml`` files from ``data/zones`` unless zones are passed in
    directly. Level ids are unique across the whole catalog.
    """

    def __init__(self, zones: Optional[Sequence[Zone]] = None, base_dir: Optional[Path] = None) -> None:
        if zones is None:
            zones = self._load_zones(base_dir or DATA_DIR / "zones")
        self._zones: List[Zone] = list(zones)
        self._levels: Dict[int, Level] = {}
        seen_zones = set()
        for zone in self._zones:
            if zone.id in seen_zones:
                raise ValueError(f"Duplicate zone id: {zone.id}")
            seen_zones.add(zone.id)
            for level in zone.levels:
                if level.id in self._levels:
                    raise ValueError(f"Duplicate level id {level.id} in zone {zone.id}")
                self._levels[level.id] = level
        if not self._levels:
            raise ValueError("Content catalog has no levels")

    def get_zones(self) -> List[Zone]:
        return list(self._zones)

    def get_zone(self, zone_id: str) -> Optional[Zone]:
        for zone in self._zones:
            if zone.id == zone_id:
                return zone
        return None

    def get_level_by_id(self, level_id: int) -> Optional[Level]:
        return self._levels.get(level_id)

    def total_level_count(self) -> int:
        return len(self._levels)

    def first_playable_zone(self) -> Zone:
        """Return the first zone that has at least one level."""
        return next(zone for zone in self._zones if zone.levels)

    def next_zone(self, zone_id: str) -> Optional[Zone]:
        """Return the zone after ``zone_id`` in catalog order, if any."""
        ids = [zone.id for zone in self._zones]
        if zone_id not in ids:
            return None
        index = ids.index(zone_id) + 1
        return self._zones[index] if index < len(self._zones) else None

    def _load_zones(self, base_dir: Path) -> List[Zone]:
        if not base_dir.exists():
            raise FileNotFoundError(f"Zones directory not found: {base_dir}")

        def _sort_key(p: Path) -> tuple[int, str]:
            m = re.match(r"^zone(\d+)$", p.stem)
            if m:
                return (int(m.group(1)), p.stem)
            return (10**9, p.stem)

        zones: List[Zone] = []
        for zone_path in sorted(base_dir.glob("zone*.yaml"), key=_sort_key):
            raw = yaml.safe_load(zone_path.read_text(encoding="utf-8"))
            if not raw or not isinstance(raw, dict):
                raise ValueError(f"{zone_path.name}: expected YAML with 'id', 'title' and 'levels'")
            zone_id = raw.get("id")
            title = raw.get("title")
            if not zone_id or not isinstance(zone_id, str):
                raise ValueError(f"{zone_path.name}: missing or invalid 'id'")
            if not title or not isinstance(title, str):
                raise ValueError(f"{zone_path.name}: missing or invalid 'title'")
            entries = raw.get("levels") or []
            if not isinstance(entries, list):
                raise ValueError(f"{zone_path.name}: 'levels' must be a list")
            levels = tuple(_parse_level(zone_path.name, entry) for entry in entries)
            zones.append(
                Zone(
                    id=zone_id.strip(),
                    title=title.strip(),
                    levels=levels,
                    locked=bool(raw.get("locked", False)),
                )
            )

        if not zones:
            raise ValueError("No zone files (zone*.yaml) found in data/zones")
        return zones


def _parse_level(source: str, entry: object) -> Level:
    if not isinstance(entry, dict):
        raise ValueError(f"{source}: level entries must be mappings")
    for key in ("id", "word", "root", "pos"):
        if entry.get(key) in (None, ""):
            raise ValueError(f"{source}: level is missing '{key}'")
    try:
        level_id = int(entry["id"])
    except (TypeError, ValueError):
        raise ValueError(f"{source}: level id must be an integer, got {entry['id']!r}") from None
    return Level(
        id=level_id,
        word=str(entry["word"]).strip(),
        root=str(entry["root"]).strip(),
        decoys=tuple(str(item).strip() for item in entry.get("decoys") or []),
        pos=str(entry["pos"]).strip(),
        pos_decoys=tuple(str(item).strip() for item in entry.get("pos_decoys") or []),
    )
