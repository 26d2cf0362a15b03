from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

import pytest

from grammar_garden.core.levels import ContentCatalog, Level, Zone
from grammar_garden.core.progress import ProgressStore
from grammar_garden.core.shop import ShopCatalog, ShopItem


def make_level(level_id: int) -> Level:
    return Level(
        id=level_id,
        word=f"word{level_id}",
        root=f"root{level_id}",
        decoys=("x", "y"),
        pos="Noun",
        pos_decoys=("Verb", "Adjective"),
    )


class ScriptedRandom:
    """Returns queued draws in order and counts how many were taken."""

    def __init__(self, draws: Iterable[float] = ()) -> None:
        self._draws: List[float] = list(draws)
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if not self._draws:
            raise AssertionError("unexpected random draw")
        return self._draws.pop(0)


class NeverTriggers:
    """Always draws just under 1.0."""

    def __init__(self) -> None:
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return 0.999


@pytest.fixture()
def catalog() -> ContentCatalog:
    """Two three-word zones followed by an empty zone."""
    return ContentCatalog(
        zones=[
            Zone(id="garden", title="Garden", levels=tuple(make_level(i) for i in (1, 2, 3))),
            Zone(id="glade", title="Glade", levels=tuple(make_level(i) for i in (4, 5, 6)), locked=True),
            Zone(id="temple", title="Temple", levels=(), locked=True),
        ]
    )


@pytest.fixture()
def shop() -> ShopCatalog:
    return ShopCatalog(
        items=[
            ShopItem("straw_hat", "Straw Hat", "", 100, "soft", "cosmetic", "hat"),
            ShopItem("fancy_apron", "Apron", "", 3, "hard", "cosmetic", "apron"),
            ShopItem("fertilizer", "Fertilizer", "", 50, "soft", "consumable", "fertilizer_count"),
            ShopItem("rattler_snake", "The Rattler", "", 10, "hard", "defense", "snake_active"),
        ]
    )


@pytest.fixture()
def store(tmp_path: Path) -> ProgressStore:
    """ProgressStore backed by a temp file so tests don't touch ~/.grammar_garden."""
    return ProgressStore(tmp_path / "progress.json")
