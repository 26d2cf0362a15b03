from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml

from grammar_garden.core.levels import DATA_DIR
from grammar_garden.core.progress import (
    COSMETIC_SLOTS,
    CONSUMABLE_SLOTS,
    DEFENSE_SLOTS,
    ProgressState,
)

logger = logging.getLogger(__name__)

CURRENCIES = ("soft", "hard")
CATEGORY_SLOTS = {
    "cosmetic": COSMETIC_SLOTS,
    "consumable": CONSUMABLE_SLOTS,
    "defense": DEFENSE_SLOTS,
}
CURRENCY_NAMES = {"soft": "Root Harvest", "hard": "Guardian Gems"}


@dataclass(frozen=True)
class ShopItem:
    id: str
    name: str
    description: str
    cost: int
    currency: str
    category: str
    slot: str


@dataclass(frozen=True)
class PurchaseResult:
    success: bool
    message: str


class ShopCatalog:
    """Purchasable items, loaded from ``data/shop.yaml`` unless given directly."""

    def __init__(self, items: Optional[Sequence[ShopItem]] = None, file_path: Optional[Path] = None) -> None:
        if items is None:
            items = self._load_items(file_path or DATA_DIR / "shop.yaml")
        self._items: Dict[str, ShopItem] = {}
        for item in items:
            _validate_item(item)
            if item.id in self._items:
                raise ValueError(f"Duplicate shop item id: {item.id}")
            self._items[item.id] = item

    def all(self) -> List[ShopItem]:
        return list(self._items.values())

    def get(self, item_id: str) -> Optional[ShopItem]:
        return self._items.get(item_id)

    def purchase(self, item_id: str, state: ProgressState) -> PurchaseResult:
        """Buy ``item_id`` with the player's currency.

        Every failed check returns a result with its own message and leaves
        ``state`` untouched. Buying a defense while a bear is active sends
        the bear away at once.
        """
        item = self._items.get(item_id)
        if item is None:
            return PurchaseResult(False, "Error: Item not found.")

        if item.category == "cosmetic" and state.inventory.get(item.slot) == item.id:
            return PurchaseResult(False, "You already own this item.")
        if item.category == "defense" and state.inventory.get(item.slot):
            return PurchaseResult(False, f"{item.name} is already guarding your garden!")

        balance = state.soft_currency if item.currency == "soft" else state.hard_currency
        if balance < item.cost:
            return PurchaseResult(False, f"Not enough {CURRENCY_NAMES[item.currency]}! Need {item.cost}.")

        if item.currency == "soft":
            state.soft_currency -= item.cost
        else:
            state.hard_currency -= item.cost

        if item.category == "cosmetic":
            state.inventory[item.slot] = item.id
        elif item.category == "consumable":
            state.inventory[item.slot] = int(state.inventory.get(item.slot) or 0) + 1
        else:
            state.inventory[item.slot] = True
            if state.is_threat_active:
                state.is_threat_active = False
                state.rounds_until_threat_leaves = 0
                logger.info("%s purchased, the bear has been scared off", item.name)

        logger.info("Purchased %s for %d %s", item.id, item.cost, item.currency)
        return PurchaseResult(True, f"{item.name} purchased! Garden upgraded.")

    def _load_items(self, file_path: Path) -> List[ShopItem]:
        if not file_path.exists():
            raise FileNotFoundError(f"Shop file not found: {file_path}")
        raw = yaml.safe_load(file_path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict) or not isinstance(raw.get("items"), list):
            raise ValueError(f"{file_path.name}: expected YAML with an 'items' list")

        items: List[ShopItem] = []
        for entry in raw["items"]:
            if not isinstance(entry, dict):
                raise ValueError(f"{file_path.name}: item entries must be mappings")
            missing = [key for key in ("id", "name", "cost", "currency", "category", "slot") if key not in entry]
            if missing:
                raise ValueError(f"{file_path.name}: item {entry.get('id', '?')} is missing {', '.join(missing)}")
            items.append(
                ShopItem(
                    id=str(entry["id"]),
                    name=str(entry["name"]).strip(),
                    description=str(entry.get("description", "")).strip(),
                    cost=int(entry["cost"]),
                    currency=str(entry["currency"]),
                    category=str(entry["category"]),
                    slot=str(entry["slot"]),
                )
            )
        return items


def _validate_item(item: ShopItem) -> None:
    if item.currency not in CURRENCIES:
        raise ValueError(f"Shop item {item.id}: unknown currency {item.currency!r}")
    if item.category not in CATEGORY_SLOTS:
        raise ValueError(f"Shop item {item.id}: unknown category {item.category!r}")
    if item.slot not in CATEGORY_SLOTS[item.category]:
        raise ValueError(f"Shop item {item.id}: slot {item.slot!r} does not hold {item.category} items")
    if item.cost <= 0:
        raise ValueError(f"Shop item {item.id}: cost must be positive")
