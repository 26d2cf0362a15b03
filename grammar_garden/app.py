"""Application entry point and setup for Grammar Garden."""

import logging
import random
from pathlib import Path
from typing import Optional

from grammar_garden.core.engine import ProgressionEngine
from grammar_garden.core.levels import ContentCatalog
from grammar_garden.core.progress import ProgressStore
from grammar_garden.core.shop import ShopCatalog
from grammar_garden.core.threat import ThreatScheduler


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_engine(
    data_dir: Optional[Path] = None,
    progress_file: Optional[Path] = None,
    seed: Optional[int] = None,
) -> ProgressionEngine:
    """Load content, shop and saved progress and wire up an engine."""
    catalog = ContentCatalog(base_dir=data_dir / "zones" if data_dir else None)
    shop = ShopCatalog(file_path=data_dir / "shop.yaml" if data_dir else None)
    store = ProgressStore(progress_file)
    scheduler = ThreatScheduler(random.Random(seed))
    return ProgressionEngine(catalog=catalog, store=store, shop=shop, scheduler=scheduler)


def run() -> None:
    """Load the player's garden and log where they stand."""
    configure_logging()
    engine = create_engine()
    state = engine.get_state()
    level = engine.get_current_level()

    for zone_state in engine.zone_overview():
        marker = "*" if zone_state.is_current else " "
        status = "open" if zone_state.unlocked else "locked"
        logging.info("%s %s (%d words, %s)", marker, zone_state.zone.title, zone_state.level_count, status)
    logging.info(
        "Current word: %s | harvest %d | gems %d | health %d | mistakes %d%s%s",
        level.word,
        state.soft_currency,
        state.hard_currency,
        state.garden_health,
        len(state.mistake_queue),
        " | reviewing" if state.is_in_review_mode else "",
        " | bear in the garden" if state.is_threat_active else "",
    )


if __name__ == "__main__":
    run()
