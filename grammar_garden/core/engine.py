from __future__ import annotations

import copy
import logging
from typing import List, Optional

from grammar_garden.core.levels import ContentCatalog, Level, Zone
from grammar_garden.core.models import ZoneState
from grammar_garden.core.progress import (
    MAX_HEALTH,
    ProgressState,
    ProgressStore,
    Review,
    Sequential,
    position_for,
)
from grammar_garden.core.review import MistakeQueue
from grammar_garden.core.rewards import RewardKind, apply_reward
from grammar_garden.core.session import LevelAttempt, Phase
from grammar_garden.core.shop import PurchaseResult, ShopCatalog, ShopItem
from grammar_garden.core.threat import ThreatScheduler

logger = logging.getLogger(__name__)

ROOT_FAILURE_DAMAGE = 5
POS_FAILURE_DAMAGE = 10
POS_SUCCESS_HEAL = 1


class ProgressionEngine:
    """Drives a player through zones, reviews and the garden economy.

    All collaborators are passed in, so several engines can run side by
    side. Calls must not overlap; every mutating call saves through the
    store, and a failed save never interrupts play.
    """

    def __init__(
        self,
        catalog: ContentCatalog,
        store: ProgressStore,
        shop: Optional[ShopCatalog] = None,
        scheduler: Optional[ThreatScheduler] = None,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._shop = shop or ShopCatalog()
        self._scheduler = scheduler or ThreatScheduler()

        loaded = store.load()
        if loaded is None:
            self._state = self._default_state()
            self._reconcile()
            self._store.save(self._state)
        else:
            self._state = loaded
            self._reconcile()
        self._queue = MistakeQueue(self._state, catalog)
        self._attempt = LevelAttempt(self.get_current_level().id)

    # -- Read access -------------------------------------------------------

    def get_state(self) -> ProgressState:
        """Return a copy of the progress state; changing it has no effect."""
        return copy.deepcopy(self._state)

    def get_current_level(self) -> Level:
        position = self._state.position
        if isinstance(position, Review):
            level = self._catalog.get_level_by_id(position.level_id)
            if level is not None:
                return level
        zone = self._current_zone()
        return zone.levels[self._state.current_level_index]

    def get_attempt(self) -> LevelAttempt:
        return self._attempt

    def get_zones(self) -> List[Zone]:
        return self._catalog.get_zones()

    def zone_overview(self) -> List[ZoneState]:
        zones = self._catalog.get_zones()
        current_id = self._state.current_zone_id
        current_index = next((i for i, z in enumerate(zones) if z.id == current_id), 0)
        return [
            ZoneState(
                zone=zone,
                unlocked=not zone.locked or i <= current_index,
                level_count=len(zone.levels),
                is_current=zone.id == current_id,
            )
            for i, zone in enumerate(zones)
        ]

    def shop_items(self) -> List[ShopItem]:
        return self._shop.all()

    # -- Phase outcomes ----------------------------------------------------

    def on_first_phase_success(self) -> None:
        self._track(Phase.ROOT, self._attempt.level_id, True)
        apply_reward(RewardKind.ROOT_SUCCESS, self._state)
        self._store.save(self._state)

    def on_first_phase_failure(self, level_id: int) -> None:
        self._track(Phase.ROOT, level_id, False)
        self._queue.record_mistake(level_id)
        self._state.change_health(-ROOT_FAILURE_DAMAGE)
        logger.warning("Root answer missed on level %s, health %d", level_id, self._state.garden_health)
        self._store.save(self._state)

    def on_second_phase_success(self, level_id: int, was_perfect_this_attempt: Optional[bool] = None) -> None:
        """Reward a correct part of speech.

        Without an explicit flag the visit is perfect when neither phase had
        a wrong answer (see ``LevelAttempt``).
        """
        if was_perfect_this_attempt is None:
            was_perfect_this_attempt = self._attempt.is_perfect()
        self._track(Phase.POS, level_id, True)
        apply_reward(RewardKind.POS_SUCCESS, self._state)
        if was_perfect_this_attempt:
            apply_reward(RewardKind.PERFECT_BONUS, self._state)
        self._state.change_health(POS_SUCCESS_HEAL)
        self._store.save(self._state)

    def on_second_phase_failure(self, level_id: int) -> None:
        self._track(Phase.POS, level_id, False)
        self._queue.record_mistake(level_id)
        self._state.change_health(-POS_FAILURE_DAMAGE)
        logger.warning("Part of speech missed on level %s, health %d", level_id, self._state.garden_health)
        self._store.save(self._state)

    # -- Progression -------------------------------------------------------

    def advance(self, was_perfect: Optional[bool] = None) -> Level:
        """Move past the level just finished and return the new current level."""
        if was_perfect is None:
            was_perfect = self._attempt.is_perfect()
        self._store.save(self._state)

        if self._state.is_in_review_mode:
            if was_perfect:
                self._queue.resolve_review_head()
            head = self._queue.peek_next_review()
            if head is not None:
                self._state.position = Review(level_id=head.id, resume=self._state.sequential_position)
                return self._finish_advance()
            self._state.position = self._state.sequential_position
            logger.info("Review complete, returning to the main path")

        if self._scheduler.evaluate(self._state, self._queue, self._catalog.total_level_count(), was_perfect):
            if self._state.is_in_review_mode:
                return self._finish_advance()

        self._state.position = self._next_sequential()
        return self._finish_advance()

    def purchase(self, item_id: str) -> PurchaseResult:
        result = self._shop.purchase(item_id, self._state)
        if result.success:
            self._store.save(self._state)
        return result

    def reset(self) -> None:
        """Throw away all progress and start over."""
        self._store.reset()
        self._state = self._default_state()
        self._queue = MistakeQueue(self._state, self._catalog)
        self._attempt = LevelAttempt(self.get_current_level().id)
        self._store.save(self._state)
        logger.info("Progress reset")

    # -- Internals ---------------------------------------------------------

    def _finish_advance(self) -> Level:
        level = self.get_current_level()
        self._attempt = LevelAttempt(level.id)
        self._store.save(self._state)
        return level

    def _next_sequential(self) -> Sequential:
        zone = self._current_zone()
        next_index = self._state.current_level_index + 1
        if next_index < len(zone.levels):
            return Sequential(zone.id, next_index)

        logger.info("Zone %s completed", zone.title)
        next_zone = self._catalog.next_zone(zone.id)
        if next_zone is not None and next_zone.levels:
            logger.info("Moving on to zone %s", next_zone.title)
            return Sequential(next_zone.id, 0)
        if next_zone is None:
            logger.info("All zones mastered, replaying %s", zone.title)
        else:
            logger.info("Zone %s has no levels yet, replaying %s", next_zone.title, zone.title)
        return Sequential(zone.id, 0)

    def _current_zone(self) -> Zone:
        zone = self._catalog.get_zone(self._state.current_zone_id)
        return zone if zone is not None else self._catalog.first_playable_zone()

    def _default_state(self) -> ProgressState:
        return ProgressState(position=Sequential(self._catalog.first_playable_zone().id, 0))

    def _track(self, phase: Phase, level_id: int, correct: bool) -> None:
        if level_id != self._attempt.level_id or self._attempt.phase is not phase:
            logger.debug("Untracked %s answer for level %s", phase.value, level_id)
            return
        if phase is Phase.ROOT:
            self._attempt.record_root(correct)
        else:
            self._attempt.record_pos(correct)

    def _reconcile(self) -> None:
        """Bring a loaded state back in line with the catalog."""
        state = self._state
        sequential = state.sequential_position
        zone = self._catalog.get_zone(sequential.zone_id)
        if zone is None or not zone.levels:
            if sequential.zone_id:
                logger.warning("Unknown or empty zone %r in saved progress, starting over", sequential.zone_id)
            sequential = Sequential(self._catalog.first_playable_zone().id, 0)
        elif not 0 <= sequential.index < len(zone.levels):
            sequential = Sequential(zone.id, min(max(sequential.index, 0), len(zone.levels) - 1))

        queue: List[int] = []
        for level_id in state.mistake_queue:
            if level_id not in queue and self._catalog.get_level_by_id(level_id) is not None:
                queue.append(level_id)
        state.mistake_queue[:] = queue

        state.position = position_for(sequential, queue, state.is_in_review_mode)

        state.garden_health = max(0, min(MAX_HEALTH, state.garden_health))
        state.soft_currency = max(0, state.soft_currency)
        state.hard_currency = max(0, state.hard_currency)
        state.rounds_until_threat_leaves = max(0, state.rounds_until_threat_leaves)
        if not state.is_threat_active:
            state.rounds_until_threat_leaves = 0
