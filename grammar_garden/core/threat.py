"""Random bear attacks.

The trigger chance grows with the number of queued mistakes, so players
with more gaps are pushed into review more often. Once a bear arrives it
stays for ``THREAT_DURATION_ROUNDS`` rewarded answers (see ``rewards``).
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Protocol

from grammar_garden.core.progress import ProgressState, Review, Sequential
from grammar_garden.core.review import MistakeQueue

logger = logging.getLogger(__name__)

BASE_TRIGGER_RATE = 0.05
IMPERFECT_TRIGGER_BONUS = 0.10
THREAT_DURATION_ROUNDS = 3


class RandomSource(Protocol):
    def random(self) -> float: ...


class ThreatScheduler:
    def __init__(self, rng: Optional[RandomSource] = None) -> None:
        self._rng: RandomSource = rng if rng is not None else random.Random()

    @staticmethod
    def trigger_probability(queue_length: int, total_levels: int, was_perfect: bool) -> float:
        """Additive, uncapped chance of a bear after one completed level."""
        chance = BASE_TRIGGER_RATE + queue_length / max(total_levels, 1)
        if not was_perfect:
            chance += IMPERFECT_TRIGGER_BONUS
        return chance

    def evaluate(
        self,
        state: ProgressState,
        queue: MistakeQueue,
        total_levels: int,
        was_perfect: bool,
    ) -> bool:
        """Roll for a bear once per completed level. Returns True when one arrives.

        No roll happens while a defense is active or a bear is already here.
        When the mistake queue has a resolvable head, play switches to review
        with that level as the current one.
        """
        if state.has_active_defense() or state.is_threat_active:
            return False

        chance = self.trigger_probability(len(queue), total_levels, was_perfect)
        roll = self._rng.random()
        logger.debug("Bear roll %.3f against chance %.3f", roll, chance)
        if roll >= chance:
            return False

        state.is_threat_active = True
        state.rounds_until_threat_leaves = THREAT_DURATION_ROUNDS

        head = queue.peek_next_review()
        if head is not None:
            resume: Sequential = state.sequential_position
            state.position = Review(level_id=head.id, resume=resume)
            logger.info("A bear attacks (chance %d%%)! Review mode started", round(chance * 100))
        else:
            logger.info("A bear attacks (chance %d%%) and demands a toll", round(chance * 100))
        return True
