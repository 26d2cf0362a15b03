"""Currency rewards for correct answers.

Modifiers run in a fixed order: fertilizer doubling first (part-of-speech
answers only), then the threat halving of the soft yield. Hard currency is
never reduced by a threat.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from grammar_garden.core.progress import FERTILIZER_SLOT, ProgressState

logger = logging.getLogger(__name__)

THREAT_SOFT_FACTOR = 0.5


class RewardKind(Enum):
    ROOT_SUCCESS = "root_success"
    POS_SUCCESS = "pos_success"
    PERFECT_BONUS = "perfect_bonus"


BASE_YIELDS = {
    RewardKind.ROOT_SUCCESS: (1, 0),
    RewardKind.POS_SUCCESS: (2, 0),
    RewardKind.PERFECT_BONUS: (0, 1),
}


@dataclass(frozen=True)
class RewardOutcome:
    soft_delta: int
    hard_delta: int
    fertilizer_used: bool = False
    threat_round_counted: bool = False
    threat_cleared: bool = False


def compute_reward(kind: RewardKind, state: ProgressState) -> RewardOutcome:
    """Work out the deltas for ``kind`` without touching ``state``."""
    soft, hard = BASE_YIELDS[kind]

    fertilizer_used = kind is RewardKind.POS_SUCCESS and state.fertilizer_count > 0
    if fertilizer_used:
        soft *= 2

    if state.is_threat_active:
        soft = math.floor(soft * THREAT_SOFT_FACTOR)

    counted = state.is_threat_active and (soft + hard) > 0
    cleared = counted and state.rounds_until_threat_leaves - 1 <= 0
    return RewardOutcome(
        soft_delta=soft,
        hard_delta=hard,
        fertilizer_used=fertilizer_used,
        threat_round_counted=counted,
        threat_cleared=cleared,
    )


def apply_reward(kind: RewardKind, state: ProgressState) -> RewardOutcome:
    """Compute the reward for ``kind`` and apply it, including side effects."""
    outcome = compute_reward(kind, state)
    if outcome.fertilizer_used:
        state.inventory[FERTILIZER_SLOT] = state.fertilizer_count - 1
        logger.info("Fertilizer consumed, harvest doubled (%d left)", state.fertilizer_count)

    state.soft_currency += outcome.soft_delta
    state.hard_currency += outcome.hard_delta

    if outcome.threat_round_counted:
        state.rounds_until_threat_leaves = max(0, state.rounds_until_threat_leaves - 1)
    if outcome.threat_cleared:
        state.is_threat_active = False
        state.rounds_until_threat_leaves = 0
        logger.info("The bear has left the garden")

    logger.info(
        "Reward %s: +%d soft, +%d hard (soft=%d, hard=%d)",
        kind.value,
        outcome.soft_delta,
        outcome.hard_delta,
        state.soft_currency,
        state.hard_currency,
    )
    return outcome
