from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Phase(Enum):
    ROOT = "root"
    POS = "pos"
    DONE = "done"


@dataclass
class PhaseResult:
    """Result of a single answer submission."""

    phase: Phase
    correct: bool
    failures: int


class LevelAttempt:
    """Tracks one visit of a level across its two phases.

    A visit starts when a level becomes current and ends when the engine
    moves on. The player finds the root first, then its part of speech; a
    wrong answer keeps the player on the same phase.

    A visit is **perfect** when both phases were solved without a single
    wrong answer. Each review visit is a fresh attempt, so a word that was
    missed before can still earn the perfect bonus during review.
    """

    def __init__(self, level_id: int) -> None:
        self._level_id = level_id
        self._phase = Phase.ROOT
        self._root_failures = 0
        self._pos_failures = 0

    @property
    def level_id(self) -> int:
        return self._level_id

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def root_failures(self) -> int:
        return self._root_failures

    @property
    def pos_failures(self) -> int:
        return self._pos_failures

    def is_complete(self) -> bool:
        return self._phase is Phase.DONE

    def is_perfect(self) -> bool:
        """True while no wrong answer has been given on this visit."""
        return self._root_failures == 0 and self._pos_failures == 0

    def record_root(self, correct: bool) -> PhaseResult:
        return self._record(Phase.ROOT, correct)

    def record_pos(self, correct: bool) -> PhaseResult:
        return self._record(Phase.POS, correct)

    def _record(self, phase: Phase, correct: bool) -> PhaseResult:
        if self._phase is not phase:
            raise ValueError(f"Cannot answer the {phase.value} phase while in {self._phase.value}")
        if phase is Phase.ROOT:
            if correct:
                self._phase = Phase.POS
            else:
                self._root_failures += 1
            failures = self._root_failures
        else:
            if correct:
                self._phase = Phase.DONE
            else:
                self._pos_failures += 1
            failures = self._pos_failures
        return PhaseResult(phase=phase, correct=correct, failures=failures)
