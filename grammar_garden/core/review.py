from __future__ import annotations

import logging
from typing import List, Optional

from grammar_garden.core.levels import ContentCatalog, Level
from grammar_garden.core.progress import ProgressState

logger = logging.getLogger(__name__)


class MistakeQueue:
    """FIFO of level ids answered incorrectly, stored on ``state.mistake_queue``.

    Oldest mistake is reviewed first; ids are never reordered.
    """

    def __init__(self, state: ProgressState, catalog: ContentCatalog) -> None:
        self._state = state
        self._catalog = catalog

    def __len__(self) -> int:
        return len(self._state.mistake_queue)

    @property
    def ids(self) -> List[int]:
        return list(self._state.mistake_queue)

    def record_mistake(self, level_id: int) -> None:
        """Queue ``level_id`` unless it is already waiting for review."""
        if self._catalog.get_level_by_id(level_id) is None:
            logger.warning("Ignoring mistake for unknown level id %s", level_id)
            return
        if level_id not in self._state.mistake_queue:
            self._state.mistake_queue.append(level_id)

    def peek_next_review(self) -> Optional[Level]:
        """Return the level at the head of the queue, dropping stale ids on the way."""
        queue = self._state.mistake_queue
        while queue:
            level = self._catalog.get_level_by_id(queue[0])
            if level is not None:
                return level
            logger.warning("Dropping unknown level id %s from the mistake queue", queue[0])
            queue.pop(0)
        return None

    def resolve_review_head(self) -> None:
        if self._state.mistake_queue:
            resolved = self._state.mistake_queue.pop(0)
            logger.info("Review word %s mastered and removed from the queue", resolved)
