"""Per-turn context assembly: pick relevant files and pack them into the budget."""

from __future__ import annotations

import logging
from typing import Sequence

from config import Settings
from services.project_index import ProjectIndex
from utils.context_builder import DEFAULT_BUDGET, PER_FILE_MAX_CHARS, pack
from utils.continuity import CONTINUITY_WINDOW, ContinuityTracker, Turn
from utils.relevance import KEYWORD_MATCH_LIMIT, RelevanceMatcher, dedupe

logger = logging.getLogger(__name__)


class ContextAssembler:
    """Decides which project files accompany a user message.

    Holds a reference to an already scanned :class:`ProjectIndex`; the only
    state kept between turns is the last selection, for introspection.
    """

    def __init__(
        self,
        index: ProjectIndex,
        budget: int = DEFAULT_BUDGET,
        per_file_max: int = PER_FILE_MAX_CHARS,
        keyword_match_limit: int = KEYWORD_MATCH_LIMIT,
        continuity_window: int = CONTINUITY_WINDOW,
    ) -> None:
        if budget <= 0:
            raise ValueError(f"budget must be positive, got {budget}")
        self._index = index
        self._budget = budget
        self._per_file_max = per_file_max
        self._matcher = RelevanceMatcher(index, keyword_match_limit)
        self._continuity = ContinuityTracker(self._matcher, continuity_window)
        self._current: list[str] = []

    @classmethod
    def from_settings(cls, index: ProjectIndex, settings: Settings) -> ContextAssembler:
        return cls(
            index,
            budget=settings.max_context_chars,
            per_file_max=settings.per_file_max_chars,
            keyword_match_limit=settings.keyword_match_limit,
            continuity_window=settings.continuity_window,
        )

    @property
    def matcher(self) -> RelevanceMatcher:
        return self._matcher

    def select(self, message: str, history: Sequence[Turn] = ()) -> list[str]:
        """Files for this turn: the message's own matches, then recent ones."""
        return dedupe([
            *self._matcher.extract_candidates(message),
            *self._continuity.recently_mentioned(history),
        ])

    def build_context(self, message: str, history: Sequence[Turn] = ()) -> str:
        """Return the packed context to prepend to *message*, or ``""``."""
        selection = self.select(message, history)
        self._current = selection
        if not selection:
            return ""

        context = pack(selection, self._index.read, self._budget, self._per_file_max)
        logger.debug("Context built: %d files selected, %d chars", len(selection), len(context))
        return context

    def current_context(self) -> list[str]:
        return list(self._current)

    def clear_context(self) -> None:
        self._current = []
