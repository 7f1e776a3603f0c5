"""Carry recently mentioned files forward into follow-up turns."""

from __future__ import annotations

from typing import Mapping, Sequence, Union

from models.schemas import ConversationTurn
from utils.relevance import RelevanceMatcher, dedupe

CONTINUITY_WINDOW = 4

Turn = Union[ConversationTurn, Mapping[str, str]]


def _role_and_content(turn: Turn) -> tuple[str, str]:
    if isinstance(turn, ConversationTurn):
        return turn.role, turn.content
    return turn.get("role", ""), turn.get("content", "")


class ContinuityTracker:
    """Re-surfaces files the user mentioned in the last few turns.

    The window counts turns of either role; only the user turns inside it
    are matched. With alternating user/assistant turns a window of 4 looks
    back over two user messages.
    """

    def __init__(self, matcher: RelevanceMatcher, window: int = CONTINUITY_WINDOW) -> None:
        self._matcher = matcher
        self._window = window

    def recently_mentioned(self, history: Sequence[Turn]) -> list[str]:
        if self._window <= 0:
            return []
        found: list[str] = []
        for turn in list(history)[-self._window:]:
            role, content = _role_and_content(turn)
            if role == "user":
                found.extend(self._matcher.extract_candidates(content))
        return dedupe(found)
