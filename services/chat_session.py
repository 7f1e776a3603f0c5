"""Conversation orchestration: history, project context and the LLM round-trip."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from clients.llm_client import LLMClient
from config import Settings
from models.schemas import ConversationTurn
from services.context_assembler import ContextAssembler
from services.project_index import ProjectIndex

logger = logging.getLogger(__name__)


class Command(str, Enum):
    EXIT = "exit"
    FILES = "files"
    CONTEXT = "context"
    OVERVIEW = "overview"
    CLEAR = "clear"


_COMMAND_ALIASES: dict[str, Command] = {
    "quit": Command.EXIT,
    "exit": Command.EXIT,
    "bye": Command.EXIT,
    "q": Command.EXIT,
    "files": Command.FILES,
    "ls": Command.FILES,
    "list files": Command.FILES,
    "show files": Command.FILES,
    "context": Command.CONTEXT,
    "show context": Command.CONTEXT,
    "overview": Command.OVERVIEW,
    "summary": Command.OVERVIEW,
    "clear": Command.CLEAR,
    "reset": Command.CLEAR,
}


def classify_command(text: str) -> Command | None:
    """Return the session command *text* names, if any."""
    return _COMMAND_ALIASES.get(text.strip().lower())


@dataclass
class TurnResult:
    reply: str
    context_files: list[str] = field(default_factory=list)
    elapsed: float = 0.0


class ChatSession:
    """A single conversation with project awareness.

    The project is scanned once when the session starts.  History holds the
    user's messages without the injected project context.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        settings: Settings,
        project_root: str | Path = ".",
        index: ProjectIndex | None = None,
    ) -> None:
        self._llm = llm_client
        self._settings = settings
        self._history_limit = settings.history_limit
        self._history: list[ConversationTurn] = []

        if index is None:
            index = ProjectIndex(
                project_root,
                max_depth=settings.scan_max_depth,
                max_file_size=settings.max_file_size,
            )
            index.scan()
        self._index = index
        self._assembler = ContextAssembler.from_settings(index, settings)

    @property
    def index(self) -> ProjectIndex:
        return self._index

    @property
    def assembler(self) -> ContextAssembler:
        return self._assembler

    @property
    def history(self) -> list[ConversationTurn]:
        return list(self._history)

    @property
    def model(self) -> str:
        return self._llm.model

    def add_to_history(self, role: str, content: str) -> None:
        self._history.append(ConversationTurn(role=role, content=content))
        # Keep history manageable so requests stay small
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit:]

    def clear(self) -> None:
        self._history.clear()
        self._assembler.clear_context()

    async def ask(self, message: str) -> TurnResult:
        """Send *message* with its project context and record the exchange.

        Raises :class:`LLMClientError` if the API call fails; the user turn
        is kept in history in that case.
        """
        t0 = time.monotonic()
        context = self._assembler.build_context(message, self._history)
        context_files = self._assembler.current_context() if context else []
        logger.info("Context: %d files, %d chars", len(context_files), len(context))

        self.add_to_history("user", message)
        reply = await self._llm.send_with_context(self._history, context)
        self.add_to_history("assistant", reply)

        elapsed = time.monotonic() - t0
        logger.info("Turn completed in %.2fs", elapsed)
        return TurnResult(reply=reply, context_files=context_files, elapsed=elapsed)
