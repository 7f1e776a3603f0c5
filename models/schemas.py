from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ProjectFile(BaseModel):
    """A text/source file found by the project scan."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    relative_path: str = Field(..., description="Path relative to the project root, '/'-separated")
    extension: str
    size: int


class ConversationTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str

    def as_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}
