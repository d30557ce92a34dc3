"""Chat domain models: model-facing turns and the visible transcript."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    USER = "user"
    MODEL = "model"


@dataclass(frozen=True)
class Turn:
    """One entry of a session's model-facing history.

    ``parts`` are concatenated into a single message when sent.
    """

    role: Role
    parts: tuple[str, ...]

    @property
    def text(self) -> str:
        return "".join(self.parts)

    def to_message(self) -> dict:
        """OpenAI-style message dict ('model' maps to 'assistant')."""
        role = "assistant" if self.role is Role.MODEL else "user"
        return {"role": role, "content": self.text}


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ChatMessage:
    """One message in the visible transcript (append-only)."""

    role: Role
    text: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: int = field(default_factory=now_ms)
