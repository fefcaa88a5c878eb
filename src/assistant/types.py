"""Typed payloads shared by the chat session, prompt helpers, and runtime."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Literal, Protocol

ChatRole = Literal["user", "assistant", "system"]


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@dataclass(frozen=True)
class ChatMessage:
    role: ChatRole
    content: str
    timestamp: dt.datetime = field(default_factory=_utc_now)

    def to_prompt(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ChatResponse:
    """Reply text plus the model that produced it."""
    content: str
    model: str
    approx_tokens: int


@dataclass(frozen=True)
class Flashcard:
    front: str
    back: str


class ChatBackend(Protocol):
    def complete(self, messages: list[dict[str, str]], max_tokens: int) -> str:
        ...
