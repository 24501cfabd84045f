"""Conversation history shared by the command layer and the chat client."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


class Role(Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM_NOTE = "system-note"


@dataclass(frozen=True)
class Turn:
    role: Role
    content: str

    def to_payload(self) -> dict[str, str]:
        """Wire form. System notes travel as bracketed user turns."""
        if self.role is Role.SYSTEM_NOTE:
            return {"role": Role.USER.value, "content": f"[System: {self.content}]"}
        return {"role": self.role.value, "content": self.content}


@dataclass
class ConversationHistory:
    """Append-only record of the session's conversation.

    The command layer adds system notes when something notable happens (a
    modal application was exited); the chat client adds user/assistant turns
    only after a send completes.
    """

    turns: list[Turn] = field(default_factory=list)

    def add_user(self, content: str) -> None:
        self.turns.append(Turn(Role.USER, content))

    def add_assistant(self, content: str) -> None:
        self.turns.append(Turn(Role.ASSISTANT, content))

    def add_note(self, content: str) -> None:
        self.turns.append(Turn(Role.SYSTEM_NOTE, content))

    def to_payload(self) -> list[dict[str, str]]:
        return [turn.to_payload() for turn in self.turns]

    def __len__(self) -> int:
        return len(self.turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.turns)
