"""Command registry: case-insensitive mapping from names to handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator, Optional

from .terminal import ShellIO

CommandResult = Optional[Awaitable[None]]
CommandHandler = Callable[["CommandContext"], CommandResult]


@dataclass
class CommandContext:
    """Per-invocation context handed to a command handler.

    Attributes:
        raw_command: The trimmed line as typed.
        args: Tokens after the command name.
        io: Output sink and focus controls.
    """

    raw_command: str
    args: list[str]
    io: ShellIO


@dataclass
class Command:
    name: str
    handler: CommandHandler
    summary: str = ""


class CommandRegistry:
    """Name-keyed command table. Registering an existing name replaces it."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def register(self, name: str, handler: CommandHandler, summary: str = "") -> None:
        key = name.lower()
        self._commands[key] = Command(key, handler, summary)

    def unregister(self, name: str) -> None:
        self._commands.pop(name.lower(), None)

    def has(self, name: str) -> bool:
        return name.lower() in self._commands

    def get(self, name: str) -> Command | None:
        return self._commands.get(name.lower())

    def names(self) -> list[str]:
        return sorted(self._commands)

    def completions(self, prefix: str) -> list[str]:
        """Registered names starting with prefix (case-insensitive), sorted."""
        lowered = prefix.lower()
        return sorted(name for name in self._commands if name.startswith(lowered))

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)
