"""Command dispatch: tokenize, look up, run, fall back to the assistant."""

from __future__ import annotations

import inspect
from typing import Awaitable, Callable

from loguru import logger

from .commands import CommandContext, CommandRegistry
from .focus import FocusArbiter
from .terminal import ShellIO
from .tokenizer import tokenize

PROMPT = "$ "

Fallback = Callable[[str], Awaitable[None]]


class Dispatcher:
    """Runs one committed line at a time.

    A handler failure is reported as a single line and never reaches the
    caller, so one bad command cannot wedge the shell. The prompt is written
    after every line, or deferred until focus is released when the handler
    left an application captured.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        io: ShellIO,
        arbiter: FocusArbiter,
        fallback: Fallback,
        prompt: str = PROMPT,
    ) -> None:
        self.registry = registry
        self.prompt = prompt
        self._io = io
        self._arbiter = arbiter
        self._fallback = fallback
        self._running = False

    @property
    def running(self) -> bool:
        """True while a line is being executed (line editing is disabled)."""
        return self._running

    async def dispatch(self, line: str) -> None:
        """Execute a committed line.

        Args:
            line: The line as committed by the line editor.
        """
        self._running = True
        try:
            await self._execute(line.strip())
        finally:
            self._running = False
        self._emit_prompt()

    async def _execute(self, command: str) -> None:
        tokens = tokenize(command)
        if not tokens:
            return

        entry = self.registry.get(tokens[0])
        if entry is None:
            logger.debug("No command {!r}; forwarding line to the assistant", tokens[0])
            await self._guarded(self._fallback(command))
            return

        logger.info("Dispatching command {!r}", entry.name)
        ctx = CommandContext(raw_command=command, args=tokens[1:], io=self._io)
        try:
            result = entry.handler(ctx)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.exception("Command {!r} failed", entry.name)
            self._io.writeln(f"Error: {e}")

    async def _guarded(self, awaitable: Awaitable[None]) -> None:
        try:
            await awaitable
        except Exception as e:
            logger.exception("Assistant fallback failed")
            self._io.writeln(f"Error: {e}")

    def _emit_prompt(self) -> None:
        if self._arbiter.is_captured:
            self._arbiter.on_next_release(lambda: self._io.write(self.prompt))
        else:
            self._io.write(self.prompt)
