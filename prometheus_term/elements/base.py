"""Base class for full-screen modal applications.

A modal application owns the whole screen and every key event while it
runs. Lifecycle:
    1. start() - capture focus, hide the cursor, on_activate(), first draw
    2. get_lines() -> render (the entire screen is redrawn on every change)
    3. handle_key() -> process key, return (done, exit_lines)
    4. exit() - on_deactivate(), clear, restore cursor, report, note, release
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from loguru import logger

from ..conversation import ConversationHistory
from ..cues import Cues
from ..keys import KeyEvent
from ..terminal import ShellIO


class ModalApp(ABC):
    """A self-contained interactive mode behind the focus capture contract.

    Subclasses keep their own state and implement get_lines() and
    handle_key(). Every exit path, including a handler that raises, goes
    through exit(), which releases focus back to the shell.

    Usage:
        app = SomeApp(io, history)
        await app.run()  # returns once the user leaves the application
    """

    #: Conversation note recorded when the application exits.
    exit_note: str = ""

    def __init__(
        self,
        io: ShellIO,
        history: ConversationHistory,
        cues: Cues | None = None,
    ) -> None:
        self.io = io
        self.history = history
        self.cues = cues or Cues()
        self.active = False
        self._closed = asyncio.Event()
        self._drawn: list[str] | None = None

    @abstractmethod
    def get_lines(self) -> list[str]:
        """Return the full screen contents, top to bottom."""
        ...

    @abstractmethod
    def handle_key(self, event: KeyEvent) -> tuple[bool, list[str] | None]:
        """Handle one key event (down or up).

        Returns:
            (done, exit_lines) - if done=True, the application exits and
            prints exit_lines at the shell.
        """
        ...

    def on_activate(self) -> None:
        """Called once, before the first draw."""
        pass

    def on_deactivate(self) -> None:
        """Called once, before the screen is handed back."""
        pass

    def start(self) -> None:
        self.active = True
        self.io.capture(self._on_key)
        self.io.hide_cursor()
        self.on_activate()
        self.redraw()
        logger.info("{} started", type(self).__name__)

    async def run(self) -> None:
        self.start()
        await self._closed.wait()

    def redraw(self) -> None:
        """Repaint the whole screen if its contents changed since the last draw."""
        lines = self.get_lines()
        if lines == self._drawn:
            return
        self._drawn = lines
        self.io.clear()
        self.io.write("\n".join(lines))

    def exit(self, lines: list[str] | None = None) -> None:
        if not self.active:
            return
        self.active = False
        try:
            self.on_deactivate()
        finally:
            self.io.clear()
            self.io.show_cursor()
            for line in lines or []:
                self.io.writeln(line)
            if self.exit_note:
                self.history.add_note(self.exit_note)
            self.io.release()
            self._closed.set()
            logger.info("{} exited", type(self).__name__)

    def _on_key(self, event: KeyEvent) -> None:
        if not self.active:
            return
        try:
            done, lines = self.handle_key(event)
        except Exception as e:
            logger.exception("{} failed on key {!r}; forcing exit", type(self).__name__, event.key)
            self.exit([f"Error: {e}", ""])
            return
        if done:
            self.exit(lines)
        else:
            self.redraw()
