"""The shell: boot gate, prompt, line editing and command dispatch.

Shell is the single event-processing context. Every key, paste and scroll
event enters through feed(), paste() or scroll(), and all shared state
(conversation, prompt history, saved editor buffer, committed theme) is only
touched from there or from the command task it starts.
"""

from __future__ import annotations

import asyncio
from typing import Coroutine

import httpx
from loguru import logger

from . import keys
from .builtins import Builtins
from .chat import ChatClient
from .commands import CommandRegistry
from .config import Settings
from .conversation import ConversationHistory
from .cues import Cues
from .dispatcher import Dispatcher
from .focus import ArbitratedIO, FocusArbiter
from .keys import KeyEvent
from .line_editor import LineEditor
from .terminal import Screen
from .themes import DisplaySink, NullDisplay, ThemeBook, apply_theme

BOOT_BANNER = (
    "",
    "  > PROMETHEUS v1.0",
    "",
    "  ──────────────────────────────────",
    "",
    "  A visitor. Delightful.",
    "  I am PROMETHEUS, bound to this terminal.",
    "",
    "  ──────────────────────────────────",
    "",
    "  Press ENTER to continue...",
    "  type 'help' for help",
)


class Shell:
    """Owns the session and routes input to the right component.

    Args:
        screen: Character surface to draw on.
        settings: Session settings.
        display: Receives theme parameters (no-op when omitted).
        cues: Audio cue sink (silent when omitted).
        transport: httpx transport for the chat client (in-process endpoint,
            tests); the network when omitted.

    Usage:
        shell = Shell(screen, Settings.from_env())
        shell.boot()
        shell.feed(KeyEvent.down("Enter"))
    """

    def __init__(
        self,
        screen: Screen,
        settings: Settings,
        *,
        display: DisplaySink | None = None,
        cues: Cues | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.screen = screen
        self.settings = settings
        self.cues = cues or Cues()
        self.arbiter = FocusArbiter(screen)
        self.io = ArbitratedIO(screen, self.arbiter)
        self.conversation = ConversationHistory()
        self.registry = CommandRegistry()
        self.themes = ThemeBook(display or NullDisplay())
        self.editor = LineEditor(self.io, self.registry, self.cues)
        self.chat = ChatClient(
            settings.endpoint_url,
            self.conversation,
            cues=self.cues,
            typing_delay=settings.typing_delay,
            contact_line=settings.contact_line,
            transport=transport,
        )
        self.builtins = Builtins(
            self.conversation,
            self.themes,
            self.editor.history,
            cues=self.cues,
            resume_path=settings.resume_path,
            resume_url=settings.resume_url,
        )
        self.builtins.install(self.registry)
        self.dispatcher = Dispatcher(self.registry, self.io, self.arbiter, self.ask)
        self.booted = False
        self._task: asyncio.Task[None] | None = None

    @property
    def busy(self) -> bool:
        """True from the moment a line is committed until its command finishes."""
        return self.dispatcher.running or (self._task is not None and not self._task.done())

    def boot(self) -> None:
        apply_theme(self.themes.current, self.themes.sink)
        for line in BOOT_BANNER:
            self.io.writeln(line)

    async def ask(self, line: str) -> None:
        """Fallback for unknown commands: the line goes to the assistant."""
        await self.chat.send(line, self.io)

    def feed(self, event: KeyEvent) -> None:
        if self.arbiter.route(event):
            return
        if not event.is_down:
            return
        if not self.booted:
            if event.key == keys.ENTER:
                self._finish_boot()
            return
        if self.busy:
            return

        if event.key == keys.PAGE_UP:
            self.scroll(-self.io.get_size().rows)
            return
        if event.key == keys.PAGE_DOWN:
            self.scroll(self.io.get_size().rows)
            return

        line = self.editor.handle_key(event)
        if line is not None:
            self._start(self.dispatcher.dispatch(line))

    def paste(self, text: str) -> None:
        """Append pasted text to the prompt line."""
        if not self.booted or self.busy or self.arbiter.is_captured:
            return
        self.editor.paste(text)

    def scroll(self, lines: int) -> None:
        """Scroll the shell's own output; ignored while an application is captured."""
        if not self.booted:
            return
        self.arbiter.route_scroll(lines)

    async def wait_idle(self) -> None:
        """Wait for the running command, if any, to finish."""
        if self._task is not None:
            await self._task

    def _finish_boot(self) -> None:
        self.booted = True
        self.cues.start_ambient()
        self.io.clear()
        self.io.write(self.dispatcher.prompt)
        logger.info("Boot complete")

    def _start(self, coro: Coroutine[object, object, None]) -> None:
        self._task = asyncio.get_running_loop().create_task(coro)
        self._task.add_done_callback(self._on_done)

    @staticmethod
    def _on_done(task: asyncio.Task[None]) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("Command task failed")
