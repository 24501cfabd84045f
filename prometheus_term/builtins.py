"""Built-in shell commands."""

from __future__ import annotations

import webbrowser
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path

from loguru import logger

from .commands import CommandContext, CommandRegistry
from .conversation import ConversationHistory
from .cues import Cues
from .elements import BufferSlot, EditorApp, InstrumentApp, PagerApp, SelectorApp
from .line_editor import HistoryLog
from .themes import ThemeBook

HELP_FOOTER = "Or just type anything and find out."


def help_lines(registry: CommandRegistry) -> list[str]:
    """The `help` listing: every registered command with its summary, in registration order."""
    width = max((len(command.name) for command in registry), default=0)
    lines = ["Commands:"]
    lines.extend(f"  {command.name:<{width}} - {command.summary}" for command in registry)
    lines.extend(["", HELP_FOOTER])
    return lines


def load_document(path: Path | None = None) -> str:
    """Read the pager document, falling back to the bundled one."""
    if path is not None:
        return path.read_text(encoding="utf-8")
    return resources.files("prometheus_term").joinpath("data/resume.txt").read_text(encoding="utf-8")


@dataclass
class Builtins:
    """Owns the state the built-in commands share for the whole session.

    Attributes:
        conversation: Receives notes when a modal application exits.
        themes: Committed display theme.
        line_history: Lines committed at the prompt.
        slot: The editor's saved buffer.
        cues: Audio cue sink handed to modal applications.
        resume_path: Document for `resume`; the bundled one when None.
        resume_url: Opened by the pager's download key.
    """

    conversation: ConversationHistory
    themes: ThemeBook
    line_history: HistoryLog
    slot: BufferSlot = field(default_factory=BufferSlot)
    cues: Cues = field(default_factory=Cues)
    resume_path: Path | None = None
    resume_url: str | None = None
    registry: CommandRegistry = field(default_factory=CommandRegistry, init=False, repr=False)

    def install(self, registry: CommandRegistry) -> None:
        self.registry = registry
        registry.register("help", self.help, "Show this message")
        registry.register("clear", self.clear, "Clear screen")
        registry.register("resume", self.resume, "boooooring. You can download the resume here")
        registry.register("vim", self.vim, "Do not touch. You will not escape.")
        registry.register("piano", self.piano, "a piano.")
        registry.register("theme", self.theme, "for when green just isn't your color")
        registry.register("history", self.history, "what you typed before")

    def help(self, ctx: CommandContext) -> None:
        for line in help_lines(self.registry):
            ctx.io.writeln(line)

    def clear(self, ctx: CommandContext) -> None:
        ctx.io.clear()

    async def vim(self, ctx: CommandContext) -> None:
        await EditorApp(ctx.io, self.conversation, self.slot, self.cues).run()

    async def piano(self, ctx: CommandContext) -> None:
        await InstrumentApp(ctx.io, self.conversation, self.cues).run()

    async def resume(self, ctx: CommandContext) -> None:
        text = load_document(self.resume_path)
        pager = PagerApp(ctx.io, self.conversation, text, self.download, self.cues)
        await pager.run()

    async def theme(self, ctx: CommandContext) -> None:
        await SelectorApp(ctx.io, self.conversation, self.themes, self.cues).run()

    def history(self, ctx: CommandContext) -> None:
        width = len(str(len(self.line_history)))
        for i, line in enumerate(self.line_history.entries, start=1):
            ctx.io.writeln(f"  {i:>{width}}  {line}")

    def download(self) -> None:
        if not self.resume_url:
            logger.info("Download requested but no resume URL is configured")
            return
        logger.info("Opening {}", self.resume_url)
        webbrowser.open(self.resume_url)
