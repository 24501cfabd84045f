"""Tests for prometheus_term/shell.py and the built-in commands.

Covers:
- The boot gate (nothing but Enter gets through before boot completes)
- Built-in commands run through the shell (help, history, clear, vim)
- Unknown lines forwarded to the assistant
- Input ignored while a command runs
- Paste and PageUp/PageDown scrolling
"""

from __future__ import annotations

import asyncio

import httpx

from prometheus_term.builtins import Builtins, help_lines, load_document
from prometheus_term.commands import CommandRegistry
from prometheus_term.config import Settings
from prometheus_term.dispatcher import PROMPT
from prometheus_term.keys import KeyEvent
from prometheus_term.line_editor import HistoryLog
from prometheus_term.shell import BOOT_BANNER, Shell
from prometheus_term.themes import NullDisplay, ThemeBook

HELP = (
    "Commands:",
    "  help    - Show this message",
    "  clear   - Clear screen",
    "  resume  - boooooring. You can download the resume here",
    "  vim     - Do not touch. You will not escape.",
    "  piano   - a piano.",
    "  theme   - for when green just isn't your color",
    "  history - what you typed before",
    "",
    "Or just type anything and find out.",
)


def _reply(text: str):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=text)

    return handler


def _shell(screen, cues, handler=None) -> Shell:
    settings = Settings(typing_delay=0)
    transport = httpx.MockTransport(handler or _reply("..."))
    return Shell(screen, settings, cues=cues, transport=transport)


def _type(shell: Shell, text: str) -> None:
    for char in text:
        shell.feed(KeyEvent.down(char))


def _booted(screen, cues, handler=None) -> Shell:
    shell = _shell(screen, cues, handler)
    shell.boot()
    shell.feed(KeyEvent.down("Enter"))
    return shell


async def _run_line(shell: Shell, line: str) -> None:
    _type(shell, line)
    shell.feed(KeyEvent.down("Enter"))
    await shell.wait_idle()


class TestBoot:
    """Tests for the boot gate."""

    def test_banner(self, screen, cues) -> None:
        shell = _shell(screen, cues)
        shell.boot()
        assert screen.output == "".join(f"{line}\n" for line in BOOT_BANNER)
        assert not shell.booted

    def test_only_enter_passes_the_gate(self, screen, cues) -> None:
        shell = _shell(screen, cues)
        shell.boot()
        _type(shell, "help")
        shell.paste("pasted")
        assert shell.editor.buffer == ""
        assert cues.calls == []

        shell.feed(KeyEvent.down("Enter"))
        assert shell.booted
        assert screen.output == PROMPT
        assert cues.calls == [("start_ambient",)]


class TestCommands:
    """Built-in commands dispatched through the shell."""

    async def test_help(self, screen, cues) -> None:
        shell = _booted(screen, cues)
        await _run_line(shell, "help")
        expected = PROMPT + "help\n" + "".join(f"{line}\n" for line in HELP) + PROMPT
        assert screen.output == expected

    def test_help_lists_registered_commands(self) -> None:
        """The listing follows the registry, so added commands show up too."""
        registry = CommandRegistry()
        registry.register("help", lambda ctx: None, "Show this message")
        registry.register("history", lambda ctx: None, "what you typed before")
        assert help_lines(registry) == [
            "Commands:",
            "  help    - Show this message",
            "  history - what you typed before",
            "",
            "Or just type anything and find out.",
        ]

    async def test_history_numbers_entries(self, screen, cues) -> None:
        shell = _booted(screen, cues)
        await _run_line(shell, "help")
        await _run_line(shell, "help")
        screen.output = ""
        await _run_line(shell, "history")
        assert screen.output == "history\n  1  help\n  2  history\n" + PROMPT

    async def test_clear(self, screen, cues) -> None:
        shell = _booted(screen, cues)
        await _run_line(shell, "clear")
        assert screen.output == PROMPT

    async def test_unknown_line_goes_to_assistant(self, screen, cues) -> None:
        shell = _booted(screen, cues, _reply("I am here."))
        await _run_line(shell, "hello there")
        assert screen.output.endswith("hello there\nI am here.\n" + PROMPT)
        assert [t.content for t in shell.conversation] == ["hello there", "I am here."]

    async def test_vim_captures_until_quit(self, screen, cues) -> None:
        """The editor owns input until it exits, then the prompt returns."""
        shell = _booted(screen, cues)
        _type(shell, "vim")
        shell.feed(KeyEvent.down("Enter"))
        for _ in range(3):
            await asyncio.sleep(0)
        assert shell.arbiter.is_captured

        _type(shell, ":q")
        shell.feed(KeyEvent.down("Enter"))
        await shell.wait_idle()

        assert not shell.arbiter.is_captured
        assert screen.output.endswith("You escaped vim. Impressive.\n\n" + PROMPT)
        assert shell.conversation.turns[-1].content == "User just escaped from the vim easter egg trap"
        assert shell.editor.history.entries == ["vim"]


class TestBusy:
    """Input while a command runs."""

    async def test_keys_ignored_while_busy(self, screen, cues) -> None:
        gate = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            await gate.wait()
            return httpx.Response(200, text="done")

        shell = _booted(screen, cues, handler)
        _type(shell, "question")
        shell.feed(KeyEvent.down("Enter"))
        await asyncio.sleep(0)
        assert shell.busy

        _type(shell, "xyz")
        shell.paste("more")
        assert shell.editor.buffer == ""

        gate.set()
        await shell.wait_idle()
        assert not shell.busy
        _type(shell, "ok")
        assert shell.editor.buffer == "ok"


class TestInput:
    """Paste and scroll routing."""

    def test_paste_after_boot(self, screen, cues) -> None:
        shell = _booted(screen, cues)
        shell.paste("he\nlp")
        assert shell.editor.buffer == "help"

    def test_page_keys_scroll(self, screen, cues) -> None:
        shell = _booted(screen, cues)
        shell.feed(KeyEvent.down("PageUp"))
        assert screen.offset == 24
        shell.feed(KeyEvent.down("PageDown"))
        assert screen.offset == 0

    def test_scroll_ignored_before_boot(self, screen, cues) -> None:
        shell = _shell(screen, cues)
        shell.scroll(-5)
        assert screen.offset == 0


class TestBuiltins:
    """Tests for Builtins helpers."""

    def test_bundled_document(self) -> None:
        assert "PROMETHEUS" in load_document()

    def test_document_from_path(self, tmp_path) -> None:
        path = tmp_path / "cv.txt"
        path.write_text("Jane Doe\n", encoding="utf-8")
        assert load_document(path) == "Jane Doe\n"

    def test_download_opens_url(self, monkeypatch, conversation) -> None:
        opened: list[str] = []
        monkeypatch.setattr("webbrowser.open", opened.append)
        book = ThemeBook(NullDisplay())
        builtins = Builtins(conversation, book, HistoryLog(), resume_url="https://example.com/cv.pdf")
        builtins.download()
        assert opened == ["https://example.com/cv.pdf"]
