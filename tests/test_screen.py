"""Tests for cli/screen.py and cli/display.py.

Covers:
- ScrollbackModel line handling (newline, carriage return, backspace, wrap)
- ConsoleScreen pass-through, scrolling and size
- ConsoleDisplay applying theme colors
"""

from __future__ import annotations

import io

from rich.console import Console

from cli.display import ConsoleDisplay
from cli.screen import ConsoleScreen, ScrollbackModel
from prometheus_term.themes import THEMES, apply_theme


def _console(width: int = 20, height: int = 5) -> Console:
    return Console(file=io.StringIO(), width=width, height=height, force_terminal=True, color_system="truecolor")


class TestScrollbackModel:
    """Tests for ScrollbackModel.feed()."""

    def test_lines_and_rubout(self) -> None:
        model = ScrollbackModel(cols=80)
        model.feed("$ ab\b \bc\nnext")
        assert model.lines == ["$ ac", "next"]
        assert model.col == 4

    def test_carriage_return_overwrites(self) -> None:
        model = ScrollbackModel()
        model.feed("hello\rJ")
        assert model.lines == ["Jello"]

    def test_wraps_at_width(self) -> None:
        model = ScrollbackModel(cols=3)
        model.feed("abcdefg")
        assert model.lines == ["abc", "def", "g"]

    def test_limit(self) -> None:
        model = ScrollbackModel(limit=3)
        model.feed("1\n2\n3\n4\n5")
        assert model.lines == ["3", "4", "5"]


class TestConsoleScreen:
    """Tests for ConsoleScreen."""

    def test_size(self) -> None:
        screen = ConsoleScreen(_console(20, 5))
        assert (screen.get_size().cols, screen.get_size().rows) == (20, 5)

    def test_write_passes_through(self) -> None:
        console = _console()
        screen = ConsoleScreen(console)
        screen.write("a\nb")
        assert console.file.getvalue() == "a\r\nb"

    def test_scroll_back_and_return(self) -> None:
        console = _console(20, 3)
        screen = ConsoleScreen(console)
        screen.write("\n".join(str(i) for i in range(10)))

        screen.scroll_lines(-2)
        assert screen.is_scrolled_away()
        assert screen.offset == 2

        before = console.file.getvalue()
        screen.write("x")
        assert console.file.getvalue() == before

        screen.scroll_lines(100)
        assert not screen.is_scrolled_away()
        assert console.file.getvalue().endswith("\x1b[3;3H")

    def test_scroll_clamped_to_history(self) -> None:
        screen = ConsoleScreen(_console(20, 3))
        screen.write("1\n2\n3\n4")
        screen.scroll_lines(-50)
        assert screen.offset == 1

    def test_clear_resets(self) -> None:
        screen = ConsoleScreen(_console())
        screen.write("abc\ndef")
        screen.clear()
        assert screen.model.lines == [""]
        assert screen.offset == 0


class TestConsoleDisplay:
    """Tests for ConsoleDisplay."""

    def test_theme_colors_become_style(self) -> None:
        screen = ConsoleScreen(_console())
        display = ConsoleDisplay(screen)
        apply_theme(THEMES[6], display)
        assert display.font_color == "#ffffff"
        assert display.background_color == "#000080"
        assert str(screen.style.color.name) == "#ffffff"

    def test_effects_ignored(self) -> None:
        screen = ConsoleScreen(_console())
        display = ConsoleDisplay(screen)
        display.set_parameter("bloom", 0.5)
        assert screen.style is None
