"""Tests for the piano, theme selector, pager and the ModalApp lifecycle.

Covers:
- InstrumentApp note-on/note-off symmetry and the held-key guard
- SelectorApp navigation, preview, commit and revert
- ThemeBook sink updates
- PagerApp scrolling, progress and download
- ModalApp forced exit when a handler raises
"""

from __future__ import annotations

from prometheus_term.elements import InstrumentApp, ModalApp, PagerApp, SelectorApp
from prometheus_term.elements.instrument import note_for
from prometheus_term.elements.pager import STATUS_KEYS
from prometheus_term.keys import KeyEvent
from prometheus_term.themes import THEMES, Theme, ThemeBook, apply_theme


class FakeSink:
    def __init__(self) -> None:
        self.params: dict[str, str | float] = {}
        self.calls = 0

    def set_parameter(self, name: str, value: str | float) -> None:
        self.params[name] = value
        self.calls += 1


def _feed(app: ModalApp, *events: KeyEvent) -> None:
    for event in events:
        app._on_key(event)


class TestInstrumentApp:
    """Tests for InstrumentApp."""

    def test_note_for(self) -> None:
        """Keys resolve case-insensitively to white and black notes."""
        assert note_for("A")[1].name == "C4"
        assert note_for("w")[1].name == "C#"
        assert note_for("'")[1].frequency == 698.46
        assert note_for("z") is None
        assert note_for("Enter") is None

    def test_every_down_has_one_up(self, io, conversation, cues) -> None:
        """A held key plays once; its release stops it once."""
        app = InstrumentApp(io, conversation, cues)
        app.start()
        _feed(app, KeyEvent.down("a"), KeyEvent.down("a"), KeyEvent.up("a"), KeyEvent.up("a"))
        assert cues.calls == [("note_on", "a", 261.63), ("note_off", "a")]

    def test_chords(self, io, conversation, cues, screen) -> None:
        """Several keys can be held; the footer lists them."""
        app = InstrumentApp(io, conversation, cues)
        app.start()
        _feed(app, KeyEvent.down("a"), KeyEvent.down("D"))
        assert set(app.held) == {"a", "d"}
        assert app.get_lines()[-1] == "   Now playing: C4 + E4"
        assert "*a* " in screen.output

    def test_release_of_unheld_key(self, io, conversation, cues) -> None:
        app = InstrumentApp(io, conversation, cues)
        app.start()
        _feed(app, KeyEvent.up("s"))
        assert cues.calls == []

    def test_escape_stops_held_notes(self, io, conversation, cues, screen, arbiter) -> None:
        """Leaving silences every held note and hands focus back."""
        app = InstrumentApp(io, conversation, cues)
        app.start()
        _feed(app, KeyEvent.down("a"), KeyEvent.down("w"), KeyEvent.down("Escape"))

        assert ("note_off", "a") in cues.calls
        assert ("note_off", "w") in cues.calls
        assert app.held == {}
        assert not arbiter.is_captured
        assert screen.output == " Thanks for playing!\n\n"
        assert conversation.turns[-1].content == InstrumentApp.exit_note

    def test_idle_footer(self, io, conversation) -> None:
        app = InstrumentApp(io, conversation)
        assert app.get_lines()[-1] == "   ESC to exit"


class TestThemes:
    """Tests for ThemeBook and apply_theme()."""

    def test_apply_pushes_every_parameter(self) -> None:
        sink = FakeSink()
        theme = Theme("Test", "#123456", effects={"bloom": 0.1})
        apply_theme(theme, sink)
        assert sink.params == {
            "font_color": "#123456",
            "background_color": "#000000",
            "bloom": 0.1,
        }

    def test_default_theme(self) -> None:
        book = ThemeBook(FakeSink())
        assert book.current.name == "Monochrome Green"
        assert len(THEMES) == 8

    def test_preview_does_not_commit(self) -> None:
        sink = FakeSink()
        book = ThemeBook(sink)
        book.preview(0)
        assert sink.params["font_color"] == THEMES[0].font_color
        assert book.committed == 1

        book.revert()
        assert sink.params["font_color"] == THEMES[1].font_color


class TestSelectorApp:
    """Tests for SelectorApp."""

    def _make(self, io, conversation) -> tuple[SelectorApp, ThemeBook, FakeSink]:
        sink = FakeSink()
        book = ThemeBook(sink)
        app = SelectorApp(io, conversation, book)
        app.start()
        return app, book, sink

    def test_navigation_wraps(self, io, conversation) -> None:
        app, book, _ = self._make(io, conversation)
        assert app.selected == 1
        _feed(app, KeyEvent.down("k"), KeyEvent.down("ArrowUp"))
        assert app.selected == len(book.themes) - 1
        _feed(app, KeyEvent.down("j"))
        assert app.selected == 0

    def test_marks_selected_and_active(self, io, conversation) -> None:
        app, _, _ = self._make(io, conversation)
        lines = app.get_lines()
        assert " ▶ █ Monochrome Green [active]" in lines
        assert "     Default Amber" in lines

    def test_escape_reverts_preview(self, io, conversation, screen) -> None:
        """A preview is dropped on Escape; the committed theme is restored."""
        app, book, sink = self._make(io, conversation)
        _feed(app, KeyEvent.down("ArrowDown"), KeyEvent.down("p"))
        assert sink.params["font_color"] == THEMES[2].font_color

        _feed(app, KeyEvent.down("Escape"))
        assert book.committed == 1
        assert sink.params["font_color"] == THEMES[1].font_color
        assert screen.output == " Theme: Monochrome Green\n\n"

    def test_enter_commits(self, io, conversation, screen) -> None:
        app, book, sink = self._make(io, conversation)
        _feed(app, KeyEvent.down("ArrowUp"), KeyEvent.down("Enter"))
        assert book.committed == 0
        assert sink.params["font_color"] == THEMES[0].font_color
        assert screen.output == " Theme applied: Default Amber\n\n"
        assert conversation.turns[-1].content == SelectorApp.exit_note


class TestPagerApp:
    """Tests for PagerApp."""

    TEXT = "\n".join(f"line {i}" for i in range(50))

    def test_viewport_and_status(self, io, conversation) -> None:
        """The pager fills rows - 3 lines, a spacer and the status bar."""
        app = PagerApp(io, conversation, self.TEXT)
        lines = app.get_lines()
        assert len(lines) == 21 + 2
        assert lines[0] == "line 0"
        assert lines[-1].startswith(STATUS_KEYS)
        assert lines[-1].endswith("0%")
        assert len(lines[-1]) == 78

    def test_scroll_is_clamped(self, io, conversation) -> None:
        app = PagerApp(io, conversation, self.TEXT)
        app.start()
        _feed(app, KeyEvent.down("k"))
        assert app.offset == 0
        _feed(app, KeyEvent.down("End"))
        assert app.offset == 50 - 21
        assert app.get_lines()[-1].endswith("100%")
        _feed(app, KeyEvent.down("PageDown"))
        assert app.offset == app.max_offset
        _feed(app, KeyEvent.down("PageUp"), KeyEvent.down("j"))
        assert app.offset == 50 - 21 - 21 + 1
        _feed(app, KeyEvent.down("Home"))
        assert app.offset == 0

    def test_short_document(self, io, conversation) -> None:
        """A document that fits reports 100% and never scrolls."""
        app = PagerApp(io, conversation, "only line")
        app.start()
        _feed(app, KeyEvent.down("ArrowDown"))
        assert app.offset == 0
        assert app.get_lines()[-1].endswith("100%")

    def test_download(self, io, conversation) -> None:
        calls: list[int] = []
        app = PagerApp(io, conversation, self.TEXT, download=lambda: calls.append(1))
        app.start()
        _feed(app, KeyEvent.down("D"))
        assert calls == [1]
        assert app.active

    def test_escape(self, io, conversation, screen, arbiter) -> None:
        app = PagerApp(io, conversation, self.TEXT)
        app.start()
        _feed(app, KeyEvent.down("Escape"))
        assert screen.output == ""
        assert not arbiter.is_captured
        assert conversation.turns[-1].content == PagerApp.exit_note


class _Exploding(ModalApp):
    exit_note = "boom note"

    def get_lines(self) -> list[str]:
        return ["exploding"]

    def handle_key(self, event: KeyEvent) -> tuple[bool, list[str] | None]:
        raise RuntimeError("kaboom")


class TestModalLifecycle:
    """Tests for the ModalApp base class."""

    def test_start_captures_and_hides_cursor(self, io, conversation, arbiter, screen) -> None:
        app = _Exploding(io, conversation)
        app.start()
        assert arbiter.is_captured
        assert arbiter.cursor_explicitly_hidden
        assert screen.output == "exploding"

    def test_failure_forces_exit(self, io, conversation, arbiter, screen) -> None:
        """A raising handler still releases focus and reports the error."""
        app = _Exploding(io, conversation)
        app.start()
        _feed(app, KeyEvent.down("x"))

        assert not app.active
        assert not arbiter.is_captured
        assert screen.cursor_visible
        assert screen.output == "Error: kaboom\n\n"
        assert conversation.turns[-1].content == "boom note"

    def test_redraw_only_on_change(self, io, conversation, screen) -> None:
        app = InstrumentApp(io, conversation)
        app.start()
        clears = screen.clears
        _feed(app, KeyEvent.down("z"))
        assert screen.clears == clears
        _feed(app, KeyEvent.down("a"))
        assert screen.clears == clears + 1

    def test_events_after_exit_are_ignored(self, io, conversation, screen) -> None:
        app = PagerApp(io, conversation, "text")
        app.start()
        _feed(app, KeyEvent.down("Escape"))
        app._on_key(KeyEvent.down("Escape"))
        assert len(conversation) == 1
