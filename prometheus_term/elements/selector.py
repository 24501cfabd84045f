"""Theme selector: browse, preview and commit display themes."""

from __future__ import annotations

from .. import keys
from ..conversation import ConversationHistory
from ..cues import Cues
from ..keys import KeyEvent
from ..terminal import ShellIO
from ..themes import ThemeBook
from .base import ModalApp

RULE = "  " + "─" * 53


class SelectorApp(ModalApp):
    """The `theme` command.

    Navigate with j/k or up/down arrows (wrapping around). `p` previews the
    highlighted theme without committing it, Enter commits it, Escape puts
    the committed theme back.
    """

    exit_note = "User just browsed the terminal themes"

    def __init__(
        self,
        io: ShellIO,
        history: ConversationHistory,
        book: ThemeBook,
        cues: Cues | None = None,
    ) -> None:
        super().__init__(io, history, cues)
        self.book = book
        self.selected = book.committed

    def get_lines(self) -> list[str]:
        lines = [
            "",
            "  ╔════════════════════════════════════════════════════╗",
            "  ║             TERMINAL THEME SELECTOR                ║",
            "  ╚════════════════════════════════════════════════════╝",
            "",
        ]
        for i, theme in enumerate(self.book.themes):
            prefix = " ▶ █" if i == self.selected else "    "
            suffix = " [active]" if i == self.book.committed else ""
            lines.append(f"{prefix} {theme.name}{suffix}")
        lines += [
            "",
            RULE,
            "  [↑↓] Navigate  [ENTER] Apply  [P] Preview  [ESC] Exit",
            RULE,
        ]
        return lines

    def handle_key(self, event: KeyEvent) -> tuple[bool, list[str] | None]:
        if not event.is_down:
            return False, None
        count = len(self.book.themes)
        if event.key == keys.ESCAPE:
            theme = self.book.revert()
            return True, [f" Theme: {theme.name}", ""]
        if event.key in (keys.ARROW_UP, "k"):
            self.selected = (self.selected - 1) % count
        elif event.key in (keys.ARROW_DOWN, "j"):
            self.selected = (self.selected + 1) % count
        elif event.key == keys.ENTER:
            theme = self.book.commit(self.selected)
            return True, [f" Theme applied: {theme.name}", ""]
        elif event.key.lower() == "p":
            self.book.preview(self.selected)
        return False, None
