"""Read-only document pager with a download action."""

from __future__ import annotations

from typing import Callable

from .. import keys
from ..conversation import ConversationHistory
from ..cues import Cues
from ..keys import KeyEvent
from ..terminal import ShellIO
from .base import ModalApp

STATUS_KEYS = "  [D] Download PDF  [ESC] Exit  [↑↓] Scroll"


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class PagerApp(ModalApp):
    """The `resume` command.

    Args:
        io: Shell output and focus controls.
        history: Conversation history (receives the exit note).
        text: Document to show.
        download: Called when the user presses `d`.
        cues: Audio cue sink.
    """

    exit_note = "User just finished reading the resume"

    def __init__(
        self,
        io: ShellIO,
        history: ConversationHistory,
        text: str,
        download: Callable[[], None] | None = None,
        cues: Cues | None = None,
    ) -> None:
        super().__init__(io, history, cues)
        self.lines = text.split("\n")
        self.download = download
        self.offset = 0

    @property
    def viewport_height(self) -> int:
        # rows left after the blank spacer and the status bar
        return max(1, self.io.get_size().rows - 3)

    @property
    def max_offset(self) -> int:
        return max(0, len(self.lines) - self.viewport_height)

    def scroll_to(self, offset: int) -> None:
        self.offset = clamp(offset, 0, self.max_offset)

    def get_lines(self) -> list[str]:
        height = self.viewport_height
        visible = self.lines[self.offset : self.offset + height]
        visible += [""] * (height - len(visible))

        top = self.max_offset
        progress = round(self.offset / top * 100) if top > 0 else 100
        right = f"{progress}%"
        cols = self.io.get_size().cols
        padding = " " * max(0, cols - len(STATUS_KEYS) - len(right) - 2)
        return visible + ["", STATUS_KEYS + padding + right]

    def handle_key(self, event: KeyEvent) -> tuple[bool, list[str] | None]:
        if not event.is_down:
            return False, None
        key = event.key
        if key == keys.ESCAPE:
            return True, []
        if key.lower() == "d":
            if self.download is not None:
                self.download()
            return False, None

        height = self.viewport_height
        if key in (keys.ARROW_UP, "k"):
            self.scroll_to(self.offset - 1)
        elif key in (keys.ARROW_DOWN, "j"):
            self.scroll_to(self.offset + 1)
        elif key == keys.PAGE_UP:
            self.scroll_to(self.offset - height)
        elif key == keys.PAGE_DOWN:
            self.scroll_to(self.offset + height)
        elif key == keys.HOME:
            self.scroll_to(0)
        elif key == keys.END:
            self.scroll_to(self.max_offset)
        return False, None
