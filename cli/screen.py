"""Rich-backed terminal screen with an emulated scrollback.

Output is passed straight through to the terminal while the viewport sits at
the bottom. A line model of everything written is kept alongside it, so the
viewport can be scrolled back through older output (the terminal's own
scrollback is not addressable from inside the program) and repainted from
the model.
"""

from __future__ import annotations

from rich.color import ColorSystem
from rich.console import Console
from rich.style import Style

from prometheus_term.terminal import ScreenSize

DEFAULT_SCROLLBACK = 1000

_COLOR_SYSTEMS = {
    "standard": ColorSystem.STANDARD,
    "256": ColorSystem.EIGHT_BIT,
    "truecolor": ColorSystem.TRUECOLOR,
    "windows": ColorSystem.WINDOWS,
}


class ScrollbackModel:
    """Plain-text model of the terminal's lines and cursor.

    Understands '\\n' (new line), '\\r' (column 0) and '\\b' (one column
    left); everything else overwrites the cell under the cursor. Lines wrap
    at the screen width.
    """

    def __init__(self, cols: int = 80, limit: int = DEFAULT_SCROLLBACK) -> None:
        self.cols = cols
        self.limit = limit
        self.lines: list[str] = [""]
        self.col = 0

    def reset(self) -> None:
        self.lines = [""]
        self.col = 0

    def feed(self, text: str) -> None:
        for ch in text:
            if ch == "\n":
                self._newline()
            elif ch == "\r":
                self.col = 0
            elif ch == "\b":
                self.col = max(0, self.col - 1)
            else:
                if self.col >= self.cols:
                    self._newline()
                line = self.lines[-1].ljust(self.col)
                self.lines[-1] = line[: self.col] + ch + line[self.col + 1 :]
                self.col += 1

    def _newline(self) -> None:
        self.lines.append("")
        self.col = 0
        if len(self.lines) > self.limit:
            del self.lines[: len(self.lines) - self.limit]


class ConsoleScreen:
    """Screen implementation on top of a rich Console.

    Args:
        console: Console to draw on (a fresh one when omitted).
        scrollback: Number of lines kept for scrolling back.
    """

    def __init__(self, console: Console | None = None, scrollback: int = DEFAULT_SCROLLBACK) -> None:
        self.console = console or Console()
        self.model = ScrollbackModel(self.get_size().cols, scrollback)
        self.offset = 0
        self.style: Style | None = None

    def write(self, text: str) -> None:
        self.model.cols = self.get_size().cols
        self.model.feed(text)
        if self.offset:
            # shown when the viewport returns to the bottom
            return
        self._emit(text.replace("\n", "\r\n"))

    def clear(self) -> None:
        self.model.reset()
        self.offset = 0
        self.console.file.write("\x1b[2J\x1b[3J\x1b[H")
        self.console.file.flush()

    def set_cursor_visible(self, visible: bool) -> None:
        self.console.show_cursor(visible)

    def scroll_lines(self, lines: int) -> None:
        rows = self.get_size().rows
        top = max(0, len(self.model.lines) - rows)
        offset = max(0, min(self.offset - lines, top))
        if offset == self.offset:
            return
        self.offset = offset
        self.repaint()

    def is_scrolled_away(self) -> bool:
        return self.offset > 0

    def get_size(self) -> ScreenSize:
        width, height = self.console.size
        return ScreenSize(cols=width, rows=height)

    def set_style(self, style: Style | None) -> None:
        """Apply a style to all following output and repaint the viewport."""
        self.style = style
        self.repaint()

    def repaint(self) -> None:
        rows = self.get_size().rows
        end = len(self.model.lines) - self.offset
        start = max(0, end - rows)
        visible = self.model.lines[start:end]
        self.console.file.write("\x1b[2J\x1b[H")
        self._emit("\r\n".join(visible))
        if self.offset == 0:
            row = len(visible)
            self.console.file.write(f"\x1b[{row};{self.model.col + 1}H")
        self.console.file.flush()

    def _emit(self, data: str) -> None:
        color_system = _COLOR_SYSTEMS.get(self.console.color_system or "")
        if self.style is not None and color_system is not None:
            data = self.style.render(data, color_system=color_system)
        self.console.file.write(data)
        self.console.file.flush()
