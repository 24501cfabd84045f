"""Interfaces between the shell runtime and the surface it draws on.

Two layers:
- Screen: the raw character surface (a terminal, a test recorder, ...).
- ShellIO: what command handlers and captured applications talk to. It adds
  focus capture and cursor-visibility requests on top of plain output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

from .keys import KeyEvent

KeyHandler = Callable[[KeyEvent], None]


@dataclass(frozen=True)
class ScreenSize:
    cols: int = 80
    rows: int = 24


class Screen(Protocol):
    """A fixed-size character grid with a scrollback."""

    def write(self, text: str) -> None:
        """Write text at the cursor ('\\n' starts a new line, '\\b' moves left)."""
        ...

    def clear(self) -> None:
        """Clear the screen and the scrollback, cursor to the top-left."""
        ...

    def set_cursor_visible(self, visible: bool) -> None: ...

    def scroll_lines(self, lines: int) -> None:
        """Scroll the viewport; negative values scroll toward older output."""
        ...

    def is_scrolled_away(self) -> bool:
        """True when the cursor row is outside the visible viewport."""
        ...

    def get_size(self) -> ScreenSize: ...


class ShellIO(Protocol):
    """Output sink and focus controls handed to commands and applications."""

    def write(self, text: str) -> None: ...

    def writeln(self, text: str = "") -> None: ...

    def clear(self) -> None: ...

    def capture(self, handler: KeyHandler) -> None:
        """Route every key event to handler until release() is called."""
        ...

    def release(self) -> None: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...

    def get_size(self) -> ScreenSize: ...
