"""Keyboard event shape shared by the shell and every captured application.

Key names follow the browser convention: single characters for printable
keys, and names such as 'Enter', 'Escape', 'Backspace', 'Tab', 'ArrowUp',
'PageDown' or 'Home' for the rest.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

KeyPhase = Literal["down", "up"]

ENTER = "Enter"
ESCAPE = "Escape"
BACKSPACE = "Backspace"
TAB = "Tab"
DELETE = "Delete"
ARROW_UP = "ArrowUp"
ARROW_DOWN = "ArrowDown"
ARROW_LEFT = "ArrowLeft"
ARROW_RIGHT = "ArrowRight"
PAGE_UP = "PageUp"
PAGE_DOWN = "PageDown"
HOME = "Home"
END = "End"

ARROWS = (ARROW_UP, ARROW_DOWN, ARROW_LEFT, ARROW_RIGHT)

_KEY_CODES: dict[str, int] = {
    BACKSPACE: 8,
    TAB: 9,
    ENTER: 13,
    ESCAPE: 27,
    " ": 32,
    PAGE_UP: 33,
    PAGE_DOWN: 34,
    END: 35,
    HOME: 36,
    ARROW_LEFT: 37,
    ARROW_UP: 38,
    ARROW_RIGHT: 39,
    ARROW_DOWN: 40,
    DELETE: 46,
    ";": 186,
    "'": 222,
}


def key_code_for(key: str) -> int:
    """Return the legacy numeric key code for a key name (0 if unknown)."""
    if key in _KEY_CODES:
        return _KEY_CODES[key]
    if len(key) == 1:
        if key.isalnum() and key.isascii():
            return ord(key.upper())
        return ord(key)
    return 0


@dataclass(frozen=True)
class KeyEvent:
    """A single key transition.

    Attributes:
        key: Character for printable keys, otherwise the key name.
        key_code: Legacy numeric key code (see key_code_for()).
        phase: 'down' when pressed, 'up' when released.
        ctrl: Whether Control was held.
        repeat: True for auto-repeat presses of a key that is still held.
    """

    key: str
    key_code: int = 0
    phase: KeyPhase = "down"
    ctrl: bool = False
    repeat: bool = False

    @classmethod
    def down(cls, key: str, *, ctrl: bool = False, repeat: bool = False) -> "KeyEvent":
        return cls(key, key_code_for(key), "down", ctrl, repeat)

    @classmethod
    def up(cls, key: str, *, ctrl: bool = False) -> "KeyEvent":
        return cls(key, key_code_for(key), "up", ctrl)

    @property
    def is_down(self) -> bool:
        return self.phase == "down"

    @property
    def is_printable(self) -> bool:
        """True for a single printable character typed without Control."""
        return len(self.key) == 1 and self.key.isprintable() and not self.ctrl
