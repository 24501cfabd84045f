"""Keyboard, paste and mouse-wheel input using prompt_toolkit.

prompt_toolkit handles the terminal complexity:
- Terminal raw mode management
- Escape sequence parsing (distinguishes ESC from arrow keys)
- Bracketed paste and mouse reporting sequences

Terminals only report key presses. Key releases are synthesized: a key
counts as released when nothing more arrives for it within the release
window. A burst of presses of one key, each closer than the repeat
window, is reported as auto-repeat once the key has been held past the
terminal's autorepeat start; a quick deliberate double press stays two
presses.

Example:
    reader = KeyReader(on_key=shell.feed, on_paste=shell.paste)

    async with reader:
        await stopped.wait()
"""

from __future__ import annotations

import asyncio
import re
import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from loguru import logger
from prompt_toolkit.input import create_input
from prompt_toolkit.input.vt100 import Vt100Input
from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.keys import Keys

from prometheus_term import keys
from prometheus_term.keys import KeyEvent

if TYPE_CHECKING:
    from prompt_toolkit.input import Input

WHEEL_LINES = 3
REPEAT_WINDOW = 0.1
REPEAT_START = 0.25

ENABLE_PASTE = "\x1b[?2004h"
DISABLE_PASTE = "\x1b[?2004l"
ENABLE_MOUSE = "\x1b[?1000h\x1b[?1006h"
DISABLE_MOUSE = "\x1b[?1006l\x1b[?1000l"

_NAMED_KEYS: dict[Keys, str] = {
    Keys.Enter: keys.ENTER,
    Keys.Escape: keys.ESCAPE,
    Keys.Backspace: keys.BACKSPACE,
    Keys.Tab: keys.TAB,
    Keys.Delete: keys.DELETE,
    Keys.Up: keys.ARROW_UP,
    Keys.Down: keys.ARROW_DOWN,
    Keys.Left: keys.ARROW_LEFT,
    Keys.Right: keys.ARROW_RIGHT,
    Keys.PageUp: keys.PAGE_UP,
    Keys.PageDown: keys.PAGE_DOWN,
    Keys.Home: keys.HOME,
    Keys.End: keys.END,
}

_EXIT_KEYS = (Keys.ControlC, Keys.ControlD)

_SGR_MOUSE = re.compile(r"\x1b\[<(\d+);(\d+);(\d+)[Mm]")


def translate(key_press: KeyPress) -> KeyEvent | None:
    """Map a prompt_toolkit key press to a key-down event (None if unmapped)."""
    key = key_press.key
    if key in _NAMED_KEYS:
        return KeyEvent.down(_NAMED_KEYS[key])
    if isinstance(key, Keys):
        name = key.value
        # c-a .. c-z
        if name.startswith("c-") and len(name) == 3 and name[2].isalpha():
            return KeyEvent.down(name[2], ctrl=True)
        return None
    if len(key) == 1 and key.isprintable():
        return KeyEvent.down(key)
    return None


def wheel_lines(data: str) -> int:
    """Lines to scroll for an SGR mouse report; 0 if it is not a wheel event."""
    match = _SGR_MOUSE.match(data)
    if match is None:
        return 0
    button = int(match.group(1))
    if button == 64:
        return -WHEEL_LINES
    if button == 65:
        return WHEEL_LINES
    return 0


@dataclass
class _Held:
    first: float
    last: float
    repeating: bool
    timer: asyncio.TimerHandle


@dataclass
class KeyReader:
    """Turns terminal input into shell events.

    Attributes:
        on_key: Receives every key event, down and (synthesized) up.
        on_paste: Receives bracketed paste text.
        on_scroll: Receives wheel scrolling in lines (negative = older output).
        on_exit: Called for Ctrl+C / Ctrl+D.
        release_delay: Seconds of silence before a held key is released.
        mouse: Enable mouse reporting for wheel scrolling.
        clock: Time source in seconds; defaults to the event loop clock.
    """

    on_key: Callable[[KeyEvent], None]
    on_paste: Callable[[str], None] | None = None
    on_scroll: Callable[[int], None] | None = None
    on_exit: Callable[[], None] | None = None
    release_delay: float = 0.55
    mouse: bool = False
    clock: Callable[[], float] | None = None

    _input: Input | None = field(default=None, init=False, repr=False)
    _running: bool = field(default=False, init=False, repr=False)
    _raw_mode_ctx: Any = field(default=None, init=False, repr=False)
    _attach_ctx: Any = field(default=None, init=False, repr=False)
    _held: dict[str, _Held] = field(default_factory=dict, init=False, repr=False)

    def _is_tty(self) -> bool:
        """Check if stdin is a real terminal."""
        try:
            return sys.stdin.isatty()
        except Exception:
            return False

    def _on_input_ready(self) -> None:
        """Called by prompt_toolkit when input is available."""
        if not self._input or not self._running:
            return

        # Force flush the parser to reduce escape sequence disambiguation delay
        if isinstance(self._input, Vt100Input) and hasattr(self._input, "vt100_parser"):
            self._input.vt100_parser.flush()

        for key_press in self._input.read_keys():
            self.dispatch(key_press)

    def dispatch(self, key_press: KeyPress) -> None:
        """Route one parsed key press to the right callback."""
        key = key_press.key
        if key in _EXIT_KEYS:
            if self.on_exit:
                self.on_exit()
            return
        if key == Keys.BracketedPaste:
            if self.on_paste:
                self.on_paste(key_press.data)
            return
        if key == Keys.Vt100MouseEvent:
            lines = wheel_lines(key_press.data)
            if lines and self.on_scroll:
                self.on_scroll(lines)
            return

        event = translate(key_press)
        if event is None:
            logger.trace("Unmapped key press {!r}", key_press)
            return
        self.press(event)

    def press(self, event: KeyEvent) -> None:
        """Deliver a key-down and schedule its synthesized release."""
        loop = asyncio.get_running_loop()
        now = self.clock() if self.clock else loop.time()
        held = self._held.get(event.key)
        first, repeating = now, False
        if held is not None:
            held.timer.cancel()
            if now - held.last < REPEAT_WINDOW:
                first = held.first
                repeating = held.repeating or now - first >= REPEAT_START
            if repeating:
                event = KeyEvent.down(event.key, ctrl=event.ctrl, repeat=True)
            else:
                # a fresh press of a key we still thought was held
                self.on_key(KeyEvent.up(event.key, ctrl=event.ctrl))
        timer = loop.call_later(self.release_delay, self._release, event.key, event.ctrl)
        self._held[event.key] = _Held(first, now, repeating, timer)
        self.on_key(event)

    def _release(self, key: str, ctrl: bool) -> None:
        if self._held.pop(key, None) is not None:
            self.on_key(KeyEvent.up(key, ctrl=ctrl))

    def release_all(self) -> None:
        for key, held in list(self._held.items()):
            held.timer.cancel()
            self._release(key, False)

    async def start(self) -> bool:
        """Start reading input.

        Returns:
            True if started successfully, False if not possible (not a TTY, etc.)
        """
        if self._running:
            return True

        if not self._is_tty():
            return False

        try:
            self._input = create_input()
            self._raw_mode_ctx = self._input.raw_mode()
            self._raw_mode_ctx.__enter__()
            self._attach_ctx = self._input.attach(self._on_input_ready)
            self._attach_ctx.__enter__()
            self._write_mode(ENABLE_PASTE + (ENABLE_MOUSE if self.mouse else ""))
            self._running = True
            return True
        except Exception:
            logger.exception("Could not attach to the terminal")
            self._cleanup()
            return False

    async def stop(self) -> None:
        """Stop reading and restore the terminal."""
        self._running = False
        self.release_all()
        self._cleanup()

    def _write_mode(self, sequence: str) -> None:
        sys.stdout.write(sequence)
        sys.stdout.flush()

    def _cleanup(self) -> None:
        """Clean up contexts in reverse order."""
        if self._input:
            self._write_mode(DISABLE_PASTE + (DISABLE_MOUSE if self.mouse else ""))
        if self._attach_ctx:
            try:
                self._attach_ctx.__exit__(None, None, None)
            except Exception:
                logger.opt(exception=True).debug("Detaching input failed")
            self._attach_ctx = None

        if self._raw_mode_ctx:
            try:
                self._raw_mode_ctx.__exit__(None, None, None)
            except Exception:
                logger.opt(exception=True).debug("Leaving raw mode failed")
            self._raw_mode_ctx = None

        if self._input:
            try:
                self._input.close()
            except Exception:
                logger.opt(exception=True).debug("Closing input failed")
            self._input = None

    async def __aenter__(self) -> "KeyReader":
        """Async context manager entry - starts reading."""
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit - always restores terminal."""
        await self.stop()
