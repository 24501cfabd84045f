"""Focus arbitration between the shell's line editor and captured applications.

At most one handler holds the focus at a time. While a handler is installed,
every key event (down and up) goes to it and nothing reaches line editing,
completion, history navigation or scrolling. Only the capturing application
gives focus back, by calling release().
"""

from __future__ import annotations

from typing import Callable

from loguru import logger

from .keys import KeyEvent
from .terminal import KeyHandler, Screen, ScreenSize


class FocusArbiter:
    """Decides, per event, whether input belongs to the shell or a captured app.

    Usage:
        arbiter = FocusArbiter(screen)
        arbiter.capture(app_handler)
        arbiter.route(KeyEvent.down("i"))  # -> True, app_handler saw it
        arbiter.release()
        arbiter.route(KeyEvent.down("i"))  # -> False, shell handles it
    """

    def __init__(self, screen: Screen) -> None:
        self._screen = screen
        self._handler: KeyHandler | None = None
        self._cursor_hidden = False
        self._release_listeners: list[Callable[[], None]] = []

    @property
    def is_captured(self) -> bool:
        return self._handler is not None

    @property
    def cursor_explicitly_hidden(self) -> bool:
        return self._cursor_hidden

    def capture(self, handler: KeyHandler) -> None:
        """Install handler as the sole recipient of key events.

        Capturing while already captured replaces the previous handler; the
        old handler receives nothing from this point on.
        """
        if self._handler is not None and self._handler is not handler:
            logger.warning("Focus captured while already captured; replacing handler")
        self._handler = handler
        logger.debug("Focus captured by {}", getattr(handler, "__qualname__", handler))

    def release(self) -> None:
        """Return focus to the shell and notify anyone waiting for it."""
        if self._handler is None:
            return
        self._handler = None
        logger.debug("Focus released")
        listeners, self._release_listeners = self._release_listeners, []
        for listener in listeners:
            listener()

    def on_next_release(self, callback: Callable[[], None]) -> None:
        """Run callback once, the next time focus returns to the shell."""
        if self._handler is None:
            callback()
            return
        self._release_listeners.append(callback)

    def route(self, event: KeyEvent) -> bool:
        """Deliver event to the captured handler.

        Returns:
            True if the event was consumed by capture (including suppressed
            auto-repeats), False if the shell should handle it.
        """
        handler = self._handler
        if handler is None:
            return False
        if event.is_down and event.repeat:
            return True
        handler(event)
        return True

    def route_scroll(self, lines: int) -> bool:
        """Scroll the shell's viewport unless an application owns the screen."""
        if self._handler is not None:
            return False
        self._screen.scroll_lines(lines)
        self.refresh_cursor()
        return True

    def hide_cursor(self) -> None:
        self._cursor_hidden = True
        self._screen.set_cursor_visible(False)

    def show_cursor(self) -> None:
        self._cursor_hidden = False
        self._screen.set_cursor_visible(True)

    def refresh_cursor(self) -> None:
        """Per-frame cursor visibility: hidden while scrolled away from the cursor.

        Skipped entirely while an application has explicitly hidden the cursor,
        so the two never fight over it.
        """
        if self._cursor_hidden:
            return
        self._screen.set_cursor_visible(not self._screen.is_scrolled_away())


class ArbitratedIO:
    """ShellIO implementation backed by a Screen and a FocusArbiter."""

    def __init__(self, screen: Screen, arbiter: FocusArbiter) -> None:
        self._screen = screen
        self._arbiter = arbiter

    def write(self, text: str) -> None:
        self._screen.write(text)
        self._arbiter.refresh_cursor()

    def writeln(self, text: str = "") -> None:
        self.write(f"{text}\n")

    def clear(self) -> None:
        self._screen.clear()
        self._arbiter.refresh_cursor()

    def capture(self, handler: KeyHandler) -> None:
        self._arbiter.capture(handler)

    def release(self) -> None:
        self._arbiter.release()

    def hide_cursor(self) -> None:
        self._arbiter.hide_cursor()

    def show_cursor(self) -> None:
        self._arbiter.show_cursor()

    def get_size(self) -> ScreenSize:
        return self._screen.get_size()
