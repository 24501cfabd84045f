"""Theme parameters applied to the console screen."""

from __future__ import annotations

from loguru import logger
from rich.style import Style

from .screen import ConsoleScreen


class ConsoleDisplay:
    """Display sink for a real terminal.

    A terminal can only show the font and background colors; the CRT
    effect parameters are accepted and ignored.
    """

    def __init__(self, screen: ConsoleScreen) -> None:
        self.screen = screen
        self.font_color: str | None = None
        self.background_color: str | None = None

    def set_parameter(self, name: str, value: str | float) -> None:
        if name == "font_color":
            self.font_color = str(value)
        elif name == "background_color":
            self.background_color = str(value)
        else:
            logger.trace("Ignoring display parameter {} = {}", name, value)
            return
        self.screen.set_style(Style(color=self.font_color, bgcolor=self.background_color))
