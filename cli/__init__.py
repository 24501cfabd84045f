"""prometheus-term Terminal UI.

Runs the shell on a real terminal:
- Rich Console as the character surface, with an emulated scrollback
- prompt_toolkit for raw keyboard input, bracketed paste and the mouse wheel
- Synthesized key releases for the applications that need them (piano)
- Ctrl+C / Ctrl+D to exit

Usage:
    prometheus-term                  # talk to PROMETHEUS_ENDPOINT
    prometheus-term --local          # in-process endpoint
"""

from .app import TerminalApp, main
from .display import ConsoleDisplay
from .input_handler import KeyReader, translate, wheel_lines
from .screen import ConsoleScreen, ScrollbackModel

__all__ = [
    # Main app
    "TerminalApp",
    "main",
    # Input
    "KeyReader",
    "translate",
    "wheel_lines",
    # Output
    "ConsoleScreen",
    "ConsoleDisplay",
    "ScrollbackModel",
]
