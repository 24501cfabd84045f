"""prometheus-term shell runtime.

A surface-agnostic retro terminal shell that talks to a streaming assistant:
- Line editor with history and command-name completion at the "$ " prompt
- Command registry and dispatcher; unknown commands go to the assistant
- Focus arbiter that hands the keyboard to full-screen modal applications
- Streaming chat client with typewriter pacing and in-character failures

Usage:
    from prometheus_term import Settings, Shell

    shell = Shell(screen, Settings.from_env())
    shell.boot()
    shell.feed(KeyEvent.down("Enter"))
"""

from .chat import ChatClient
from .commands import CommandContext, CommandRegistry
from .config import Settings
from .conversation import ConversationHistory, Role, Turn
from .cues import Cues
from .dispatcher import PROMPT, Dispatcher
from .errors import (
    BrokenStream,
    ChatError,
    ConfigError,
    ConnectionLost,
    LostInStatic,
    QuotaExceeded,
    RateLimited,
)
from .focus import ArbitratedIO, FocusArbiter
from .keys import KeyEvent
from .line_editor import HistoryLog, LineEditor
from .logging_utils import configure_logging
from .shell import Shell
from .terminal import Screen, ScreenSize, ShellIO
from .themes import THEMES, Theme, ThemeBook
from .tokenizer import tokenize

__all__ = [
    # Shell
    "Shell",
    "Settings",
    "configure_logging",
    # Input
    "KeyEvent",
    "LineEditor",
    "HistoryLog",
    "tokenize",
    # Commands
    "CommandRegistry",
    "CommandContext",
    "Dispatcher",
    "PROMPT",
    # Focus and output
    "FocusArbiter",
    "ArbitratedIO",
    "Screen",
    "ScreenSize",
    "ShellIO",
    # Chat
    "ChatClient",
    "ConversationHistory",
    "Role",
    "Turn",
    "Cues",
    # Themes
    "Theme",
    "THEMES",
    "ThemeBook",
    # Errors
    "ChatError",
    "RateLimited",
    "QuotaExceeded",
    "ConnectionLost",
    "BrokenStream",
    "LostInStatic",
    "ConfigError",
]
