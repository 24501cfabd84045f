"""Fire-and-forget audio cues.

Sample playback and synthesis live outside the runtime; the shell only
announces what should be heard. The base class is silent, so a session
without an audio backend still runs.
"""

from __future__ import annotations

from loguru import logger


class Cues:
    """Audio cue sink. Every method returns immediately."""

    def key_click(self) -> None:
        logger.trace("cue: key click")

    def backspace(self) -> None:
        logger.trace("cue: backspace")

    def bot_typing(self, char: str) -> None:
        """Beep for one streamed assistant character (never called for whitespace)."""
        logger.trace("cue: bot typing {!r}", char)

    def start_ambient(self) -> None:
        logger.trace("cue: ambient start")

    def note_on(self, key: str, frequency: float) -> None:
        logger.trace("cue: note on {} ({} Hz)", key, frequency)

    def note_off(self, key: str) -> None:
        logger.trace("cue: note off {}", key)
