"""The piano: plays a tone per held key using key-down/key-up symmetry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .. import keys
from ..conversation import ConversationHistory
from ..cues import Cues
from ..keys import KeyEvent
from ..terminal import ShellIO
from .base import ModalApp


@dataclass(frozen=True)
class Note:
    name: str
    frequency: float


# white keys, home row
NOTE_MAP: dict[str, Note] = {
    "a": Note("C4", 261.63),
    "s": Note("D4", 293.66),
    "d": Note("E4", 329.63),
    "f": Note("F4", 349.23),
    "g": Note("G4", 392.0),
    "h": Note("A4", 440.0),
    "j": Note("B4", 493.88),
    "k": Note("C5", 523.25),
    "l": Note("D5", 587.33),
    ";": Note("E5", 659.25),
    "'": Note("F5", 698.46),
}

# black keys, row above
SHARP_MAP: dict[str, Note] = {
    "w": Note("C#", 277.18),
    "e": Note("D#", 311.13),
    "t": Note("F#", 369.99),
    "y": Note("G#", 415.3),
    "u": Note("A#", 466.16),
    "o": Note("C#", 554.37),
    "p": Note("D#", 622.25),
}

WHITE_KEYS = tuple(NOTE_MAP)


def note_for(key: str) -> tuple[str, Note] | None:
    """Resolve a key name to (normalized key, note); None if unmapped."""
    normalized = key.lower()
    note = NOTE_MAP.get(normalized) or SHARP_MAP.get(normalized)
    if note is None:
        return None
    return normalized, note


class InstrumentApp(ModalApp):
    """The `piano` command.

    Each mapped key starts its note on key-down and stops it on key-up. A
    second key-down for a held key never restarts the note.
    """

    exit_note = "User just finished playing the piano easter egg"

    def __init__(
        self, io: ShellIO, history: ConversationHistory, cues: Cues | None = None
    ) -> None:
        super().__init__(io, history, cues)
        self.held: dict[str, Note] = {}

    def on_deactivate(self) -> None:
        for key in list(self.held):
            self.cues.note_off(key)
        self.held.clear()

    def handle_key(self, event: KeyEvent) -> tuple[bool, list[str] | None]:
        if event.is_down and event.key == keys.ESCAPE:
            return True, [" Thanks for playing!", ""]

        resolved = note_for(event.key)
        if resolved is None:
            return False, None
        key, note = resolved

        if event.is_down:
            if key not in self.held:
                self.held[key] = note
                self.cues.note_on(key, note.frequency)
        elif key in self.held:
            del self.held[key]
            self.cues.note_off(key)
        return False, None

    def get_lines(self) -> list[str]:
        held = self.held

        def black(k: str) -> str:
            return "***" if k in held else "|||"

        def black_label(k: str) -> str:
            return f"*{k}*" if k in held else f"|{k}|"

        def white(k: str) -> str:
            return "****" if k in held else "    "

        def white_label(k: str) -> str:
            return f"*{k}* " if k in held else f" {k}  "

        def group(keys_: str, cell: Callable[[str], str]) -> str:
            return "".join(f"|{cell(k)}|" for k in keys_)

        lines = [""]
        lines.append("        ___  ___          ___  ___  ___          ___  ___")
        for cell in (black, black_label):
            lines.append(
                f"       {group('we', cell)}        {group('tyu', cell)}        {group('op', cell)}"
            )
        lines.append("       |___||___|        |___||___||___|        |___||___|")
        lines.append("    ______________________________________________________")
        for cell in (white, white, white_label):
            lines.append("   |" + "|".join(cell(k) for k in WHITE_KEYS) + "|")
        lines.append("   |____|____|____|____|____|____|____|____|____|____|____|")
        lines.append("      C    D    E    F    G    A    B    C    D    E    F")
        lines.append("")
        if held:
            lines.append("   Now playing: " + " + ".join(n.name for n in held.values()))
        else:
            lines.append("   ESC to exit")
        return lines
