"""Line editing at the shell prompt: buffer, history and command completion.

The editor only ever appends to or trims the end of its line; there is no
cursor movement inside the line. Every change is echoed to the output sink
as it happens, so the visible line always matches the buffer.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from . import keys
from .commands import CommandRegistry
from .cues import Cues
from .dispatcher import PROMPT
from .keys import KeyEvent
from .terminal import ShellIO
from .tokenizer import tokenize

LISTING_WIDTH = 80
NOT_BROWSING = -1


@dataclass
class HistoryLog:
    """Committed lines, oldest first. Consecutive duplicates are stored once."""

    entries: list[str] = field(default_factory=list)

    def append(self, line: str) -> bool:
        """Record a committed line.

        Returns:
            True if the line was appended.
        """
        if not line.strip():
            return False
        if self.entries and self.entries[-1] == line:
            return False
        self.entries.append(line)
        return True

    def from_end(self, index: int) -> str:
        """Entry `index` steps back from the newest (0 = newest)."""
        return self.entries[len(self.entries) - 1 - index]

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class Completion:
    """Result of completing the current line.

    Attributes:
        candidates: Matching command names, sorted.
        prefix: The text the candidates were matched against, as typed.
    """

    candidates: list[str] = field(default_factory=list)
    prefix: str = ""


def complete_command(line: str, registry: CommandRegistry) -> Completion:
    """Complete a command name.

    Only applies while the line holds a single token and no trailing space;
    arguments are never completed.
    """
    tokens = tokenize(line)
    if len(tokens) != 1 or line.endswith((" ", "\t")):
        return Completion()
    prefix = tokens[0]
    return Completion(registry.completions(prefix), prefix)


def common_prefix(strings: list[str]) -> str:
    """Longest case-sensitive prefix shared by all strings."""
    if not strings:
        return ""
    prefix = strings[0]
    for s in strings[1:]:
        while not s.startswith(prefix):
            prefix = prefix[:-1]
    return prefix


def format_columns(candidates: list[str], width: int = LISTING_WIDTH) -> list[str]:
    """Lay candidates out in rows of equal-width columns."""
    if not candidates:
        return []
    cell = max(len(c) for c in candidates) + 2
    per_row = width // cell or 1
    rows = []
    for i in range(0, len(candidates), per_row):
        rows.append("".join(c.ljust(cell) for c in candidates[i : i + per_row]))
    return rows


@dataclass
class LineEditor:
    """Input line state machine for the shell prompt.

    Handles printable characters, Backspace, Tab, Enter and Up/Down. The
    caller is responsible for only feeding keys while the shell has focus
    and no command is running.

    Usage:
        editor = LineEditor(io=io, registry=registry)
        line = editor.handle_key(KeyEvent.down("Enter"))  # committed text or None
    """

    io: ShellIO
    registry: CommandRegistry
    cues: Cues = field(default_factory=Cues)
    prompt: str = PROMPT
    buffer: str = ""
    history: HistoryLog = field(default_factory=HistoryLog)
    history_index: int = NOT_BROWSING
    saved_line: str = ""

    def handle_key(self, event: KeyEvent) -> str | None:
        """Apply one key-down event.

        Returns:
            The committed line when Enter was pressed, otherwise None.
        """
        if not event.is_down:
            return None
        if event.key == keys.ENTER:
            return self.commit()
        if event.key == keys.BACKSPACE:
            self.backspace()
        elif event.key == keys.TAB:
            self.complete()
        elif event.key == keys.ARROW_UP:
            self.history_up()
        elif event.key == keys.ARROW_DOWN:
            self.history_down()
        elif event.is_printable:
            self.insert(event.key)
        return None

    def insert(self, char: str) -> None:
        self.buffer += char
        self.io.write(char)
        self.cues.key_click()

    def paste(self, text: str) -> None:
        """Append pasted text with its line breaks removed."""
        clean = text.replace("\r", "").replace("\n", "")
        if not clean:
            return
        self.buffer += clean
        self.io.write(clean)

    def backspace(self) -> None:
        if not self.buffer:
            return
        self.buffer = self.buffer[:-1]
        self.io.write("\b \b")
        self.cues.backspace()

    def commit(self) -> str:
        """Finish the line: record it in history and hand it back."""
        line = self.buffer
        self.buffer = ""
        self.history.append(line)
        self.history_index = NOT_BROWSING
        self.saved_line = ""
        self.io.write("\n")
        return line

    def history_up(self) -> None:
        if not self.history:
            return
        if self.history_index == NOT_BROWSING:
            self.saved_line = self.buffer
        if self.history_index < len(self.history) - 1:
            self.history_index += 1
        self._replace_line(self.history.from_end(self.history_index))

    def history_down(self) -> None:
        if self.history_index == NOT_BROWSING:
            return
        self.history_index -= 1
        if self.history_index == NOT_BROWSING:
            self._replace_line(self.saved_line)
            self.saved_line = ""
        else:
            self._replace_line(self.history.from_end(self.history_index))

    def complete(self) -> None:
        completion = complete_command(self.buffer, self.registry)
        candidates = completion.candidates
        if not candidates:
            return

        typed = len(completion.prefix)
        if len(candidates) == 1:
            match = candidates[0]
            addition = match[typed:] + ("" if match.endswith("/") else " ")
            self._append(addition)
            return

        shared = common_prefix(candidates)
        if len(shared) > typed:
            self._append(shared[typed:])
            return

        self.io.write("\n")
        for row in format_columns(candidates):
            self.io.write(row + "\n")
        self.io.write(self.prompt + self.buffer)

    def _append(self, text: str) -> None:
        self.buffer += text
        self.io.write(text)

    def _replace_line(self, line: str) -> None:
        width = len(self.buffer)
        if width:
            self.io.write("\b" * width + " " * width + "\b" * width)
        self.buffer = line
        self.io.write(line)
