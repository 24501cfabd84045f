"""The vim trap: a tiny modal text editor.

Editing is a pure state machine. step(state, event) looks the key up in the
current mode's transition table and returns the next EditorState plus the
effects the caller must carry out (persist the buffer, leave the editor,
play a cue). EditorApp is the thin ModalApp shell around it that owns the
screen and the process-wide saved buffer.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Union

from .. import keys
from ..conversation import ConversationHistory
from ..cues import Cues
from ..keys import KeyEvent
from ..terminal import ShellIO
from .base import ModalApp

NO_WRITE_SINCE_CHANGE = "E37: No write since last change (add ! to override)"
WRITTEN = '"[No Name]" written'
QUIT_HINT = "Hint: :q or :wq to quit. You got this!"
ESCAPED = "You escaped vim. Impressive."
CURSOR = "█"


class Mode(Enum):
    NORMAL = "normal"
    INSERT = "insert"
    COMMAND = "command-line"


@dataclass(frozen=True)
class EditorState:
    """Immutable editor snapshot.

    Attributes:
        lines: Buffer rows (never empty).
        row: Cursor row.
        col: Cursor column; may sit one past the end of the row.
        mode: Current mode.
        command: Pending command-line text (without the leading ':').
        dirty: True if the buffer changed since the last write.
        message: One-shot status line message, cleared by the next key.
    """

    lines: tuple[str, ...] = ("",)
    row: int = 0
    col: int = 0
    mode: Mode = Mode.NORMAL
    command: str = ""
    dirty: bool = False
    message: str = ""

    @property
    def line(self) -> str:
        return self.lines[self.row]


@dataclass(frozen=True)
class Save:
    lines: tuple[str, ...]


@dataclass(frozen=True)
class Exit:
    message: str = ""


@dataclass(frozen=True)
class Cue:
    name: str  # "click" or "backspace"


Effect = Union[Save, Exit, Cue]
Step = tuple[EditorState, tuple[Effect, ...]]
Transition = Callable[[EditorState, KeyEvent], Step]

CLICK = Cue("click")
BACKSPACE_CUE = Cue("backspace")


def _with_lines(lines: tuple[str, ...], row: int, text: str) -> tuple[str, ...]:
    return lines[:row] + (text,) + lines[row + 1 :]


# -- normal mode ------------------------------------------------------------


def _enter_insert(state: EditorState, event: KeyEvent) -> Step:
    return replace(state, mode=Mode.INSERT), (CLICK,)


def _append(state: EditorState, event: KeyEvent) -> Step:
    col = min(state.col + 1, len(state.line))
    return replace(state, mode=Mode.INSERT, col=col), (CLICK,)


def _open_below(state: EditorState, event: KeyEvent) -> Step:
    lines = state.lines[: state.row + 1] + ("",) + state.lines[state.row + 1 :]
    return (
        replace(state, lines=lines, row=state.row + 1, col=0, mode=Mode.INSERT, dirty=True),
        (CLICK,),
    )


def _open_above(state: EditorState, event: KeyEvent) -> Step:
    lines = state.lines[: state.row] + ("",) + state.lines[state.row :]
    return replace(state, lines=lines, col=0, mode=Mode.INSERT, dirty=True), (CLICK,)


def _delete_char(state: EditorState, event: KeyEvent) -> Step:
    line = state.line
    if not line or state.col >= len(line):
        return state, (CLICK,)
    text = line[: state.col] + line[state.col + 1 :]
    col = state.col
    if col >= len(text) and col > 0:
        col -= 1
    return (
        replace(state, lines=_with_lines(state.lines, state.row, text), col=col, dirty=True),
        (CLICK,),
    )


def _delete_row(state: EditorState, event: KeyEvent) -> Step:
    if len(state.lines) <= 1:
        return state, (CLICK,)
    lines = state.lines[: state.row] + state.lines[state.row + 1 :]
    row = min(state.row, len(lines) - 1)
    return replace(state, lines=lines, row=row, col=0, dirty=True), (CLICK,)


def _open_command_line(state: EditorState, event: KeyEvent) -> Step:
    return replace(state, mode=Mode.COMMAND, command=""), (CLICK,)


def _left(state: EditorState, event: KeyEvent) -> Step:
    return replace(state, col=max(0, state.col - 1)), (CLICK,)


def _right(state: EditorState, event: KeyEvent) -> Step:
    length = len(state.line)
    limit = length if state.mode is Mode.INSERT else max(0, length - 1)
    return replace(state, col=min(state.col + 1, limit)), (CLICK,)


def _up(state: EditorState, event: KeyEvent) -> Step:
    if state.row == 0:
        return state, (CLICK,)
    row = state.row - 1
    return replace(state, row=row, col=min(state.col, len(state.lines[row]))), (CLICK,)


def _down(state: EditorState, event: KeyEvent) -> Step:
    if state.row >= len(state.lines) - 1:
        return state, (CLICK,)
    row = state.row + 1
    return replace(state, row=row, col=min(state.col, len(state.lines[row]))), (CLICK,)


NORMAL: dict[str, Transition] = {
    "i": _enter_insert,
    "a": _append,
    "o": _open_below,
    "O": _open_above,
    "x": _delete_char,
    "d": _delete_row,
    ":": _open_command_line,
    "h": _left,
    "j": _down,
    "k": _up,
    "l": _right,
    keys.ARROW_LEFT: _left,
    keys.ARROW_DOWN: _down,
    keys.ARROW_UP: _up,
    keys.ARROW_RIGHT: _right,
}


# -- insert mode ------------------------------------------------------------


def _leave_insert(state: EditorState, event: KeyEvent) -> Step:
    return replace(state, mode=Mode.NORMAL, col=max(0, state.col - 1)), (CLICK,)


def _split_line(state: EditorState, event: KeyEvent) -> Step:
    line = state.line
    lines = (
        state.lines[: state.row]
        + (line[: state.col], line[state.col :])
        + state.lines[state.row + 1 :]
    )
    return replace(state, lines=lines, row=state.row + 1, col=0, dirty=True), (CLICK,)


def _insert_backspace(state: EditorState, event: KeyEvent) -> Step:
    if state.col > 0:
        line = state.line
        text = line[: state.col - 1] + line[state.col :]
        return (
            replace(
                state,
                lines=_with_lines(state.lines, state.row, text),
                col=state.col - 1,
                dirty=True,
            ),
            (BACKSPACE_CUE,),
        )
    if state.row > 0:
        previous = state.lines[state.row - 1]
        joined = previous + state.line
        lines = state.lines[: state.row - 1] + (joined,) + state.lines[state.row + 1 :]
        return (
            replace(state, lines=lines, row=state.row - 1, col=len(previous), dirty=True),
            (BACKSPACE_CUE,),
        )
    return state, (BACKSPACE_CUE,)


def _insert_char(state: EditorState, event: KeyEvent) -> Step:
    line = state.line
    text = line[: state.col] + event.key + line[state.col :]
    return (
        replace(state, lines=_with_lines(state.lines, state.row, text), col=state.col + 1, dirty=True),
        (CLICK,),
    )


def _insert_arrow(state: EditorState, event: KeyEvent) -> Step:
    # arrows move without a click in insert mode
    next_state, _ = NORMAL[event.key](state, event)
    return next_state, ()


INSERT: dict[str, Transition] = {
    keys.ESCAPE: _leave_insert,
    keys.ENTER: _split_line,
    keys.BACKSPACE: _insert_backspace,
    keys.ARROW_LEFT: _insert_arrow,
    keys.ARROW_DOWN: _insert_arrow,
    keys.ARROW_UP: _insert_arrow,
    keys.ARROW_RIGHT: _insert_arrow,
}


# -- command-line mode ------------------------------------------------------


def _cancel_command(state: EditorState, event: KeyEvent) -> Step:
    return replace(state, mode=Mode.NORMAL, command=""), (CLICK,)


def _command_backspace(state: EditorState, event: KeyEvent) -> Step:
    if state.command:
        return replace(state, command=state.command[:-1]), (BACKSPACE_CUE,)
    return replace(state, mode=Mode.NORMAL), (BACKSPACE_CUE,)


def _command_char(state: EditorState, event: KeyEvent) -> Step:
    return replace(state, command=state.command + event.key), (CLICK,)


def _submit_command(state: EditorState, event: KeyEvent) -> Step:
    next_state, effects = run_command(state, state.command)
    return next_state, (CLICK,) + effects


def run_command(state: EditorState, command: str) -> Step:
    """Interpret a submitted ':' command."""
    cmd = command.strip()
    back = replace(state, mode=Mode.NORMAL, command="")
    if cmd in ("q", "quit"):
        if state.dirty:
            return replace(back, message=NO_WRITE_SINCE_CHANGE), ()
        return back, (Exit(),)
    if cmd in ("q!", "quit!"):
        return back, (Exit(),)
    if cmd in ("w", "write"):
        return replace(back, dirty=False, message=WRITTEN), (Save(state.lines),)
    if cmd in ("wq", "wq!", "x", "x!"):
        return replace(back, dirty=False), (Save(state.lines), Exit(WRITTEN))
    if cmd == "help":
        return back, (Exit(QUIT_HINT),)
    return replace(back, message=f"E492: Not an editor command: {cmd}"), ()


COMMAND: dict[str, Transition] = {
    keys.ESCAPE: _cancel_command,
    keys.BACKSPACE: _command_backspace,
    keys.ENTER: _submit_command,
}

TABLES: dict[Mode, dict[str, Transition]] = {
    Mode.NORMAL: NORMAL,
    Mode.INSERT: INSERT,
    Mode.COMMAND: COMMAND,
}

# printable keys with no table entry
FALLBACKS: dict[Mode, Transition] = {
    Mode.INSERT: _insert_char,
    Mode.COMMAND: _command_char,
}


def step(state: EditorState, event: KeyEvent) -> Step:
    """Advance the editor by one key event.

    Key-up events and keys the current mode does not bind leave the state
    unchanged and produce no effects.
    """
    if not event.is_down:
        return state, ()
    if state.message:
        state = replace(state, message="")
    transition = TABLES[state.mode].get(event.key)
    if transition is None and len(event.key) == 1:
        transition = FALLBACKS.get(state.mode)
    if transition is None:
        return state, ()
    return transition(state, event)


@dataclass
class BufferSlot:
    """Process-wide saved buffer; survives between editor visits."""

    lines: tuple[str, ...] = ("",)

    def store(self, lines: tuple[str, ...]) -> None:
        self.lines = tuple(lines) or ("",)


def render(state: EditorState, cols: int, rows: int) -> list[str]:
    """Draw the buffer, a status row and the message/command row."""
    screen = []
    for i in range(max(0, rows - 2)):
        if i < len(state.lines):
            line = state.lines[i]
            if i == state.row:
                line = line[: state.col] + CURSOR + line[state.col + 1 :]
            screen.append(line)
        else:
            screen.append("~")

    left = ""
    if state.mode is Mode.INSERT:
        left = "-- INSERT --"
    elif state.mode is Mode.NORMAL and state.dirty:
        left = "[+]"
    right = f"{state.row + 1},{state.col + 1}"
    screen.append(left + " " * max(0, cols - len(left) - len(right) - 1) + right)

    if state.message:
        screen.append(state.message)
    elif state.mode is Mode.COMMAND:
        screen.append(":" + state.command)
    else:
        screen.append("")
    return screen


class EditorApp(ModalApp):
    """The `vim` command: opens the saved buffer and traps the user."""

    exit_note = "User just escaped from the vim easter egg trap"

    def __init__(
        self,
        io: ShellIO,
        history: ConversationHistory,
        slot: BufferSlot,
        cues: Cues | None = None,
    ) -> None:
        super().__init__(io, history, cues)
        self.slot = slot
        self.state = EditorState(lines=slot.lines or ("",))

    def get_lines(self) -> list[str]:
        size = self.io.get_size()
        return render(self.state, size.cols, size.rows)

    def handle_key(self, event: KeyEvent) -> tuple[bool, list[str] | None]:
        self.state, effects = step(self.state, event)
        for effect in effects:
            if isinstance(effect, Cue):
                if effect == BACKSPACE_CUE:
                    self.cues.backspace()
                else:
                    self.cues.key_click()
            elif isinstance(effect, Save):
                self.slot.store(effect.lines)
            elif isinstance(effect, Exit):
                lines = [effect.message] if effect.message else []
                return True, lines + [ESCAPED, ""]
        return False, None
