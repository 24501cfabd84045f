"""Pytest configuration for local test runs."""

from __future__ import annotations

import asyncio
import inspect
import sys
from pathlib import Path

import pytest


def _add_repo_root_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_add_repo_root_to_path()

from prometheus_term.conversation import ConversationHistory  # noqa: E402
from prometheus_term.cues import Cues  # noqa: E402
from prometheus_term.focus import ArbitratedIO, FocusArbiter  # noqa: E402
from prometheus_term.terminal import ScreenSize  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers", "asyncio: mark async tests to run in an event loop"
    )


def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool:
    test_func = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_func):
        funcargs = {
            name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
        }
        asyncio.run(test_func(**funcargs))
        return True
    return False


class RecordingScreen:
    """Screen that keeps everything written since the last clear."""

    def __init__(self, cols: int = 80, rows: int = 24) -> None:
        self.size = ScreenSize(cols, rows)
        self.output = ""
        self.clears = 0
        self.cursor_visible = True
        self.offset = 0

    def write(self, text: str) -> None:
        self.output += text

    def clear(self) -> None:
        self.output = ""
        self.clears += 1

    def set_cursor_visible(self, visible: bool) -> None:
        self.cursor_visible = visible

    def scroll_lines(self, lines: int) -> None:
        self.offset = max(0, self.offset - lines)

    def is_scrolled_away(self) -> bool:
        return self.offset > 0

    def get_size(self) -> ScreenSize:
        return self.size


class RecordingCues(Cues):
    """Cue sink that remembers every call."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def key_click(self) -> None:
        self.calls.append(("key_click",))

    def backspace(self) -> None:
        self.calls.append(("backspace",))

    def bot_typing(self, char: str) -> None:
        self.calls.append(("bot_typing", char))

    def start_ambient(self) -> None:
        self.calls.append(("start_ambient",))

    def note_on(self, key: str, frequency: float) -> None:
        self.calls.append(("note_on", key, frequency))

    def note_off(self, key: str) -> None:
        self.calls.append(("note_off", key))


@pytest.fixture
def screen() -> RecordingScreen:
    return RecordingScreen()


@pytest.fixture
def arbiter(screen: RecordingScreen) -> FocusArbiter:
    return FocusArbiter(screen)


@pytest.fixture
def io(screen: RecordingScreen, arbiter: FocusArbiter) -> ArbitratedIO:
    return ArbitratedIO(screen, arbiter)


@pytest.fixture
def cues() -> RecordingCues:
    return RecordingCues()


@pytest.fixture
def conversation() -> ConversationHistory:
    return ConversationHistory()
