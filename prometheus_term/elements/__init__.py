"""Full-screen modal applications.

Every application captures focus on entry, keeps private state, redraws the
whole screen on change, and on exit releases focus and leaves a note in the
conversation history.

Usage:
    from prometheus_term.elements import EditorApp, BufferSlot

    slot = BufferSlot()
    await EditorApp(io, history, slot).run()
"""

from .base import ModalApp
from .editor import BufferSlot, EditorApp, EditorState, Mode, step
from .instrument import InstrumentApp
from .pager import PagerApp
from .selector import SelectorApp

__all__ = [
    # Base
    "ModalApp",
    # Editor
    "BufferSlot",
    "EditorApp",
    "EditorState",
    "Mode",
    "step",
    # Others
    "InstrumentApp",
    "PagerApp",
    "SelectorApp",
]
