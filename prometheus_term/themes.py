"""Display themes and the sink that applies them.

The visual renderer is an external collaborator; the runtime only pushes
named display parameters into it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from loguru import logger


class DisplaySink(Protocol):
    def set_parameter(self, name: str, value: str | float) -> None: ...


@dataclass(frozen=True)
class Theme:
    name: str
    font_color: str
    background_color: str = "#000000"
    effects: dict[str, float] = field(default_factory=dict)

    def parameters(self) -> dict[str, str | float]:
        params: dict[str, str | float] = {
            "font_color": self.font_color,
            "background_color": self.background_color,
        }
        params.update(self.effects)
        return params


def _crt(**overrides: float) -> dict[str, float]:
    effects = {
        "bloom": 0.55,
        "brightness": 0.5,
        "burn_in": 0.25,
        "flickering": 0.1,
        "jitter": 0.2,
        "screen_curvature": 0.3,
        "static_noise": 0.12,
    }
    effects.update(overrides)
    return effects


THEMES: tuple[Theme, ...] = (
    Theme("Default Amber", "#ff8100", effects=_crt(chroma_color=0.25)),
    Theme("Monochrome Green", "#0ccc68", effects=_crt()),
    Theme("Green Scanlines", "#7cff4f", effects=_crt(bloom=0.6, rasterization=1)),
    Theme("Default Pixelated", "#ffffff", effects=_crt(rasterization=2, screen_curvature=0.0)),
    Theme("Apple ][", "#00d56d", "#001100", effects=_crt(static_noise=0.2)),
    Theme("Vintage", "#00ff3e", effects=_crt(flickering=0.9, burn_in=0.5, jitter=0.4)),
    Theme("IBM Dos", "#ffffff", "#000080", effects=_crt(bloom=0.3, screen_curvature=0.1)),
    Theme("IBM 3278", "#0ccc68", effects=_crt(burn_in=0.6, static_noise=0.0)),
)

DEFAULT_THEME_INDEX = 1


def apply_theme(theme: Theme, sink: DisplaySink) -> None:
    for name, value in theme.parameters().items():
        sink.set_parameter(name, value)


class NullDisplay:
    """Sink for sessions without a visual renderer."""

    def set_parameter(self, name: str, value: str | float) -> None:
        logger.trace("display parameter {} = {}", name, value)


class ThemeBook:
    """Owns the committed theme for the session.

    Only the theme selector changes the committed index; previews apply a
    theme to the sink without committing it.
    """

    def __init__(
        self,
        sink: DisplaySink,
        themes: tuple[Theme, ...] = THEMES,
        committed: int = DEFAULT_THEME_INDEX,
    ) -> None:
        if not themes:
            raise ValueError("at least one theme is required")
        self.sink = sink
        self.themes = themes
        self.committed = committed % len(themes)

    @property
    def current(self) -> Theme:
        return self.themes[self.committed]

    def preview(self, index: int) -> Theme:
        theme = self.themes[index]
        apply_theme(theme, self.sink)
        return theme

    def commit(self, index: int) -> Theme:
        self.committed = index
        theme = self.preview(index)
        logger.info("Theme committed: {}", theme.name)
        return theme

    def revert(self) -> Theme:
        """Re-apply the committed theme (drops any preview)."""
        return self.preview(self.committed)
