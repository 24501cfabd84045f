"""Environment-driven settings for the terminal shell."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_ENDPOINT = "http://127.0.0.1:8787/api/chat"
DEFAULT_CONTACT = "If you wish to reach my creator, the resume knows the way."


def env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def env_float(name: str, default: float) -> float:
    raw = env_str(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def env_int(name: str, default: int) -> int:
    raw = env_str(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def env_bool(name: str, default: bool) -> bool:
    raw = env_str(name)
    if raw is None:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Settings for one terminal session.

    Attributes:
        endpoint_url: URL of the remote assistant endpoint.
        typing_delay: Seconds to pause after each streamed character.
        contact_line: Out-of-band contact shown when the assistant is silenced.
        resume_path: Document shown by the `resume` pager (bundled one if None).
        resume_url: Download target opened by the pager's `d` key.
        log_file: Where the loguru file sink writes.
        log_level: Minimum level for the file sink.
        mouse_wheel: Enable terminal mouse reporting for wheel scrolling.
        key_release_delay: Silence (seconds) after which a held key counts as released.
    """

    endpoint_url: str = DEFAULT_ENDPOINT
    typing_delay: float = 0.045
    contact_line: str = DEFAULT_CONTACT
    resume_path: Path | None = None
    resume_url: str | None = None
    log_file: Path = Path("prometheus-term.log")
    log_level: str = "INFO"
    mouse_wheel: bool = False
    key_release_delay: float = 0.55

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from PROMETHEUS_* variables (and a local .env file)."""
        load_dotenv()
        resume_path = env_str("PROMETHEUS_RESUME_PATH")
        return cls(
            endpoint_url=env_str("PROMETHEUS_ENDPOINT", DEFAULT_ENDPOINT) or DEFAULT_ENDPOINT,
            typing_delay=env_float("PROMETHEUS_TYPING_DELAY", 0.045),
            contact_line=env_str("PROMETHEUS_CONTACT", DEFAULT_CONTACT) or DEFAULT_CONTACT,
            resume_path=Path(resume_path) if resume_path else None,
            resume_url=env_str("PROMETHEUS_RESUME_URL"),
            log_file=Path(env_str("PROMETHEUS_LOG_FILE", "prometheus-term.log") or "prometheus-term.log"),
            log_level=(env_str("PROMETHEUS_LOG_LEVEL", "INFO") or "INFO").upper(),
            mouse_wheel=env_bool("PROMETHEUS_MOUSE", False),
            key_release_delay=env_float("PROMETHEUS_KEY_RELEASE", 0.55),
        )
