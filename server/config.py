"""Environment-driven settings for the assistant endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from prometheus_term.config import env_float, env_int, env_str
from prometheus_term.errors import ConfigError

DEFAULT_MODEL = "claude-haiku-4-5"
UPSTREAMS = ("anthropic", "echo")


def load_system_prompt() -> str | None:
    """SYSTEM_PROMPT, else the contents of the file named by SYSTEM_PROMPT_FILE."""
    prompt = env_str("SYSTEM_PROMPT")
    if prompt:
        return prompt
    path = env_str("SYSTEM_PROMPT_FILE")
    if not path:
        return None
    try:
        return Path(path).read_text(encoding="utf-8").strip() or None
    except OSError as e:
        raise ConfigError(f"SYSTEM_PROMPT_FILE {path!r} cannot be read: {e}") from e


@dataclass
class ServerSettings:
    """Settings for the endpoint process.

    Attributes:
        host: Interface to listen on.
        port: TCP port to listen on.
        rate_limit: Accepted sends per identity per window.
        rate_window: Window length in seconds.
        upstream: 'anthropic' or 'echo'.
        model: Anthropic model name.
        max_tokens: Reply length ceiling.
        system_prompt: The assistant's persona.
        log_level: Minimum level for the stderr sink.
    """

    host: str = "127.0.0.1"
    port: int = 8787
    rate_limit: int = 50
    rate_window: float = 60 * 60 * 24
    upstream: str = "anthropic"
    model: str = DEFAULT_MODEL
    max_tokens: int = 1024
    system_prompt: str | None = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.upstream not in UPSTREAMS:
            raise ConfigError(f"PROMETHEUS_UPSTREAM must be one of {UPSTREAMS}, got {self.upstream!r}")
        if self.rate_limit < 1:
            raise ConfigError("PROMETHEUS_RATE_LIMIT must be at least 1")
        if self.rate_window <= 0:
            raise ConfigError("PROMETHEUS_RATE_WINDOW must be positive")

    def require_system_prompt(self) -> str:
        if not self.system_prompt:
            raise ConfigError(
                "SYSTEM_PROMPT not configured. Set SYSTEM_PROMPT or point SYSTEM_PROMPT_FILE at a file."
            )
        return self.system_prompt

    @classmethod
    def from_env(cls) -> "ServerSettings":
        """Build settings from the environment (and a local .env file)."""
        load_dotenv()
        return cls(
            host=env_str("PROMETHEUS_HOST", "127.0.0.1") or "127.0.0.1",
            port=env_int("PROMETHEUS_PORT", 8787),
            rate_limit=env_int("PROMETHEUS_RATE_LIMIT", 50),
            rate_window=env_float("PROMETHEUS_RATE_WINDOW", 60 * 60 * 24),
            upstream=(env_str("PROMETHEUS_UPSTREAM", "anthropic") or "anthropic").lower(),
            model=env_str("PROMETHEUS_MODEL", DEFAULT_MODEL) or DEFAULT_MODEL,
            max_tokens=env_int("PROMETHEUS_MAX_TOKENS", 1024),
            system_prompt=load_system_prompt(),
            log_level=(env_str("PROMETHEUS_LOG_LEVEL", "INFO") or "INFO").upper(),
        )
