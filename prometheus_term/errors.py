"""Exception types for the shell runtime."""

from __future__ import annotations


class ConfigError(ValueError):
    """Raised when an environment setting cannot be parsed."""


class ChatError(Exception):
    """A terminal failure of a single chat send.

    Attributes:
        kind: Stable machine-readable name of the failure class.
    """

    kind = "chat_error"


class RateLimited(ChatError):
    """The endpoint refused the send because the visitor's quota is spent (429)."""

    kind = "rate_limited"


class QuotaExceeded(ChatError):
    """The endpoint cannot reach its upstream model for billing/key reasons (402)."""

    kind = "quota_exceeded"


class ConnectionLost(ChatError):
    """Any other non-2xx response."""

    kind = "connection_lost"

    def __init__(self, status_code: int) -> None:
        super().__init__(f"endpoint answered HTTP {status_code}")
        self.status_code = status_code


class BrokenStream(ChatError):
    """The response body could not be read as a stream."""

    kind = "broken_stream"


class LostInStatic(ChatError):
    """The request itself failed (transport error, bad URL, ...)."""

    kind = "static"
