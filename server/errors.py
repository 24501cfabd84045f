"""Exception types for the assistant endpoint."""

from __future__ import annotations


class UpstreamError(Exception):
    """The upstream model refused or failed a request.

    Attributes:
        status: HTTP status the upstream answered with (None if unknown).
        error_type: Upstream error type, e.g. 'invalid_request_error'.
    """

    def __init__(self, message: str, status: int | None = None, error_type: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.error_type = error_type


class CounterStoreError(Exception):
    """The rate-limit counter store could not be read or updated."""
