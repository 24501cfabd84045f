"""The chat endpoint: rate limit, validate, stream the upstream reply.

Framework-free: handle() takes the method, headers and raw body and returns
an EndpointResponse whose body is either fixed bytes or an async stream.
The HTTP listener and the in-process httpx transport both sit on top.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Mapping

from loguru import logger

from .errors import UpstreamError
from .rate_limit import RateLimiter
from .upstream import Message, Upstream

REMAINING_HEADER = "X-RateLimit-Remaining"
UNKNOWN_CLIENT = "unknown"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"
HISTORY_ROLES = ("user", "assistant")


@dataclass
class EndpointResponse:
    """An endpoint reply.

    Attributes:
        status: HTTP status code.
        headers: Response headers.
        body: Fixed body (ignored when stream is set).
        stream: Streamed body, consumed once.
    """

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    stream: AsyncIterator[bytes] | None = None

    @classmethod
    def json(cls, status: int, payload: dict[str, Any], headers: dict[str, str] | None = None) -> "EndpointResponse":
        merged = dict(headers or {})
        merged["Content-Type"] = JSON_CONTENT_TYPE
        return cls(status, merged, json.dumps(payload).encode("utf-8"))


def client_identity(headers: Mapping[str, str]) -> str:
    """Identify the caller by the first forwarded address, the real address, or not at all."""
    lowered = {k.lower(): v for k, v in headers.items()}
    forwarded = lowered.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = lowered.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return UNKNOWN_CLIENT


def classify_upstream_error(error: UpstreamError) -> tuple[int, str]:
    """Map an upstream failure onto the (status, error) the terminal understands."""
    if error.status == 429:
        return 429, "rate_limited"
    if error.status == 400 and error.error_type == "invalid_request_error":
        # billing and quota problems surface as invalid requests
        return 402, "quota_exceeded"
    if error.status in (401, 403):
        return 402, "quota_exceeded"
    return 500, "server_error"


def parse_history(raw: Any) -> list[Message]:
    """Keep well-formed user/assistant turns; drop anything else."""
    if not isinstance(raw, list):
        return []
    history = []
    for item in raw:
        if (
            isinstance(item, dict)
            and item.get("role") in HISTORY_ROLES
            and isinstance(item.get("content"), str)
        ):
            history.append({"role": item["role"], "content": item["content"]})
        else:
            logger.debug("Dropping malformed history entry {!r}", item)
    return history


class ChatEndpoint:
    """Handles one chat request at a time; safe to call concurrently.

    Usage:
        endpoint = ChatEndpoint(RateLimiter(MemoryCounterStore()), EchoUpstream())
        response = await endpoint.handle("POST", headers, body)
    """

    def __init__(self, limiter: RateLimiter, upstream: Upstream) -> None:
        self.limiter = limiter
        self.upstream = upstream

    async def handle(self, method: str, headers: Mapping[str, str], body: bytes) -> EndpointResponse:
        method = method.upper()
        if method == "OPTIONS":
            return EndpointResponse(200)
        if method != "POST":
            return EndpointResponse.json(405, {"error": "Method not allowed"})

        identity = client_identity(headers)
        decision = await self.limiter.check(identity)
        extra = {REMAINING_HEADER: str(decision.remaining)}
        if not decision.allowed:
            return EndpointResponse.json(429, {"error": "rate_limited", "remaining": 0}, extra)

        try:
            payload = json.loads(body or b"{}")
        except ValueError:
            payload = {}
        message = payload.get("message") if isinstance(payload, dict) else None
        if not message or not isinstance(message, str):
            return EndpointResponse.json(400, {"error": "Message is required"}, extra)

        history = parse_history(payload.get("history", []))
        messages = history + [{"role": "user", "content": message}]
        logger.info("Chat request from {} ({} prior turns)", identity, len(history))

        fragments = self.upstream.stream(messages)
        try:
            first = await anext(fragments)
        except StopAsyncIteration:
            first = ""
        except UpstreamError as e:
            status, error = classify_upstream_error(e)
            logger.warning("Upstream error {} mapped to {} {}", e.status, status, error)
            return EndpointResponse.json(status, {"error": error}, extra)
        except Exception:
            logger.exception("Upstream failed before replying")
            return EndpointResponse.json(500, {"error": "server_error"}, extra)

        extra["Content-Type"] = TEXT_CONTENT_TYPE
        return EndpointResponse(200, extra, stream=self._body(first, fragments))

    async def _body(self, first: str, rest: AsyncIterator[str]) -> AsyncIterator[bytes]:
        if first:
            yield first.encode("utf-8")
        try:
            async for fragment in rest:
                yield fragment.encode("utf-8")
        except Exception:
            # headers are gone; all we can do is end the stream early
            logger.exception("Upstream failed mid-reply; ending stream")
