"""prometheus-term assistant endpoint.

POST /api/chat with {"message": ..., "history": [...]} and get the reply back
as a streamed plain-text body, subject to a per-visitor daily quota.

Usage:
    prometheus-server            # listen on PROMETHEUS_HOST:PROMETHEUS_PORT

    endpoint = build_endpoint(ServerSettings.from_env())
    transport = EndpointTransport(endpoint)  # in-process, for httpx clients
"""

from .config import ServerSettings
from .endpoint import ChatEndpoint, EndpointResponse, classify_upstream_error, client_identity
from .errors import CounterStoreError, UpstreamError
from .rate_limit import MemoryCounterStore, RateLimitDecision, RateLimiter
from .serve import build_endpoint
from .transport import EndpointTransport
from .upstream import AnthropicUpstream, EchoUpstream

__all__ = [
    "ServerSettings",
    "build_endpoint",
    # Endpoint
    "ChatEndpoint",
    "EndpointResponse",
    "EndpointTransport",
    "client_identity",
    "classify_upstream_error",
    # Rate limiting
    "RateLimiter",
    "RateLimitDecision",
    "MemoryCounterStore",
    # Upstreams
    "AnthropicUpstream",
    "EchoUpstream",
    # Errors
    "UpstreamError",
    "CounterStoreError",
]
