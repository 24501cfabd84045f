"""httpx transport that serves requests from an in-process ChatEndpoint."""

from __future__ import annotations

from typing import AsyncIterator

import httpx

from .endpoint import ChatEndpoint


class _EndpointStream(httpx.AsyncByteStream):
    def __init__(self, chunks: AsyncIterator[bytes]) -> None:
        self._chunks = chunks

    async def __aiter__(self) -> AsyncIterator[bytes]:
        async for chunk in self._chunks:
            yield chunk

    async def aclose(self) -> None:
        aclose = getattr(self._chunks, "aclose", None)
        if aclose is not None:
            await aclose()


class EndpointTransport(httpx.AsyncBaseTransport):
    """Routes every request to `endpoint`, whatever its URL.

    Args:
        endpoint: The endpoint to serve from.
        client_ip: Reported as the caller's address (x-real-ip) when the
            request does not carry a forwarded address of its own.
    """

    def __init__(self, endpoint: ChatEndpoint, client_ip: str = "127.0.0.1") -> None:
        self.endpoint = endpoint
        self.client_ip = client_ip

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        body = await request.aread()
        headers = dict(request.headers)
        headers.setdefault("x-real-ip", self.client_ip)
        reply = await self.endpoint.handle(request.method, headers, body)
        if reply.stream is not None:
            return httpx.Response(reply.status, headers=reply.headers, stream=_EndpointStream(reply.stream))
        return httpx.Response(reply.status, headers=reply.headers, content=reply.body)
