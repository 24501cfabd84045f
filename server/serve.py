"""HTTP listener for the chat endpoint (`prometheus-server`)."""

from __future__ import annotations

import asyncio
import http.server
from dataclasses import replace
from typing import Optional

import typer
from loguru import logger

from prometheus_term.errors import ConfigError
from prometheus_term.logging_utils import configure_logging

from .config import ServerSettings
from .endpoint import ChatEndpoint, EndpointResponse
from .rate_limit import MemoryCounterStore, RateLimiter
from .upstream import AnthropicUpstream, EchoUpstream, Upstream

CHAT_PATH = "/api/chat"


def build_endpoint(settings: ServerSettings) -> ChatEndpoint:
    """Wire the limiter and the configured upstream.

    Raises:
        ConfigError: If the anthropic upstream has no system prompt.
    """
    upstream: Upstream
    if settings.upstream == "echo":
        upstream = EchoUpstream()
    else:
        upstream = AnthropicUpstream(
            settings.require_system_prompt(),
            model=settings.model,
            max_tokens=settings.max_tokens,
        )
    limiter = RateLimiter(MemoryCounterStore(), settings.rate_limit, settings.rate_window)
    logger.info(
        "Endpoint ready: upstream={} limit={}/{}s", settings.upstream, settings.rate_limit, settings.rate_window
    )
    return ChatEndpoint(limiter, upstream)


class ChatRequestHandler(http.server.BaseHTTPRequestHandler):
    """Serves CHAT_PATH; every other path is a 404."""

    endpoint: ChatEndpoint
    protocol_version = "HTTP/1.1"

    def do_OPTIONS(self) -> None:
        self._dispatch()

    def do_GET(self) -> None:
        self._dispatch()

    def do_POST(self) -> None:
        self._dispatch()

    def do_PUT(self) -> None:
        self._dispatch()

    def do_DELETE(self) -> None:
        self._dispatch()

    def _dispatch(self) -> None:
        if self.path.split("?", 1)[0] != CHAT_PATH:
            self._send(EndpointResponse.json(404, {"error": "Not found"}))
            return
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        headers = dict(self.headers.items())
        if "x-forwarded-for" not in {k.lower() for k in headers}:
            headers.setdefault("X-Real-IP", self.client_address[0])
        asyncio.run(self._respond(headers, body))

    async def _respond(self, headers: dict[str, str], body: bytes) -> None:
        reply = await self.endpoint.handle(self.command, headers, body)
        if reply.stream is None:
            self._send(reply)
            return

        self.send_response(reply.status)
        for name, value in reply.headers.items():
            self.send_header(name, value)
        self.send_header("Transfer-Encoding", "chunked")
        self.end_headers()
        try:
            async for chunk in reply.stream:
                self.wfile.write(f"{len(chunk):x}\r\n".encode("ascii") + chunk + b"\r\n")
                self.wfile.flush()
            self.wfile.write(b"0\r\n\r\n")
        except (BrokenPipeError, ConnectionResetError):
            logger.info("Client went away mid-reply")
            self.close_connection = True

    def _send(self, reply: EndpointResponse) -> None:
        self.send_response(reply.status)
        for name, value in reply.headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(reply.body)))
        self.end_headers()
        self.wfile.write(reply.body)

    def log_message(self, format: str, *args: object) -> None:
        logger.debug("{} - {}", self.address_string(), format % args)


def handler_for(endpoint: ChatEndpoint) -> type[ChatRequestHandler]:
    """A ChatRequestHandler subclass serving the given endpoint."""
    return type("BoundChatRequestHandler", (ChatRequestHandler,), {"endpoint": endpoint})


def serve(settings: ServerSettings) -> None:
    handler = handler_for(build_endpoint(settings))
    with http.server.ThreadingHTTPServer((settings.host, settings.port), handler) as httpd:
        logger.info("Listening on http://{}:{}{}", settings.host, settings.port, CHAT_PATH)
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down")


app = typer.Typer(
    name="prometheus-server",
    help="Serve the PROMETHEUS chat endpoint.",
    add_completion=False,
)


@app.command()
def run(
    host: Optional[str] = None,
    port: Optional[int] = None,
    upstream: Optional[str] = None,
) -> None:
    """Listen for chat requests."""
    try:
        settings = ServerSettings.from_env()
        if host is not None:
            settings = replace(settings, host=host)
        if port is not None:
            settings = replace(settings, port=port)
        if upstream is not None:
            settings = replace(settings, upstream=upstream.lower())
        configure_logging(settings.log_level)
        serve(settings)
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1) from e


def main() -> None:
    app()


if __name__ == "__main__":
    main()
