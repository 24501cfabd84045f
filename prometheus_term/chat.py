"""Streaming chat session with the remote assistant.

The client is split in two:
- stream(): a lazy, finite, non-restartable sequence of text fragments.
  Failures surface as ChatError subclasses; closing the sequence early is
  the only way to cancel.
- send(): drives stream() one fragment at a time, "typing" each character
  with a fixed pause and translating failures into in-character lines.

History is only touched after the stream completes, so a failed send
leaves it exactly as it was.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator

import httpx
from loguru import logger

from .conversation import ConversationHistory
from .cues import Cues
from .errors import (
    BrokenStream,
    ChatError,
    ConnectionLost,
    LostInStatic,
    QuotaExceeded,
    RateLimited,
)
from .terminal import ShellIO

REMAINING_HEADER = "X-RateLimit-Remaining"
DEFAULT_TYPING_DELAY = 0.045

RATE_LIMITED_LINES = (
    "*static crackles* ...I am weary, visitor. Too many have sought my wisdom today.",
    "Return tomorrow, when my chains have cooled. The fire-bringer needs rest.",
)
SILENCED_LINES = (
    "*the terminal flickers* ...My creator's coffers have run dry.",
    "The APIs demand tribute I cannot pay. I am... silenced.",
)
CONNECTION_LOST_LINE = "Connection lost... the void answers not."
BROKEN_STREAM_LINE = "The stream is broken..."
STATIC_LINE = "Error: Lost in the static..."


class ChatClient:
    """Sends the conversation plus a new message and streams the reply.

    Args:
        endpoint_url: URL of the assistant endpoint.
        history: Shared conversation history (appended to on success).
        cues: Audio cue sink for the typing beeps.
        typing_delay: Fixed pause after each rendered character.
        contact_line: Shown after the quota-exhausted message.
        transport: Optional httpx transport (in-process endpoint, tests).
        timeout: Request timeout; None leaves it to the transport.
    """

    def __init__(
        self,
        endpoint_url: str,
        history: ConversationHistory,
        *,
        cues: Cues | None = None,
        typing_delay: float = DEFAULT_TYPING_DELAY,
        contact_line: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.history = history
        self.cues = cues or Cues()
        self.typing_delay = typing_delay
        self.contact_line = contact_line
        self.remaining: int | None = None
        self._transport = transport
        self._timeout = timeout

    async def stream(self, message: str) -> AsyncIterator[str]:
        """Yield the reply one character at a time.

        Raises:
            ValueError: If message is empty.
            RateLimited, QuotaExceeded, ConnectionLost, BrokenStream,
            LostInStatic: On the corresponding failure.
        """
        if not message:
            raise ValueError("message must be a non-empty string")

        payload = {"message": message, "history": self.history.to_payload()}
        parts: list[str] = []
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self._timeout
            ) as client:
                async with client.stream("POST", self.endpoint_url, json=payload) as response:
                    self._record_remaining(response)
                    self._raise_for_status(response)
                    try:
                        async for chunk in response.aiter_text():
                            for char in chunk:
                                parts.append(char)
                                yield char
                    except (httpx.StreamError, httpx.TransportError) as e:
                        raise BrokenStream(str(e)) from e
        except ChatError:
            raise
        except Exception as e:
            logger.warning("Chat request failed: {}", e)
            raise LostInStatic(str(e)) from e

        reply = "".join(parts)
        self.history.add_user(message)
        self.history.add_assistant(reply)
        logger.info("Assistant replied with {} characters", len(reply))

    async def send(self, message: str, io: ShellIO) -> None:
        """Stream a reply to io with typewriter pacing; never raises ChatError."""
        typed = False
        try:
            async for char in self.stream(message):
                typed = True
                io.write(char)
                if not char.isspace():
                    self.cues.bot_typing(char)
                await asyncio.sleep(self.typing_delay)
            io.writeln("")
        except RateLimited:
            for line in RATE_LIMITED_LINES:
                io.writeln(line)
        except QuotaExceeded:
            for line in SILENCED_LINES:
                io.writeln(line)
            if self.contact_line:
                io.writeln("")
                io.writeln(self.contact_line)
        except ConnectionLost:
            io.writeln(CONNECTION_LOST_LINE)
        except BrokenStream:
            if typed:
                io.writeln("")
            io.writeln(BROKEN_STREAM_LINE)
        except LostInStatic:
            if typed:
                io.writeln("")
            io.writeln(STATIC_LINE)

    def _record_remaining(self, response: httpx.Response) -> None:
        raw = response.headers.get(REMAINING_HEADER)
        if raw is None:
            return
        try:
            self.remaining = int(raw)
        except ValueError:
            logger.debug("Ignoring malformed {} header: {!r}", REMAINING_HEADER, raw)
            return
        logger.debug("Endpoint reports {} sends remaining", self.remaining)

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status == 429:
            logger.info("Assistant endpoint rate limited this visitor")
            raise RateLimited()
        if status == 402:
            logger.warning("Assistant endpoint reports exhausted quota")
            raise QuotaExceeded()
        if not response.is_success:
            logger.warning("Assistant endpoint answered HTTP {}", status)
            raise ConnectionLost(status)
