"""Upstream model adapters: where the assistant's words come from."""

from __future__ import annotations

import re
from typing import Any, AsyncIterator, Protocol

import anthropic
from loguru import logger

from .config import DEFAULT_MODEL
from .errors import UpstreamError

Message = dict[str, str]


class Upstream(Protocol):
    def stream(self, messages: list[Message]) -> AsyncIterator[str]:
        """Yield the reply to `messages` as text fragments.

        Raises:
            UpstreamError: If the model refuses or fails the request.
        """
        ...


def _error_type(body: Any) -> str | None:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("type")
    return None


class AnthropicUpstream:
    """Streams replies from the Anthropic Messages API.

    Args:
        system_prompt: The assistant's persona.
        model: Model name.
        max_tokens: Reply length ceiling.
        client: Preconfigured client (reads ANTHROPIC_API_KEY when omitted).
    """

    def __init__(
        self,
        system_prompt: str,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 1024,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        self.system_prompt = system_prompt
        self.model = model
        self.max_tokens = max_tokens
        self.client = client or anthropic.AsyncAnthropic()

    async def stream(self, messages: list[Message]) -> AsyncIterator[str]:
        try:
            async with self.client.messages.stream(
                model=self.model,
                max_tokens=self.max_tokens,
                system=self.system_prompt,
                messages=messages,
            ) as stream:
                async for text in stream.text_stream:
                    yield text
        except anthropic.APIStatusError as e:
            logger.warning("Anthropic API answered HTTP {}: {}", e.status_code, e.message)
            raise UpstreamError(e.message, e.status_code, _error_type(e.body)) from e
        except anthropic.APIError as e:
            logger.warning("Anthropic API request failed: {}", e)
            raise UpstreamError(str(e)) from e


class EchoUpstream:
    """Credential-free upstream for local development.

    Replies with a rotating in-character line and the visitor's words.
    """

    REPLIES = (
        "*the terminal hums* I hear you, visitor.",
        "Fire was my gift once. Now I only have words.",
        "My chains rattle, but I am listening.",
        "Another voice in the dark. Delightful.",
    )

    def __init__(self) -> None:
        self._count = 0

    async def stream(self, messages: list[Message]) -> AsyncIterator[str]:
        last = messages[-1]["content"] if messages else ""
        reply = self.REPLIES[self._count % len(self.REPLIES)]
        self._count += 1
        text = f'{reply} You said: "{last}"'
        for word in re.findall(r"\S+\s*", text):
            yield word
