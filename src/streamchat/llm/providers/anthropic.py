"""Anthropic Claude LLM provider implementation.

Uses the official Anthropic Python SDK for async streaming completions.
Reference: https://github.com/anthropics/anthropic-sdk-python
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

from anthropic import AsyncAnthropic
from anthropic.types import RawMessageStreamEvent

from ..base import LLMProvider
from ..models import ByteStream, ChatMessage

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-3-5-sonnet-20241022"


class AnthropicProvider(LLMProvider):
    """Anthropic Claude LLM provider implementation.

    Hidden design decisions:
    - Anthropic API client initialization and timeout
    - Message format conversion (system prompt is a request field)
    - Event serialization (one JSON line per raw stream event)
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str | None = None,
        timeout: float = 30.0,
        **client_kwargs: Any
    ):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            model: Default model to use
            base_url: Optional custom API base URL
            timeout: Request timeout in seconds
            **client_kwargs: Additional kwargs for AsyncAnthropic client
        """
        self._model = model
        self._client = AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        return self._model

    async def open_stream(
        self,
        messages: list[ChatMessage],
        system: str | None = None,
        model: str | None = None,
        max_tokens: int = 4096,
        **kwargs: Any
    ) -> ByteStream:
        """Start a streaming completion using Anthropic Claude.

        Args:
            messages: Conversation history (user/assistant turns only)
            system: System prompt
            model: Model to use (overrides default)
            max_tokens: Maximum tokens to generate
            **kwargs: Additional Anthropic-specific parameters

        Returns:
            ByteStream of newline-terminated JSON events
        """
        request_params: dict[str, Any] = {
            "model": model or self._model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "max_tokens": max_tokens,
            "stream": True,
            **kwargs
        }
        if system:
            request_params["system"] = system

        logger.debug(
            "Opening stream: model=%s messages=%d max_tokens=%d",
            request_params["model"], len(messages), max_tokens,
        )
        stream = await self._client.messages.create(**request_params)
        return ByteStream(self._serialize(stream), on_close=stream.close)

    @staticmethod
    async def _serialize(events: AsyncIterator[RawMessageStreamEvent]) -> AsyncIterator[bytes]:
        """Encode each raw event as one JSON line."""
        async for event in events:
            yield (event.model_dump_json() + "\n").encode("utf-8")

    async def close(self) -> None:
        """Close the Anthropic client."""
        await self._client.close()
