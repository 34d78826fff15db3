from abc import ABC, abstractmethod
from typing import Any

from .models import ByteStream, ChatMessage


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    This module hides the design decision of which LLM provider to use.
    Implementations must handle provider-specific details like:
    - API client setup and authentication
    - Request format conversion
    - Serializing streamed events as newline-delimited JSON

    Supports async context manager protocol for proper resource cleanup:
        async with provider:
            stream = await provider.open_stream(messages, system=prompt)
        # Automatically cleaned up
    """

    @property
    @abstractmethod
    def model(self) -> str:
        """Get the default model name."""

    @abstractmethod
    async def open_stream(
        self,
        messages: list[ChatMessage],
        system: str | None = None,
        model: str | None = None,
        max_tokens: int = 4096,
        **kwargs: Any
    ) -> ByteStream:
        """Start a streaming completion.

        The request is issued before this returns, so request-level
        failures (authentication, rate limiting, connection) are raised
        here rather than mid-stream.

        Args:
            messages: Conversation history
            system: System prompt
            model: Model to use (None uses provider's default)
            max_tokens: Maximum tokens to generate
            **kwargs: Provider-specific parameters

        Returns:
            ByteStream yielding one JSON-encoded event per chunk

        Raises:
            Exception: Provider-specific errors
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "LLMProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
