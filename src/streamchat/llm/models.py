from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ByteStream:
    """Raw byte stream from a streaming LLM response.

    Acts as an async iterator of byte chunks. Each chunk is what the
    provider handed over; consumers decide how to parse it.

    Usage:
        stream = await provider.open_stream(messages, system=prompt)
        async with stream:
            async for chunk in stream:
                ...
    """

    def __init__(
        self,
        async_iter: AsyncIterator[bytes],
        on_close: Callable[[], Awaitable[Any]] | None = None,
    ):
        """Initialize with an async iterator of byte chunks.

        Args:
            async_iter: Async iterator yielding byte chunks
            on_close: Optional coroutine function releasing the underlying connection
        """
        self._iter = async_iter
        self._close_callbacks: list[Callable[[], Awaitable[Any]]] = []
        if on_close is not None:
            self._close_callbacks.append(on_close)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def read(self) -> bytes | None:
        """Read the next chunk, or None at end of stream."""
        try:
            return await self._iter.__anext__()
        except StopAsyncIteration:
            return None

    def add_close_callback(self, callback: Callable[[], Awaitable[Any]]) -> None:
        """Run an extra coroutine function when the stream is closed."""
        self._close_callbacks.append(callback)

    async def aclose(self) -> None:
        """Release the underlying connection. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        aclose = getattr(self._iter, "aclose", None)
        try:
            if aclose is not None:
                await aclose()
        finally:
            for callback in self._close_callbacks:
                await callback()

    def __aiter__(self) -> "ByteStream":
        return self

    async def __anext__(self) -> bytes:
        return await self._iter.__anext__()

    async def __aenter__(self) -> "ByteStream":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()


class ChatMessage(BaseModel):
    """A message in the format sent to the provider."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user' or 'assistant'")
    content: str = Field(description="Content of the message")
