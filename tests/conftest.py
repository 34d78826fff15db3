"""Pytest configuration and shared fixtures."""
import json
import os
from typing import Any

import pytest

from streamchat.llm import ByteStream, ChatMessage, LLMProvider
from streamchat.store import ChatStore, IdGenerator


async def _iterate(chunks: list[bytes]):
    for chunk in chunks:
        yield chunk


def delta_event(text: str) -> bytes:
    """Encode one text delta the way the Anthropic provider serializes it."""
    event = {
        "type": "content_block_delta",
        "index": 0,
        "delta": {"type": "text_delta", "text": text},
    }
    return (json.dumps(event) + "\n").encode()


def event(payload: dict[str, Any]) -> bytes:
    return (json.dumps(payload) + "\n").encode()


class FakeProvider(LLMProvider):
    """Scripted provider: replays chunks, or raises the configured error."""

    def __init__(self, chunks: list[bytes] | None = None, error: Exception | None = None):
        self.chunks = chunks or []
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self.streams: list[ByteStream] = []
        self.closed = False

    @property
    def model(self) -> str:
        return "fake-model"

    async def open_stream(
        self,
        messages: list[ChatMessage],
        system: str | None = None,
        model: str | None = None,
        max_tokens: int = 4096,
        **kwargs: Any
    ) -> ByteStream:
        self.calls.append({
            "messages": list(messages),
            "system": system,
            "model": model,
            "max_tokens": max_tokens,
            **kwargs,
        })
        if self.error is not None:
            raise self.error
        stream = ByteStream(_iterate(list(self.chunks)))
        self.streams.append(stream)
        return stream

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "anthropic": os.getenv("ANTHROPIC_API_KEY"),
    }


@pytest.fixture
def ids():
    """Deterministic id generator driven by a frozen clock."""
    return IdGenerator(clock=lambda: 1_700_000_000.0)


@pytest.fixture
def store(ids):
    return ChatStore(id_generator=ids)


@pytest.fixture
def hello_provider():
    """Provider that streams 'Hello' in two fragments."""
    return FakeProvider([delta_event("Hel"), delta_event("lo")])


@pytest.fixture
def make_provider():
    """Factory for scripted providers."""
    return FakeProvider


@pytest.fixture
def delta():
    """Encoder for text delta events."""
    return delta_event


@pytest.fixture
def raw_event():
    """Encoder for arbitrary events."""
    return event


@pytest.fixture
def no_api_key(monkeypatch):
    """Clear credentials so config falls back to its defaults."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
