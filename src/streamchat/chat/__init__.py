"""Chat flow module.

- errors.py: error taxonomy and structured error payloads
- response.py: AI response function (history in, event stream or error out)
- stream.py: chunk parsing and the stream consumer
- session.py: submit flow tying store, response and consumer together
"""

from .errors import (
    AIResponseError,
    ChatError,
    ErrorPayload,
    MissingAPIKeyError,
    NoValidMessagesError,
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderError,
    RateLimitedError,
    map_provider_error,
)
from .response import AIResponse, filter_messages, generate_ai_response
from .session import ChatSession, SubmitResult, SubmitStatus
from .stream import ChunkKind, ChunkResult, ConsumerState, StreamConsumer, parse_chunk

__all__ = [
    "AIResponse",
    "AIResponseError",
    "ChatError",
    "ChatSession",
    "ChunkKind",
    "ChunkResult",
    "ConsumerState",
    "ErrorPayload",
    "MissingAPIKeyError",
    "NoValidMessagesError",
    "ProviderAuthenticationError",
    "ProviderConnectionError",
    "ProviderError",
    "RateLimitedError",
    "StreamConsumer",
    "SubmitResult",
    "SubmitStatus",
    "filter_messages",
    "generate_ai_response",
    "map_provider_error",
    "parse_chunk",
]
