"""
Streamchat: a terminal chat client for streamed LLM responses.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

import logging

__version__ = "0.1.0"

from .chat import AIResponse, ChatSession, StreamConsumer, generate_ai_response, parse_chunk
from .config import ChatConfig
from .store import ChatStore, Conversation, Message, PromptPreset

# Records stay silent until the CLI or TUI attaches a handler
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AIResponse",
    "ChatConfig",
    "ChatSession",
    "ChatStore",
    "Conversation",
    "Message",
    "PromptPreset",
    "StreamConsumer",
    "generate_ai_response",
    "parse_chunk",
]
