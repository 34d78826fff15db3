from .base import LLMProvider
from .factory import create_llm_provider
from .models import ByteStream, ChatMessage
from .providers import AnthropicProvider

__all__ = [
    "AnthropicProvider",
    "ByteStream",
    "ChatMessage",
    "LLMProvider",
    "create_llm_provider",
]
