"""Chat state module.

Holds conversations, messages and system-prompt presets in an
explicitly owned container.
"""

from .ids import IdGenerator
from .models import AppState, Conversation, Message, PendingMessage, PromptPreset
from .store import ChatStore, ConversationNotFoundError

__all__ = [
    "AppState",
    "ChatStore",
    "Conversation",
    "ConversationNotFoundError",
    "IdGenerator",
    "Message",
    "PendingMessage",
    "PromptPreset",
]
