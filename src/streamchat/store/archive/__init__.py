"""Conversation archive backends.

Saves and restores conversations between runs of the client.
"""

from .base import ConversationArchive
from .factory import create_conversation_archive

__all__ = [
    "ConversationArchive",
    "create_conversation_archive",
]
