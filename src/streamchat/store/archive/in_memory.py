"""In-memory conversation archive.

Simple dict-based storage. Data is lost when the application exits.
"""

from ..models import Conversation
from .base import ConversationArchive


class InMemoryConversationArchive(ConversationArchive):
    """Session-only archive, suitable for tests and throwaway runs."""

    def __init__(self) -> None:
        self._conversations: dict[str, Conversation] = {}

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def load_conversations(self) -> list[Conversation]:
        return [c.model_copy(deep=True) for c in self._conversations.values()]

    async def save_conversation(self, conversation: Conversation) -> None:
        self._conversations[conversation.id] = conversation.model_copy(deep=True)

    async def delete_conversation(self, conversation_id: str) -> None:
        self._conversations.pop(conversation_id, None)

    @property
    def backend_type(self) -> str:
        return "memory"
