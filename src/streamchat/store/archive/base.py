"""Abstract base class for conversation archive backends.

This module defines the interface for conversation persistence.
The abstraction hides:
- Storage format (rows, JSON, etc.)
- Persistence mechanism (file, database, in-memory)
- Connection management
"""

from abc import ABC, abstractmethod

from ..models import Conversation


class ConversationArchive(ABC):
    """Abstract conversation archive.

    The store stays the source of truth while the app runs; the archive
    only snapshots conversations in and out of it.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the archive backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the archive backend gracefully."""

    @abstractmethod
    async def load_conversations(self) -> list[Conversation]:
        """Return all archived conversations, oldest first."""

    @abstractmethod
    async def save_conversation(self, conversation: Conversation) -> None:
        """Insert or replace one conversation and its messages."""

    @abstractmethod
    async def delete_conversation(self, conversation_id: str) -> None:
        """Remove a conversation. Unknown ids are ignored."""

    async def sync(self, conversations: list[Conversation]) -> None:
        """Make the archive hold exactly the given conversations."""
        keep = {c.id for c in conversations}
        for archived in await self.load_conversations():
            if archived.id not in keep:
                await self.delete_conversation(archived.id)
        for conversation in conversations:
            await self.save_conversation(conversation)

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "ConversationArchive":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()
