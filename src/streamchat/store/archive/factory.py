"""Factory for creating conversation archive backends."""

from typing import Any

from .base import ConversationArchive


def create_conversation_archive(
    backend: str = "memory",
    **kwargs: Any
) -> ConversationArchive:
    """Create a conversation archive backend.

    Args:
        backend: Backend type ("memory" or "sqlite")
        **kwargs: Backend-specific configuration
            For sqlite:
                - path: str | Path (default: ./streamchat.db)

    Returns:
        ConversationArchive instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemoryConversationArchive
        return InMemoryConversationArchive(**kwargs)

    elif backend == "sqlite":
        from .sqlite import SQLiteConversationArchive
        return SQLiteConversationArchive(**kwargs)

    raise ValueError(
        f"Unsupported archive backend: {backend}. "
        f"Supported backends: memory, sqlite"
    )
