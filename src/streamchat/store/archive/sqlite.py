"""SQLite conversation archive.

Provides persistent conversation storage using a SQLite database file.
Uses aiosqlite for async access.
"""

from datetime import datetime
from pathlib import Path

import aiosqlite

from ..models import Conversation, Message
from .base import ConversationArchive


class SQLiteConversationArchive(ConversationArchive):
    """SQLite-backed conversation archive.

    Conversations and messages live in two tables; message order is kept
    by an explicit position column.
    """

    def __init__(self, path: str | Path = "./streamchat.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database and create the schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._create_schema()

    async def _create_schema(self) -> None:
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS conversations (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                conversation_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                id TEXT NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                PRIMARY KEY (conversation_id, position),
                FOREIGN KEY (conversation_id) REFERENCES conversations(id) ON DELETE CASCADE
            )
        """)

        await self._connection.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("Archive is not connected. Call connect() first.")
        return self._connection

    async def load_conversations(self) -> list[Conversation]:
        conn = self._require_connection()

        async with conn.execute(
            "SELECT id, title, created_at, updated_at FROM conversations ORDER BY created_at, id"
        ) as cursor:
            rows = await cursor.fetchall()

        conversations = []
        for conversation_id, title, created_at, updated_at in rows:
            async with conn.execute(
                """
                SELECT id, role, content
                FROM messages
                WHERE conversation_id = ?
                ORDER BY position ASC
                """,
                (conversation_id,)
            ) as cursor:
                message_rows = await cursor.fetchall()

            conversations.append(Conversation(
                id=conversation_id,
                title=title,
                messages=[
                    Message(id=mid, role=role, content=content)
                    for mid, role, content in message_rows
                ],
                created_at=datetime.fromisoformat(created_at),
                updated_at=datetime.fromisoformat(updated_at),
            ))

        return conversations

    async def save_conversation(self, conversation: Conversation) -> None:
        conn = self._require_connection()

        await conn.execute("""
            INSERT INTO conversations (id, title, created_at, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                title = excluded.title,
                updated_at = excluded.updated_at
        """, (
            conversation.id,
            conversation.title,
            conversation.created_at.isoformat(),
            conversation.updated_at.isoformat(),
        ))

        await conn.execute(
            "DELETE FROM messages WHERE conversation_id = ?",
            (conversation.id,)
        )
        await conn.executemany("""
            INSERT INTO messages (conversation_id, position, id, role, content)
            VALUES (?, ?, ?, ?, ?)
        """, [
            (conversation.id, position, m.id, m.role, m.content)
            for position, m in enumerate(conversation.messages)
        ])

        await conn.commit()

    async def delete_conversation(self, conversation_id: str) -> None:
        conn = self._require_connection()
        await conn.execute("DELETE FROM conversations WHERE id = ?", (conversation_id,))
        await conn.commit()

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
