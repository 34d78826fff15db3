"""Data models for the chat store.

These models define conversations, messages and prompt presets,
independent of how the state is held or archived.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant"]


class Message(BaseModel):
    """A committed chat message. Immutable once stored."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique, monotonically assigned identifier")
    role: Role = Field(description="Role of the message sender: 'user' or 'assistant'")
    content: str = Field(description="Content of the message")


class PendingMessage(BaseModel):
    """An assistant message that is still being streamed.

    Content grows with every delta until the stream ends and the
    message is either frozen into a Message or discarded.
    """

    id: str
    role: Role = "assistant"
    content: str = ""

    def append(self, fragment: str) -> None:
        """Append a text fragment to the content."""
        self.content += fragment

    def freeze(self) -> Message:
        """Return the finalized, immutable message."""
        return Message(id=self.id, role=self.role, content=self.content)


class Conversation(BaseModel):
    """A conversation and its ordered messages."""

    id: str
    title: str
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class PromptPreset(BaseModel):
    """A system-prompt preset from the settings dialog."""

    id: str
    name: str
    content: str
    is_active: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)


class AppState(BaseModel):
    """Complete application state held by the store."""

    current_conversation_id: str | None = None
    is_loading: bool = False
    conversations: list[Conversation] = Field(default_factory=list)
    prompts: list[PromptPreset] = Field(default_factory=list)
