"""Submit flow for the chat client.

Joins the store, the AI response function and the stream consumer:
append the user message, request a response, stream it into a pending
message and commit the result, or record an error.

Failure policy: the inline error message goes to the conversation that
was current when the submission started; with no such conversation the
error text becomes the banner instead.
"""

import logging
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel

from ..config import ChatConfig
from ..llm import LLMProvider
from ..prompts import SystemPromptOverride
from ..store import ChatStore, Conversation, IdGenerator, Message, PendingMessage
from ..store.ids import default_id_generator
from .errors import INLINE_ERROR_MESSAGE, AIResponseError, ChatError
from .response import generate_ai_response
from .stream import StreamConsumer

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 30
NEW_CHAT_TITLE = "New Chat"

PendingListener = Callable[[PendingMessage | None], None]


class SubmitStatus(str, Enum):
    SKIPPED = "skipped"      # Blank input or a request already in flight
    COMPLETED = "completed"  # Stream consumed (message may still be None if empty)
    FAILED = "failed"        # Error recorded inline or as the banner


class SubmitResult(BaseModel):
    """Outcome of one submission."""

    status: SubmitStatus
    conversation_id: str | None = None
    message: Message | None = None
    error: str | None = None


class ChatSession:
    """Drives submissions against an injected store.

    Usage:
        session = ChatSession(store, provider=provider)
        result = await session.submit("Hello")
    """

    def __init__(
        self,
        store: ChatStore,
        provider: LLMProvider | None = None,
        config: ChatConfig | None = None,
        on_pending: PendingListener | None = None,
        id_generator: IdGenerator | None = None,
    ) -> None:
        self.store = store
        self._provider = provider
        self._config = config
        self._on_pending = on_pending
        self._ids = id_generator or default_id_generator
        self._error: str | None = None
        self._pending: PendingMessage | None = None
        self._last_usage: dict[str, int] = {}

    @property
    def error(self) -> str | None:
        """Banner text for failures that had no conversation to land in."""
        return self._error

    @property
    def pending(self) -> PendingMessage | None:
        """The assistant message currently streaming, if any."""
        return self._pending

    @property
    def last_usage(self) -> dict[str, int]:
        return dict(self._last_usage)

    def _publish(self, pending: PendingMessage | None) -> None:
        self._pending = pending
        if self._on_pending is not None:
            self._on_pending(pending)

    def _active_prompt_override(self) -> SystemPromptOverride | None:
        prompt = self.store.get_active_prompt()
        if prompt is None:
            return None
        return SystemPromptOverride(value=prompt.content, enabled=True)

    async def submit(self, text: str) -> SubmitResult:
        """Send user input and stream the assistant's reply into the store."""
        if not text.strip() or self.store.is_loading:
            return SubmitResult(status=SubmitStatus.SKIPPED)

        current_input = text.strip()
        initial_conversation_id = self.store.current_conversation_id
        conversation_id = initial_conversation_id

        self.store.set_loading(True)
        self._error = None

        try:
            if conversation_id is None:
                conversation_id = self._ids()
                self.store.add_conversation(
                    Conversation(id=conversation_id, title=current_input[:TITLE_MAX_LENGTH])
                )

            conversation = self.store.get_conversation(conversation_id)
            history = conversation.messages if conversation else []

            user_message = Message(id=self._ids(), role="user", content=current_input)
            self.store.add_message(conversation_id, user_message)

            response = await generate_ai_response(
                [*history, user_message],
                self._active_prompt_override(),
                provider=self._provider,
                config=self._config,
            )
            response.raise_for_status()

            consumer = StreamConsumer(
                self.store,
                conversation_id,
                on_update=self._publish,
                id_generator=self._ids,
            )
            message = await consumer.consume(response.stream)
            self._last_usage = consumer.usage
            return SubmitResult(
                status=SubmitStatus.COMPLETED,
                conversation_id=conversation_id,
                message=message,
            )

        except Exception as e:
            if isinstance(e, (ChatError, AIResponseError)):
                logger.warning("Submission failed: %s", e)
            else:
                logger.exception("Submission failed")
            error_text = getattr(e, "message", None) or str(e) or "An unknown error occurred."

            if (
                initial_conversation_id is not None
                and self.store.get_conversation(initial_conversation_id) is not None
            ):
                self.store.add_message(
                    initial_conversation_id,
                    Message(id=self._ids(), role="assistant", content=INLINE_ERROR_MESSAGE),
                )
            else:
                self._error = error_text

            return SubmitResult(
                status=SubmitStatus.FAILED,
                conversation_id=conversation_id,
                error=error_text,
            )

        finally:
            self._publish(None)
            self.store.set_loading(False)

    def new_chat(self) -> Conversation:
        """Create an empty conversation and make it current."""
        conversation = Conversation(id=self._ids(), title=NEW_CHAT_TITLE)
        self.store.add_conversation(conversation)
        return conversation

    def select_chat(self, conversation_id: str | None) -> None:
        self.store.set_current_conversation(conversation_id)

    def delete_chat(self, conversation_id: str) -> None:
        self.store.delete_conversation(conversation_id)

    def rename_chat(self, conversation_id: str, title: str) -> None:
        self.store.update_conversation_title(conversation_id, title)
