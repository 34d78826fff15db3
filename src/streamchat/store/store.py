"""Injectable chat state container.

Holds conversations, prompt presets, the current-conversation pointer and
the loading flag. The store is an ordinary object owned by whoever creates
it (the session, the TUI, a test) and passed by reference; there is no
process-wide instance.

Mutations happen on a single execution context (the app's event loop),
so no locking is done and concurrent title edits are last-writer-wins.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from .ids import IdGenerator, default_id_generator
from .models import AppState, Conversation, Message, PromptPreset

logger = logging.getLogger(__name__)

StateListener = Callable[[AppState], None]


class ConversationNotFoundError(KeyError):
    """Raised when an action targets a conversation id the store does not hold."""

    def __init__(self, conversation_id: str) -> None:
        super().__init__(conversation_id)
        self.conversation_id = conversation_id

    def __str__(self) -> str:
        return f"Conversation not found: {self.conversation_id}"


class ChatStore:
    """Conversation and prompt store with actions, selectors and subscriptions.

    Usage:
        store = ChatStore()
        unsubscribe = store.subscribe(lambda state: print(state.is_loading))
        store.add_conversation(Conversation(id="1", title="Hello"))
        store.add_message("1", Message(id="2", role="user", content="hi"))
    """

    def __init__(
        self,
        state: AppState | None = None,
        id_generator: IdGenerator | None = None,
    ) -> None:
        self._state = state or AppState()
        self._ids = id_generator or default_id_generator
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    @property
    def state(self) -> AppState:
        """A deep copy of the current state."""
        return self._state.model_copy(deep=True)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called after every mutation.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.state
        for listener in list(self._listeners):
            listener(snapshot)

    # ------------------------------------------------------------------
    # Conversation actions
    # ------------------------------------------------------------------

    def set_current_conversation(self, conversation_id: str | None) -> None:
        """Select a conversation, or clear the selection with None."""
        if conversation_id is not None:
            self._require(conversation_id)
        self._state.current_conversation_id = conversation_id
        self._notify()

    def add_conversation(self, conversation: Conversation) -> None:
        """Insert a conversation and make it current."""
        self._state.conversations.append(conversation)
        self._state.current_conversation_id = conversation.id
        logger.debug("Added conversation %s (%r)", conversation.id, conversation.title)
        self._notify()

    def update_conversation_id(self, old_id: str, new_id: str) -> None:
        """Re-key a conversation, following the current pointer if needed."""
        conversation = self._require(old_id)
        conversation.id = new_id
        if self._state.current_conversation_id == old_id:
            self._state.current_conversation_id = new_id
        self._notify()

    def update_conversation_title(self, conversation_id: str, title: str) -> None:
        """Rename a conversation in place."""
        conversation = self._require(conversation_id)
        conversation.title = title
        conversation.updated_at = datetime.utcnow()
        self._notify()

    def delete_conversation(self, conversation_id: str) -> None:
        """Remove a conversation; clear the pointer if it was current."""
        self._state.conversations = [
            c for c in self._state.conversations if c.id != conversation_id
        ]
        if self._state.current_conversation_id == conversation_id:
            self._state.current_conversation_id = None
        logger.debug("Deleted conversation %s", conversation_id)
        self._notify()

    def add_message(self, conversation_id: str, message: Message) -> None:
        """Append a message to a conversation.

        Raises:
            ConversationNotFoundError: If the conversation does not exist
        """
        conversation = self._require(conversation_id)
        conversation.messages.append(message)
        conversation.updated_at = datetime.utcnow()
        self._notify()

    def set_loading(self, is_loading: bool) -> None:
        self._state.is_loading = is_loading
        self._notify()

    def replace_conversations(self, conversations: list[Conversation]) -> None:
        """Load conversations wholesale (e.g. from an archive)."""
        self._state.conversations = list(conversations)
        ids = {c.id for c in conversations}
        if self._state.current_conversation_id not in ids:
            self._state.current_conversation_id = None
        self._notify()

    # ------------------------------------------------------------------
    # Prompt actions
    # ------------------------------------------------------------------

    def create_prompt(self, name: str, content: str) -> PromptPreset:
        """Create an inactive prompt preset."""
        prompt = PromptPreset(id=self._ids(), name=name, content=content)
        self._state.prompts.append(prompt)
        self._notify()
        return prompt

    def delete_prompt(self, prompt_id: str) -> None:
        self._state.prompts = [p for p in self._state.prompts if p.id != prompt_id]
        self._notify()

    def set_prompt_active(self, prompt_id: str, active: bool) -> None:
        """Activate or deactivate a preset.

        At most one preset is active: every other preset is deactivated.
        """
        for prompt in self._state.prompts:
            prompt.is_active = active if prompt.id == prompt_id else False
        self._notify()

    # ------------------------------------------------------------------
    # Selectors
    # ------------------------------------------------------------------

    @property
    def current_conversation_id(self) -> str | None:
        return self._state.current_conversation_id

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    def get_conversation(self, conversation_id: str) -> Conversation | None:
        for conversation in self._state.conversations:
            if conversation.id == conversation_id:
                return conversation.model_copy(deep=True)
        return None

    def get_current_conversation(self) -> Conversation | None:
        if self._state.current_conversation_id is None:
            return None
        return self.get_conversation(self._state.current_conversation_id)

    def get_active_prompt(self) -> PromptPreset | None:
        for prompt in self._state.prompts:
            if prompt.is_active:
                return prompt.model_copy()
        return None

    def list_conversations(self) -> list[Conversation]:
        return [c.model_copy(deep=True) for c in self._state.conversations]

    def list_prompts(self) -> list[PromptPreset]:
        return [p.model_copy() for p in self._state.prompts]

    def _require(self, conversation_id: str) -> Conversation:
        for conversation in self._state.conversations:
            if conversation.id == conversation_id:
                return conversation
        raise ConversationNotFoundError(conversation_id)
