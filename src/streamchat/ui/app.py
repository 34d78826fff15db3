"""Main Textual TUI application.

Orchestrates the UI components and hands user interaction to ChatSession.
The store is the single source of truth: the app subscribes to it and
redraws the sidebar and chat view after every mutation.
"""

import asyncio
import logging
import time

import aiosqlite
from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Button, Footer, Header, ListView, Static

from ..chat import ChatSession, SubmitStatus
from ..config import ChatConfig
from ..llm import LLMProvider, create_llm_provider
from ..store import AppState, ChatStore
from ..store.archive import ConversationArchive, create_conversation_archive
from .callbacks import LogPanelHandler, PendingRenderer
from .config import LogLevel
from .screens import ConfirmationScreen, RenameScreen, SettingsScreen
from .styles import APP_CSS
from .widgets import ChatInputBar, ChatView, ConversationList, LogPanel, MetricsPanel, copy_text

logger = logging.getLogger(__name__)

# Loggers whose records are shown in the log panel
_ROUTED_LOGGERS = ("streamchat", "anthropic")


class StreamchatApp(App):
    """Textual TUI for streamed chat conversations."""

    CSS = APP_CSS
    TITLE = "Streamchat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+n", "new_chat", "New Chat"),
        Binding("ctrl+r", "rename_chat", "Rename"),
        Binding("ctrl+t", "delete_chat", "Delete"),
        Binding("ctrl+s", "open_settings", "Prompts"),
        Binding("ctrl+y", "copy_last_response", "Copy Response"),
        Binding("ctrl+d", "toggle_log", "Log"),
        Binding("escape", "cancel_generation", "Cancel"),
    ]

    def __init__(
        self,
        store: ChatStore | None = None,
        provider: LLMProvider | None = None,
        config: ChatConfig | None = None,
        archive: ConversationArchive | None = None,
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        self._store = store or ChatStore()
        self._config = config or ChatConfig.from_env()
        self._provider = provider
        self._archive = archive
        self._log_level = log_level
        self._session: ChatSession | None = None
        self._log_handler: LogPanelHandler | None = None
        self._unsubscribe = None
        self._current_worker = None
        self._chat_signature: tuple | None = None

    @property
    def store(self) -> ChatStore:
        return self._store

    @property
    def session(self) -> ChatSession | None:
        return self._session

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with Vertical(id="sidebar"):
            yield Button("+ New Chat", id="new-chat", variant="warning")
            yield ConversationList(id="conversation-list")

        with Vertical(id="main"):
            yield Static("", id="banner")
            yield ChatView(id="chat-view")
            yield LogPanel(id="log-panel")
            yield MetricsPanel(model=self._config.model, id="metrics")
            yield ChatInputBar(id="chat-input-bar")

        yield Footer()

    async def on_mount(self) -> None:
        """Wire the session, logging and archive, then draw the initial state."""
        self.theme = "catppuccin-mocha"
        self.sub_title = f"{self._config.model} | {self._config.archive_backend}"

        log_panel = self.query_one("#log-panel", LogPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
        self._log_handler = LogPanelHandler(log_panel, app=self)
        for name in _ROUTED_LOGGERS:
            routed = logging.getLogger(name)
            routed.addHandler(self._log_handler)
            routed.setLevel(logging.DEBUG)

        chat_view = self.query_one("#chat-view", ChatView)
        self._session = ChatSession(
            self._store,
            provider=self._provider,
            config=self._config,
            on_pending=PendingRenderer(chat_view),
        )
        self._unsubscribe = self._store.subscribe(self._on_state_change)

        if self._archive is not None:
            await self._archive.connect()
            conversations = await self._archive.load_conversations()
            self._store.replace_conversations(conversations)
            logger.info("Loaded %d conversation(s) from %s archive", len(conversations), self._archive.backend_type)

        await self._render_state()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    async def on_unmount(self) -> None:
        """Detach from the store and loggers; close the archive."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._log_handler is not None:
            for name in _ROUTED_LOGGERS:
                logging.getLogger(name).removeHandler(self._log_handler)
            self._log_handler = None
        if self._archive is not None:
            await self._archive.disconnect()

    # ------------------------------------------------------------------
    # Store -> UI
    # ------------------------------------------------------------------

    def _on_state_change(self, state: AppState) -> None:
        self.call_later(self._render_state)

    async def _render_state(self) -> None:
        state = self._store.state

        sidebar = self.query_one("#conversation-list", ConversationList)
        await sidebar.show_conversations(state.conversations, state.current_conversation_id)

        chat_view = self.query_one("#chat-view", ChatView)
        current = self._store.get_current_conversation()
        signature = (
            (current.id, current.title, len(current.messages)) if current else None
        )
        if signature != self._chat_signature:
            self._chat_signature = signature
            await chat_view.show_conversation(current)

        chat_view.set_thinking(state.is_loading)
        self.query_one("#chat-input-bar", ChatInputBar).set_busy(state.is_loading)
        self.query_one("#metrics", MetricsPanel).update_metrics(
            messages=len(current.messages) if current else 0
        )
        self._update_banner()

    def _update_banner(self) -> None:
        banner = self.query_one("#banner", Static)
        error = self._session.error if self._session else None
        banner.update(error or "")
        banner.set_class(bool(error), "-visible")

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        if self._store.is_loading:
            self.notify("Wait for the current response to finish", severity="warning", timeout=2)
            return
        self._current_worker = self._run_submit(event.value)

    @work(exclusive=True, group="submit")
    async def _run_submit(self, text: str) -> None:
        """Run one submission as a background async worker."""
        started = time.monotonic()
        try:
            result = await self._session.submit(text)
        except asyncio.CancelledError:
            self.notify("Cancelled", severity="warning", timeout=2)
            raise

        usage = self._session.last_usage
        self.query_one("#metrics", MetricsPanel).update_metrics(
            time=time.monotonic() - started,
            input_tokens=usage.get("input_tokens", 0),
            output_tokens=usage.get("output_tokens", 0),
        )
        self._update_banner()

        if result.status is SubmitStatus.FAILED:
            self.notify(f"Error: {(result.error or '')[:60]}", severity="error", timeout=5)
        await self._save_archive()

    async def _save_archive(self) -> None:
        if self._archive is None:
            return
        try:
            await self._archive.sync(self._store.list_conversations())
        except aiosqlite.Error as e:
            logger.error("Failed to save conversations: %s", e)
            self.notify("Could not save conversations", severity="error", timeout=3)

    def _schedule_save(self) -> None:
        if self._archive is not None:
            self.run_worker(self._save_archive(), group="archive")

    # ------------------------------------------------------------------
    # Conversation actions
    # ------------------------------------------------------------------

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "new-chat":
            self.action_new_chat()

    @on(ListView.Selected, "#conversation-list")
    def _conversation_selected(self, event: ListView.Selected) -> None:
        if event.item is not None and event.item.name:
            self._session.select_chat(event.item.name)
            self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def action_new_chat(self) -> None:
        self._session.new_chat()
        self._schedule_save()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def action_rename_chat(self) -> None:
        current = self._store.get_current_conversation()
        if current is None:
            self.notify("No chat selected", severity="warning", timeout=2)
            return

        def _apply(title: str | None) -> None:
            if title and self._store.get_conversation(current.id) is not None:
                self._session.rename_chat(current.id, title)
                self._schedule_save()

        self.push_screen(RenameScreen(current.title), _apply)

    def action_delete_chat(self) -> None:
        current = self._store.get_current_conversation()
        if current is None:
            self.notify("No chat selected", severity="warning", timeout=2)
            return

        def _apply(confirmed: bool | None) -> None:
            if confirmed:
                self._session.delete_chat(current.id)
                self._schedule_save()
                self.notify("Chat deleted", timeout=2)

        self.push_screen(ConfirmationScreen(f"Delete '{current.title}'?"), _apply)

    def action_open_settings(self) -> None:
        self.push_screen(SettingsScreen(self._store))

    def action_toggle_log(self) -> None:
        log_panel = self.query_one("#log-panel", LogPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        current = self._store.get_current_conversation()
        responses = [m.content for m in (current.messages if current else []) if m.role == "assistant"]
        if responses:
            copy_text(self.query_one("#chat-view", ChatView), responses[-1], "Response")
        else:
            self.notify("No response to copy", severity="warning", timeout=2)

    def action_cancel_generation(self) -> None:
        if self._current_worker is not None and self._current_worker.is_running:
            self._current_worker.cancel()


def build_archive(config: ChatConfig) -> ConversationArchive:
    """Create the conversation archive selected by the config."""
    if config.archive_backend == "sqlite":
        return create_conversation_archive("sqlite", path=config.archive_path)
    return create_conversation_archive(config.archive_backend)


async def run_streamchat_tui(
    config: ChatConfig,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    A missing API key does not stop the app from starting; each submission
    then reports the missing-credential error in the chat.

    Args:
        config: Client configuration
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    provider = None
    if config.api_key:
        provider = create_llm_provider(
            "anthropic",
            api_key=config.api_key,
            model=config.model,
            timeout=config.timeout,
        )

    app = StreamchatApp(
        provider=provider,
        config=config,
        archive=build_archive(config),
        log_level=log_level,
    )
    try:
        await app.run_async()
    finally:
        if provider is not None:
            await provider.close()
