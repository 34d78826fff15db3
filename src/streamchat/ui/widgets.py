"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Conversation sidebar rendering
- Chat message and pending message rendering
- Input history management
- Metrics display formatting
- Log rendering and level filtering
"""

from datetime import datetime

import pyperclip
from rich.markdown import Markdown as RichMarkdown
from rich.markup import escape
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message as TextualMessage
from textual.widgets import Button, Label, ListItem, ListView, Markdown, RichLog, Static, TextArea

from ..store import Conversation, Message
from .config import (
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    SIDEBAR_TITLE_MAX_LENGTH,
    WELCOME_TEXT,
    LogLevel,
)


def copy_text(widget, text: str, label: str) -> None:
    """Copy text to the system clipboard, falling back to OSC 52."""
    try:
        pyperclip.copy(text)
        widget.app.notify(f"{label} copied", timeout=2)
    except pyperclip.PyperclipException:
        widget.app.copy_to_clipboard(text)
        widget.app.notify(f"{label} copied (terminal)", timeout=2)


class ClickableMessage(Vertical):
    """A chat message container that copies its raw content when clicked."""

    def __init__(self, content: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._content = content

    def on_click(self, event: Click) -> None:
        event.stop()
        copy_text(self, self._content, "Message")


class ConversationList(ListView):
    """Sidebar listing conversations; the current one is highlighted."""

    BORDER_TITLE = "Chats"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._signature: tuple | None = None

    @staticmethod
    def _truncate(title: str) -> str:
        if len(title) > SIDEBAR_TITLE_MAX_LENGTH:
            return title[:SIDEBAR_TITLE_MAX_LENGTH - 1] + "…"
        return title or "Untitled"

    async def show_conversations(
        self,
        conversations: list[Conversation],
        current_id: str | None,
    ) -> None:
        """Rebuild the list when ids, titles or the selection changed."""
        signature = (tuple((c.id, c.title) for c in conversations), current_id)
        if signature == self._signature:
            return
        self._signature = signature

        await self.clear()
        await self.extend(
            ListItem(
                Label(self._truncate(c.title)),
                name=c.id,
                classes="-current" if c.id == current_id else "",
            )
            for c in conversations
        )
        ids = [c.id for c in conversations]
        self.index = ids.index(current_id) if current_id in ids else None
        self.border_subtitle = f"{len(conversations)} chats"


class ChatView(VerticalScroll):
    """Scrollable message list plus the pending (streaming) message."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "No conversation"
    ALLOW_MAXIMIZE = True

    def compose(self):
        yield Vertical(id="messages")
        yield Static("", id="pending-message", classes="chat-message assistant-message")
        yield Static("[b]AI[/b]  Thinking…", id="thinking")

    def on_mount(self) -> None:
        self.query_one("#pending-message", Static).display = False
        self.query_one("#thinking", Static).display = False

    async def show_conversation(self, conversation: Conversation | None) -> None:
        """Re-render the committed messages of a conversation."""
        container = self.query_one("#messages", Vertical)
        await container.remove_children()

        if conversation is None:
            self.border_title = "Chat"
            self.border_subtitle = "No conversation"
            await container.mount(Markdown(WELCOME_TEXT, classes="welcome"))
            return

        self.border_title = conversation.title
        self.border_subtitle = f"{len(conversation.messages)} messages"
        await container.mount_all([self._render_message(m) for m in conversation.messages])
        self.scroll_end(animate=False)

    def _render_message(self, message: Message) -> ClickableMessage:
        if message.role == "user":
            header, css_class = "> You", "user-message"
        else:
            header, css_class = "< AI", "assistant-message"

        container = ClickableMessage(content=message.content, classes=f"chat-message {css_class}")
        container.compose_add_child(Static(header, classes="message-header"))
        if message.role == "assistant":
            container.compose_add_child(Markdown(message.content, classes="message-content"))
        else:
            container.compose_add_child(Static(message.content, classes="message-content", markup=False))
        return container

    def show_pending(self, content: str | None) -> None:
        """Show the streaming message, or hide it with None."""
        pending = self.query_one("#pending-message", Static)
        if content is None:
            pending.update("")
            pending.display = False
            return
        pending.update(RichMarkdown(content))
        pending.display = True
        self.query_one("#thinking", Static).display = False
        self.scroll_end(animate=False)

    def set_thinking(self, is_loading: bool) -> None:
        pending = self.query_one("#pending-message", Static)
        self.query_one("#thinking", Static).display = is_loading and not pending.display
        if is_loading:
            self.scroll_end(animate=False)


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="warning").with_tooltip(
            "Submit message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.focus()
        text_area.highlight_cursor_line = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            event.stop()
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if value:
            if not self._history or self._history[-1] != value:
                self._history.append(value)
                del self._history[:-INPUT_HISTORY_MAX_SIZE]
            self._history_index = -1
            text_area.text = ""
            self.post_message(self.Submitted(value))

    def set_busy(self, busy: bool) -> None:
        """Disable sending while a response is in flight."""
        self.query_one("#send-btn", Button).disabled = busy

    def focus_input(self) -> None:
        self.query_one("#chat-input", TextArea).focus()


class MetricsPanel(Static):
    """One-line status: model, message count, response time and tokens."""

    def __init__(self, model: str = "unknown", *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._model = model
        self._messages = 0
        self._time = 0.0
        self._input_tokens = 0
        self._output_tokens = 0

    def on_mount(self) -> None:
        self._update_display()

    def update_metrics(
        self,
        messages: int | None = None,
        time: float | None = None,
        input_tokens: int | None = None,
        output_tokens: int | None = None,
    ) -> None:
        """Update any subset of the displayed values."""
        if messages is not None:
            self._messages = messages
        if time is not None:
            self._time = time
        if input_tokens is not None:
            self._input_tokens = input_tokens
        if output_tokens is not None:
            self._output_tokens = output_tokens
        self._update_display()

    def _update_display(self) -> None:
        total = self._input_tokens + self._output_tokens
        self.update("  ".join([
            f"[bold cyan]Model:[/] {escape(self._model)}",
            f"[bold green]Msgs:[/] {self._messages}",
            f"[bold yellow]Time:[/] {self._time:.2f}s",
            f"[bold magenta]Tokens:[/] {total:,} "
            f"[dim]({self._input_tokens:,}/{self._output_tokens:,})[/]",
        ]))


class LogPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped entries from all components.
    Hidden by default, shown with --log-level or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Hidden"

    COMPONENT_COLORS = {
        "app": "cyan",
        "store": "green",
        "stream": "yellow",
        "response": "magenta",
        "session": "bright_blue",
        "sqlite": "bright_green",
        "_base_client": "bright_magenta",
        "prompts": "bright_cyan",
    }

    LEVEL_COLORS = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    def __init__(self, *args, log_level: int = LogLevel.INFO, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=True,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        self.display = False

    def add_entry(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold."""
        if level < self._log_level:
            return

        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_color = self.LEVEL_COLORS.get(level, "white")
        comp_color = self.COMPONENT_COLORS.get(component, "white")

        self.write(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{LogLevel.name(level):<7}[/] "
            f"[{comp_color}]\\[{escape(component)}][/] {escape(message)}"
        )

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True
