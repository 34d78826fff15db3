"""Modal screens for the TUI.

This module hides the design decisions about:
- The settings dialog for system-prompt presets
- The rename and delete-confirmation dialogs
- Keyboard shortcuts for dialogs
"""

from rich.markup import escape
from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, ListItem, ListView, Static, TextArea

from ..store import ChatStore


class ConfirmationScreen(ModalScreen[bool]):
    """Yes/No confirmation dialog. Dismisses with True on Yes."""

    BINDINGS = [
        Binding("y", "confirm_yes", "Yes", show=False),
        Binding("n", "confirm_no", "No", show=False),
        Binding("escape", "confirm_no", "Cancel", show=False),
    ]

    def __init__(self, prompt: str, title: str = "Confirmation Required") -> None:
        super().__init__()
        self._prompt = prompt
        self._title = title

    def compose(self) -> ComposeResult:
        with Vertical(id="confirmation-dialog", classes="dialog"):
            yield Static(self._title, classes="dialog-title")
            yield Static(self._prompt, id="confirmation-prompt", markup=False)
            with Horizontal(classes="dialog-buttons"):
                yield Button("Yes", id="btn-yes", variant="error")
                yield Button("No", id="btn-no", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(event.button.id == "btn-yes")

    def action_confirm_yes(self) -> None:
        self.dismiss(True)

    def action_confirm_no(self) -> None:
        self.dismiss(False)


class RenameScreen(ModalScreen[str | None]):
    """Single-line title editor. Dismisses with the new title, or None."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(self, title: str) -> None:
        super().__init__()
        self._title = title

    def compose(self) -> ComposeResult:
        with Vertical(id="rename-dialog", classes="dialog"):
            yield Static("Rename Chat", classes="dialog-title")
            yield Input(value=self._title, id="rename-input")

    def on_mount(self) -> None:
        self.query_one("#rename-input", Input).focus()

    @on(Input.Submitted, "#rename-input")
    def _submit(self, event: Input.Submitted) -> None:
        event.stop()
        title = event.value.strip()
        self.dismiss(title or None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class SettingsScreen(ModalScreen[None]):
    """Settings dialog for system-prompt presets.

    Presets are created inactive; activating one deactivates the others.
    The active preset is appended to the default instructions of every
    request.
    """

    BINDINGS = [
        Binding("escape", "close", "Close", show=False),
    ]

    def __init__(self, store: ChatStore) -> None:
        super().__init__()
        self._store = store

    def compose(self) -> ComposeResult:
        with Vertical(id="settings-dialog", classes="dialog"):
            yield Static("System Prompts", classes="dialog-title")
            yield ListView(id="prompt-list")
            yield Input(placeholder="Prompt name", id="prompt-name")
            yield TextArea(id="prompt-content", show_line_numbers=False)
            with Horizontal(classes="dialog-buttons"):
                yield Button("Add", id="btn-add", variant="success")
                yield Button("Activate", id="btn-toggle", variant="warning")
                yield Button("Delete", id="btn-delete", variant="error")
                yield Button("Close", id="btn-close", variant="primary")

    async def on_mount(self) -> None:
        await self._refresh_prompts()

    async def _refresh_prompts(self) -> None:
        prompt_list = self.query_one("#prompt-list", ListView)
        previous = prompt_list.index
        await prompt_list.clear()
        prompts = self._store.list_prompts()
        await prompt_list.extend(
            ListItem(
                Label(f"{'● ' if p.is_active else '○ '}{escape(p.name)}"),
                name=p.id,
                classes="-active" if p.is_active else "",
            )
            for p in prompts
        )
        if prompts:
            prompt_list.index = min(previous or 0, len(prompts) - 1)
        self._sync_toggle_label()

    def _selected_prompt_id(self) -> str | None:
        item = self.query_one("#prompt-list", ListView).highlighted_child
        return item.name if item is not None else None

    def _sync_toggle_label(self) -> None:
        selected = self._selected_prompt_id()
        active = self._store.get_active_prompt()
        toggle = self.query_one("#btn-toggle", Button)
        toggle.label = "Deactivate" if active is not None and active.id == selected else "Activate"
        toggle.disabled = selected is None
        self.query_one("#btn-delete", Button).disabled = selected is None

    @on(ListView.Highlighted, "#prompt-list")
    def _highlighted(self, event: ListView.Highlighted) -> None:
        event.stop()
        self._sync_toggle_label()

    @on(ListView.Selected, "#prompt-list")
    def _selected(self, event: ListView.Selected) -> None:
        event.stop()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        button_id = event.button.id

        if button_id == "btn-close":
            self.dismiss(None)
            return

        if button_id == "btn-add":
            name_input = self.query_one("#prompt-name", Input)
            content_area = self.query_one("#prompt-content", TextArea)
            name = name_input.value.strip()
            content = content_area.text.strip()
            if not name or not content:
                self.app.notify("Name and content are required", severity="warning", timeout=3)
                return
            self._store.create_prompt(name, content)
            name_input.value = ""
            content_area.text = ""
            self.app.notify(f"Prompt '{name}' added", timeout=2)

        elif button_id == "btn-toggle":
            prompt_id = self._selected_prompt_id()
            if prompt_id is None:
                return
            active = self._store.get_active_prompt()
            self._store.set_prompt_active(prompt_id, not (active and active.id == prompt_id))

        elif button_id == "btn-delete":
            prompt_id = self._selected_prompt_id()
            if prompt_id is None:
                return
            self._store.delete_prompt(prompt_id)

        await self._refresh_prompts()

    def action_close(self) -> None:
        self.dismiss(None)
