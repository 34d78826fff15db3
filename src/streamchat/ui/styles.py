"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - Sidebar + Main Column
   ============================================ */
Screen {
    layout: horizontal;
    background: $background;
}

#sidebar {
    width: 32;
    height: 100%;
    background: $panel;
}

#main {
    width: 1fr;
    height: 100%;
}

/* ============================================
   Sidebar
   ============================================ */
#new-chat {
    width: 100%;
    margin: 0 0 1 0;
}

#conversation-list {
    height: 1fr;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;

    &:focus-within {
        border: round $warning;
    }

    & > ListItem {
        padding: 0 1;
    }

    & > ListItem.-current {
        background: $warning 15%;
        text-style: bold;
    }
}

/* ============================================
   Banner - errors with no conversation to host them
   ============================================ */
#banner {
    height: auto;
    padding: 0 2;
    color: $warning;
    text-style: bold;
    display: none;

    &.-visible {
        display: block;
    }
}

/* ============================================
   Chat View
   ============================================ */
#chat-view {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

#messages {
    height: auto;
}

.chat-message {
    height: auto;
    margin: 0 0 1 0;
    padding: 0 1;
}

.user-message {
    border-left: outer $secondary;
}

.assistant-message {
    border-left: outer $warning;
    background: $warning 5%;
}

.message-header {
    text-style: bold;
    color: $text-muted;
}

.message-content {
    height: auto;
    margin: 0;
}

#thinking {
    height: auto;
    padding: 0 1;
    color: $warning;
    text-style: italic;
}

/* ============================================
   Log Panel
   ============================================ */
#log-panel {
    height: 10;
    background: $panel;
    border: round $secondary 60%;
    border-title-color: $secondary;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
}

/* ============================================
   Metrics + Input
   ============================================ */
#metrics {
    height: 1;
    padding: 0 1;
    background: $surface;
}

#chat-input-bar {
    height: auto;
    max-height: 10;
    padding: 0 1;

    & > TextArea {
        width: 1fr;
        height: auto;
        min-height: 3;
        max-height: 8;
        border: tall $border;

        &:focus {
            border: tall $warning;
        }
    }

    & > Button {
        margin: 0 0 0 1;
        min-width: 8;
    }
}

/* ============================================
   Dialogs
   ============================================ */
ConfirmationScreen, RenameScreen, SettingsScreen {
    align: center middle;
    background: $background 70%;
}

.dialog {
    width: 70;
    height: auto;
    max-height: 90%;
    border: tall $accent;
    background: $surface;
    padding: 1 2;
}

.dialog-title {
    width: 100%;
    text-align: center;
    text-style: bold;
    color: $accent;
    padding: 0 0 1 0;
}

.dialog-buttons {
    width: 100%;
    height: 3;
    align: center middle;
    margin-top: 1;

    & > Button {
        margin: 0 1;
        min-width: 10;
    }
}

#confirmation-prompt {
    width: 100%;
    text-align: center;
    padding: 1 2;
}

#prompt-list {
    height: 8;
    border: round $border;
    margin-bottom: 1;

    & > ListItem.-active {
        color: $success;
        text-style: bold;
    }
}

#prompt-content {
    height: 8;
    margin-top: 1;
}
"""
