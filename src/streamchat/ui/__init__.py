"""Terminal UI module for streamchat.

Provides a Textual-based TUI hosting the chat flow.

Module structure (Parnas principle - each module hides a design decision):
- widgets.py: Custom widgets (sidebar, chat view, input history, metrics, log panel)
- styles.py: CSS styling (layout decisions)
- screens.py: Modal dialogs (prompt settings, rename, confirmation)
- callbacks.py: How the TUI receives pending-message updates and log records
- app.py: Application orchestration (user interaction flow)
"""

from .app import StreamchatApp, build_archive, run_streamchat_tui
from .callbacks import LogPanelHandler, PendingRenderer
from .config import LogLevel
from .widgets import ChatInputBar, ChatView, ConversationList, LogPanel, MetricsPanel

__all__ = [
    "ChatInputBar",
    "ChatView",
    "ConversationList",
    "LogLevel",
    "LogPanel",
    "LogPanelHandler",
    "MetricsPanel",
    "PendingRenderer",
    "StreamchatApp",
    "build_archive",
    "run_streamchat_tui",
]
