"""Callback adapters between the chat core and the TUI.

Hides the details of how the TUI receives updates:
- Pending-message updates from the stream consumer, throttled by size
- Log records from library loggers, routed into the log panel
"""

import logging
import threading
from typing import TYPE_CHECKING, Any

from ..store import PendingMessage
from .config import STREAM_BUFFER_THRESHOLD

if TYPE_CHECKING:
    from textual.app import App

    from .widgets import ChatView, LogPanel


class PendingRenderer:
    """Redraws the pending message every STREAM_BUFFER_THRESHOLD characters.

    The first fragment is drawn immediately; None (stream finished or
    failed) hides the pending message.
    """

    def __init__(self, chat_view: "ChatView", threshold: int = STREAM_BUFFER_THRESHOLD) -> None:
        self._chat_view = chat_view
        self._threshold = threshold
        self._rendered_length = 0

    def __call__(self, pending: PendingMessage | None) -> None:
        if pending is None:
            self._rendered_length = 0
            self._chat_view.show_pending(None)
            return

        grown = len(pending.content) - self._rendered_length
        if self._rendered_length == 0 or grown >= self._threshold:
            self._rendered_length = len(pending.content)
            self._chat_view.show_pending(pending.content)


class LogPanelHandler(logging.Handler):
    """logging.Handler writing records into the TUI log panel.

    Uses call_from_thread when a record is emitted off the app thread.
    """

    def __init__(self, panel: "LogPanel", app: "App | None" = None, level: int = logging.DEBUG) -> None:
        super().__init__(level)
        self.panel = panel
        self.app = app

    def _call_thread_safe(self, func: Any, *args: Any) -> None:
        if self.app is not None and self.app._thread_id != threading.get_ident():
            self.app.call_from_thread(func, *args)
        else:
            func(*args)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            component = record.name.rsplit(".", 1)[-1]
            message = record.getMessage()
            if record.exc_info and record.exc_info[1] is not None:
                message = f"{message}: {record.exc_info[1]}"
            self._call_thread_safe(self.panel.add_entry, component, message, record.levelno)
        except Exception:
            self.handleError(record)
