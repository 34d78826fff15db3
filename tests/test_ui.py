"""Tests for the TUI adapters and a headless app run."""
import logging

import pytest

from streamchat.config import ChatConfig
from streamchat.store import PendingMessage
from streamchat.store.archive.in_memory import InMemoryConversationArchive
from streamchat.ui import LogLevel, StreamchatApp
from streamchat.ui.callbacks import LogPanelHandler, PendingRenderer
from streamchat.ui.widgets import ChatInputBar


class _RecordingView:
    def __init__(self):
        self.shown = []

    def show_pending(self, content):
        self.shown.append(content)


class _RecordingPanel:
    def __init__(self):
        self.entries = []

    def add_entry(self, component, message, level):
        self.entries.append((component, message, level))


class TestPendingRenderer:
    """Tests for throttled pending-message drawing."""

    def test_first_fragment_then_threshold(self):
        view = _RecordingView()
        render = PendingRenderer(view, threshold=5)

        for content in ["a", "ab", "abcdef", "abcdefg"]:
            render(PendingMessage(id="1", content=content))
        render(None)

        assert view.shown == ["a", "abcdef", None]

    def test_resets_after_finish(self):
        view = _RecordingView()
        render = PendingRenderer(view, threshold=100)

        render(PendingMessage(id="1", content="first"))
        render(None)
        render(PendingMessage(id="2", content="second"))

        assert view.shown == ["first", None, "second"]


class TestLogPanelHandler:
    """Tests for routing log records into the panel."""

    def test_component_is_last_logger_segment(self):
        panel = _RecordingPanel()
        logger = logging.getLogger("streamchat.chat.session.test")
        handler = LogPanelHandler(panel)
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
        try:
            logger.warning("Something %s", "happened")
        finally:
            logger.removeHandler(handler)

        assert panel.entries == [("test", "Something happened", logging.WARNING)]

    def test_log_level_from_string(self):
        assert LogLevel.from_string("WARNING") == logging.WARNING
        assert LogLevel.from_string("bogus") == LogLevel.DEBUG
        assert LogLevel.name(logging.ERROR) == "ERROR"


class TestStreamchatApp:
    """Headless runs of the Textual app."""

    @pytest.mark.asyncio
    async def test_submit_streams_into_store_and_archive(self, hello_provider):
        archive = InMemoryConversationArchive()
        app = StreamchatApp(provider=hello_provider, config=ChatConfig(), archive=archive)

        async with app.run_test() as pilot:
            app.query_one(ChatInputBar).post_message(ChatInputBar.Submitted("Hi there"))
            await pilot.pause()
            await app.workers.wait_for_complete()
            await pilot.pause()

            conversation = app.store.get_current_conversation()
            assert conversation.title == "Hi there"
            assert [m.content for m in conversation.messages] == ["Hi there", "Hello"]
            assert app.store.is_loading is False

        archived = await archive.load_conversations()
        assert [c.title for c in archived] == ["Hi there"]

    @pytest.mark.asyncio
    async def test_new_chat_action(self, hello_provider):
        app = StreamchatApp(provider=hello_provider, config=ChatConfig())

        async with app.run_test() as pilot:
            await pilot.press("ctrl+n")
            await pilot.pause()

            assert app.store.get_current_conversation().title == "New Chat"

    @pytest.mark.asyncio
    async def test_copy_last_response_uses_clipboard_helper(self, hello_provider, monkeypatch):
        copied = []
        monkeypatch.setattr("streamchat.ui.widgets.pyperclip.copy", copied.append)
        app = StreamchatApp(provider=hello_provider, config=ChatConfig())

        async with app.run_test() as pilot:
            app.query_one(ChatInputBar).post_message(ChatInputBar.Submitted("Hi there"))
            await pilot.pause()
            await app.workers.wait_for_complete()
            await pilot.pause()

            app.action_copy_last_response()

        assert copied == ["Hello"]
