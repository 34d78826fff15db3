"""Unit tests for the AI response function and error mapping."""
import logging

import anthropic
import httpx
import pytest

from streamchat.chat import (
    AIResponse,
    AIResponseError,
    NoValidMessagesError,
    ProviderError,
    RateLimitedError,
    filter_messages,
    generate_ai_response,
    map_provider_error,
)
from streamchat.chat.errors import INLINE_ERROR_MESSAGE
from streamchat.config import ChatConfig
from streamchat.prompts import SystemPromptOverride, get_default_system_prompt
from streamchat.store import Message

API_URL = "https://api.anthropic.com/v1/messages"


def _request() -> httpx.Request:
    return httpx.Request("POST", API_URL)


def _status_error(cls, status: int, message: str = "error"):
    return cls(message, response=httpx.Response(status, request=_request()), body=None)


def _user(content: str, message_id: str = "1") -> Message:
    return Message(id=message_id, role="user", content=content)


class TestFilterMessages:
    """Tests for filter_messages()."""

    def test_drops_empty_and_error_messages(self):
        messages = [
            _user("hello", "1"),
            Message(id="2", role="assistant", content=INLINE_ERROR_MESSAGE),
            _user("   ", "3"),
            _user("again", "4"),
        ]

        formatted = filter_messages(messages)

        assert [(m.role, m.content) for m in formatted] == [("user", "hello"), ("user", "again")]

    def test_strips_content(self):
        assert filter_messages([_user("  hi \n")])[0].content == "hi"


class TestGenerateAIResponse:
    """Tests for generate_ai_response()."""

    @pytest.mark.asyncio
    async def test_success_returns_stream(self, hello_provider):
        response = await generate_ai_response([_user("hi")], provider=hello_provider)

        assert response.status == 200
        assert response.ok
        assert response.stream is not None
        assert response.error is None
        response.raise_for_status()

    @pytest.mark.asyncio
    async def test_no_valid_messages_skips_provider(self, hello_provider):
        response = await generate_ai_response(
            [_user(""), Message(id="2", role="assistant", content=INLINE_ERROR_MESSAGE)],
            provider=hello_provider,
        )

        assert response.status == 400
        assert response.error.error == NoValidMessagesError.default_message
        assert hello_provider.calls == []

    @pytest.mark.asyncio
    async def test_default_system_prompt(self, hello_provider):
        await generate_ai_response([_user("hi")], provider=hello_provider)

        assert hello_provider.calls[0]["system"] == get_default_system_prompt()

    @pytest.mark.asyncio
    async def test_custom_prompt_is_appended(self, hello_provider):
        override = SystemPromptOverride(value="Be brief", enabled=True)

        await generate_ai_response([_user("hi")], override, provider=hello_provider)

        assert hello_provider.calls[0]["system"] == get_default_system_prompt() + "\n\nBe brief"

    @pytest.mark.asyncio
    async def test_disabled_prompt_is_ignored(self, hello_provider):
        override = SystemPromptOverride(value="Be brief", enabled=False)

        await generate_ai_response([_user("hi")], override, provider=hello_provider)

        assert hello_provider.calls[0]["system"] == get_default_system_prompt()

    @pytest.mark.asyncio
    async def test_max_tokens_from_config(self, hello_provider):
        await generate_ai_response([_user("hi")], provider=hello_provider, config=ChatConfig(max_tokens=99))

        assert hello_provider.calls[0]["max_tokens"] == 99

    @pytest.mark.asyncio
    async def test_missing_api_key(self, no_api_key):
        response = await generate_ai_response([_user("hi")], config=ChatConfig())

        assert response.status == 500
        assert response.error.error.startswith("Missing API key")

    @pytest.mark.asyncio
    async def test_owned_provider_closed_with_stream(self, monkeypatch, make_provider, delta):
        provider = make_provider([delta("ok")])
        monkeypatch.setattr(
            "streamchat.chat.response.create_llm_provider",
            lambda name, **config: provider,
        )

        response = await generate_ai_response([_user("hi")], config=ChatConfig(api_key="test-key"))
        assert not provider.closed

        await response.stream.aclose()
        assert provider.closed

    @pytest.mark.asyncio
    async def test_owned_provider_closed_on_error(self, monkeypatch, make_provider):
        provider = make_provider(error=anthropic.APIConnectionError(request=_request()))
        monkeypatch.setattr(
            "streamchat.chat.response.create_llm_provider",
            lambda name, **config: provider,
        )

        response = await generate_ai_response([_user("hi")], config=ChatConfig(api_key="test-key"))

        assert response.status == 503
        assert provider.closed

    @pytest.mark.asyncio
    async def test_owned_provider_closed_on_chat_error(self, monkeypatch, make_provider):
        provider = make_provider(error=RateLimitedError())
        monkeypatch.setattr(
            "streamchat.chat.response.create_llm_provider",
            lambda name, **config: provider,
        )

        response = await generate_ai_response([_user("hi")], config=ChatConfig(api_key="test-key"))

        assert response.status == 429
        assert provider.closed

    @pytest.mark.asyncio
    async def test_owned_provider_closed_on_unexpected_error(self, monkeypatch, make_provider):
        provider = make_provider(error=RuntimeError("socket exploded"))
        monkeypatch.setattr(
            "streamchat.chat.response.create_llm_provider",
            lambda name, **config: provider,
        )

        with pytest.raises(RuntimeError, match="socket exploded"):
            await generate_ai_response([_user("hi")], config=ChatConfig(api_key="test-key"))

        assert provider.closed

    @pytest.mark.asyncio
    async def test_expected_failure_logged_without_traceback(self, make_provider, caplog):
        provider = make_provider(error=anthropic.APIConnectionError(request=_request()))

        with caplog.at_level(logging.DEBUG, logger="streamchat"):
            await generate_ai_response([_user("hi")], provider=provider)

        failures = [r for r in caplog.records if "AI response failed" in r.getMessage()]
        assert failures
        assert all(r.levelno == logging.WARNING and r.exc_info is None for r in failures)

    @pytest.mark.asyncio
    async def test_injected_provider_left_open(self, make_provider):
        provider = make_provider(error=anthropic.APIConnectionError(request=_request()))

        await generate_ai_response([_user("hi")], provider=provider)

        assert not provider.closed

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, status",
        [
            (_status_error(anthropic.RateLimitError, 429), 429),
            (anthropic.APIConnectionError(request=_request()), 503),
            (_status_error(anthropic.AuthenticationError, 401), 401),
            (_status_error(anthropic.InternalServerError, 500, "overloaded"), 500),
        ],
    )
    async def test_provider_errors_map_to_status(self, make_provider, error, status):
        response = await generate_ai_response([_user("hi")], provider=make_provider(error=error))

        assert response.status == status
        assert response.stream is None
        assert response.error.details == type(error).__name__


class TestErrorMapping:
    """Tests for map_provider_error() and AIResponse errors."""

    def test_generic_error_keeps_provider_message(self):
        error = map_provider_error(_status_error(anthropic.BadRequestError, 400, "bad model"))

        assert isinstance(error, ProviderError)
        assert error.status_code == 500
        assert "bad model" in error.message

    def test_raise_for_status(self):
        response = AIResponse.from_error(NoValidMessagesError())

        with pytest.raises(AIResponseError) as exc_info:
            response.raise_for_status()

        assert exc_info.value.status == 400
        assert exc_info.value.message == "No valid messages to send"
