"""AI response function.

Turns a message history into either a raw event stream from the provider
or a structured error. Holds no state between calls.
"""

import logging
from collections.abc import Sequence
from typing import Any

import anthropic
from pydantic import BaseModel, ConfigDict

from ..config import ChatConfig
from ..llm import ByteStream, ChatMessage, LLMProvider, create_llm_provider
from ..prompts import SystemPromptOverride, build_system_prompt
from ..store.models import Message
from .errors import (
    AIResponseError,
    ChatError,
    ErrorPayload,
    MissingAPIKeyError,
    NoValidMessagesError,
    is_error_message,
    map_provider_error,
)

logger = logging.getLogger(__name__)


class AIResponse(BaseModel):
    """Result of generate_ai_response: a stream on 200, an error payload otherwise."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: int
    stream: ByteStream | None = None
    error: ErrorPayload | None = None

    @property
    def ok(self) -> bool:
        return self.status == 200

    def raise_for_status(self) -> None:
        """Raise AIResponseError unless the response carries a stream."""
        if not self.ok:
            message = self.error.error if self.error else "Failed to get AI response"
            raise AIResponseError(self.status, message)

    @classmethod
    def from_error(cls, error: ChatError) -> "AIResponse":
        return cls(status=error.status_code, error=ErrorPayload.from_error(error))


def filter_messages(messages: Sequence[Message | ChatMessage]) -> list[ChatMessage]:
    """Drop empty and error messages, stripping the content of the rest."""
    return [
        ChatMessage(role=m.role, content=m.content.strip())
        for m in messages
        if m.content.strip() and not is_error_message(m.content)
    ]


def _provider_from_config(config: ChatConfig) -> LLMProvider:
    if not config.api_key:
        raise MissingAPIKeyError()
    return create_llm_provider(
        "anthropic",
        api_key=config.api_key,
        model=config.model,
        timeout=config.timeout,
    )


async def generate_ai_response(
    messages: Sequence[Message | ChatMessage],
    system_prompt: SystemPromptOverride | None = None,
    *,
    provider: LLMProvider | None = None,
    config: ChatConfig | None = None,
    **request_kwargs: Any,
) -> AIResponse:
    """Request a streamed completion for a message history.

    Args:
        messages: Ordered message history, newest last
        system_prompt: Optional preset layered on the default system prompt
        provider: Provider to use; built from config when omitted
        config: Settings used to build the provider and size the request
        **request_kwargs: Extra provider request parameters

    Returns:
        AIResponse with status 200 and a ByteStream, or an error status
        (400 no valid messages, 401/429/503/500 provider failures, 500 missing key)
        and an ErrorPayload
    """
    formatted = filter_messages(messages)
    if not formatted:
        logger.info("Rejected request: no valid messages after filtering")
        return AIResponse.from_error(NoValidMessagesError())

    system = build_system_prompt(system_prompt)
    if config is None:
        config = ChatConfig() if provider is not None else ChatConfig.from_env()

    owns_provider = provider is None
    try:
        try:
            if provider is None:
                provider = _provider_from_config(config)
            stream = await provider.open_stream(
                formatted,
                system=system,
                max_tokens=config.max_tokens,
                **request_kwargs,
            )
        except BaseException:
            if owns_provider and provider is not None:
                await provider.close()
            raise
    except ChatError as e:
        logger.warning("AI response failed: %s", e.message)
        return AIResponse.from_error(e)
    except anthropic.APIError as e:
        error = map_provider_error(e)
        logger.warning("AI response failed (%s): %s", error.details, e)
        return AIResponse.from_error(error)

    if owns_provider:
        stream.add_close_callback(provider.close)
    return AIResponse(status=200, stream=stream)
