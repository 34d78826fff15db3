"""Error taxonomy for the chat flow.

Every caller-visible failure of the AI response function is a ChatError
carrying the HTTP-style status and the message shown to the user.
Provider SDK exceptions are translated by map_provider_error().
"""

import anthropic
from pydantic import BaseModel

ERROR_MESSAGE_PREFIX = "Sorry, I encountered an error"
INLINE_ERROR_MESSAGE = f"{ERROR_MESSAGE_PREFIX} processing your request."


class ChatError(Exception):
    """Base class for caller-visible chat failures."""

    status_code: int = 500
    default_message: str = "Failed to get AI response"

    def __init__(self, message: str | None = None, details: str | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class NoValidMessagesError(ChatError):
    """No message survived filtering; nothing to send."""

    status_code = 400
    default_message = "No valid messages to send"


class MissingAPIKeyError(ChatError):
    """The provider credential is not configured."""

    status_code = 500
    default_message = (
        "Missing API key: Please set ANTHROPIC_API_KEY in your environment "
        "variables or in your .env file."
    )


class RateLimitedError(ChatError):
    status_code = 429
    default_message = "Rate limit exceeded. Please try again in a moment."


class ProviderConnectionError(ChatError):
    status_code = 503
    default_message = (
        "Connection to Anthropic API failed. Please check your internet "
        "connection and API key."
    )


class ProviderAuthenticationError(ChatError):
    status_code = 401
    default_message = "Authentication failed. Please check your Anthropic API key."


class ProviderError(ChatError):
    """Any other provider failure; the message is the provider's own."""

    status_code = 500


class AIResponseError(Exception):
    """Raised by AIResponse.raise_for_status() for a non-200 response."""

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}")


class ErrorPayload(BaseModel):
    """Structured error body returned instead of a stream."""

    error: str
    details: str | None = None

    @classmethod
    def from_error(cls, error: ChatError) -> "ErrorPayload":
        return cls(error=error.message, details=error.details)


def map_provider_error(exc: Exception) -> ChatError:
    """Translate a provider SDK exception into the chat error taxonomy."""
    details = type(exc).__name__

    if isinstance(exc, anthropic.RateLimitError):
        return RateLimitedError(details=details)
    if isinstance(exc, anthropic.APIConnectionError):
        return ProviderConnectionError(details=details)
    if isinstance(exc, anthropic.AuthenticationError):
        return ProviderAuthenticationError(details=details)
    return ProviderError(str(exc) or None, details=details)


def is_error_message(content: str) -> bool:
    """True for assistant messages produced by the inline error policy."""
    return content.startswith(ERROR_MESSAGE_PREFIX)
