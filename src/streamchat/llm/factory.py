from typing import Any

from .base import LLMProvider
from .providers import AnthropicProvider


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Create an LLM provider instance.

    This factory function hides the instantiation logic for providers.

    Args:
        provider: Provider type ('anthropic' or its alias 'claude')
        **config: Provider-specific configuration
            For Anthropic (Claude):
                - api_key: str (required)
                - model: str (default: 'claude-3-5-sonnet-20241022')
                - base_url: str | None
                - timeout: float (default: 30.0)

    Returns:
        Initialized LLM provider instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_llm_provider(
        ...     "anthropic",
        ...     api_key="sk-ant-...",
        ...     model="claude-3-5-sonnet-20241022"
        ... )
    """
    provider_lower = provider.lower()

    if provider_lower in ("anthropic", "claude"):
        if "api_key" not in config:
            raise TypeError("Anthropic provider requires 'api_key' in config")
        return AnthropicProvider(**config)

    raise ValueError(
        f"Unsupported provider: {provider}. "
        f"Supported providers: 'anthropic'"
    )
