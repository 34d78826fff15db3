"""Prompt management module.

Externalizes the default system prompt to a text file for easy customization.
The prompt can be overridden by placing a file in the working directory.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Default prompts directory (package location)
_PROMPTS_DIR = Path(__file__).parent


class SystemPromptOverride(BaseModel):
    """A user-supplied system prompt layered on top of the default one."""

    value: str
    enabled: bool = True


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Load a prompt from file.

    Search order:
    1. Current working directory: ./prompts/{name}.txt
    2. Package prompts directory: streamchat/prompts/{name}.txt

    Args:
        name: Prompt name (without .txt extension)

    Returns:
        Prompt text content

    Raises:
        FileNotFoundError: If prompt file not found in any location
    """
    filename = f"{name}.txt"

    local_path = Path.cwd() / "prompts" / filename
    if local_path.exists():
        return local_path.read_text(encoding="utf-8").strip()

    package_path = _PROMPTS_DIR / filename
    if package_path.exists():
        return package_path.read_text(encoding="utf-8").strip()

    raise FileNotFoundError(
        f"Prompt '{name}' not found. Searched:\n"
        f"  - {local_path}\n"
        f"  - {package_path}"
    )


def get_default_system_prompt() -> str:
    """Get the default instructions sent with every request."""
    return load_prompt("system")


def build_system_prompt(override: SystemPromptOverride | None = None) -> str:
    """Layer an enabled override after the default system prompt."""
    default = get_default_system_prompt()
    if override is not None and override.enabled:
        final = f"{default}\n\n{override.value}"
    else:
        final = default

    logger.debug(
        "System prompt configuration: has_custom_prompt=%s custom_prompt=%r final_length=%d",
        bool(override and override.enabled),
        override.value if override else None,
        len(final),
    )
    return final


def clear_cache() -> None:
    """Clear the prompt cache (useful after modifying prompt files)."""
    load_prompt.cache_clear()


__all__ = [
    "SystemPromptOverride",
    "build_system_prompt",
    "clear_cache",
    "get_default_system_prompt",
    "load_prompt",
]
