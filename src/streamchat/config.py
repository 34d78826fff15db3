"""Runtime configuration.

Settings are read from environment variables (a .env file is loaded by
the CLI before this module is consulted).

Environment variables:
    ANTHROPIC_API_KEY: Anthropic API key (required for network calls)
    ANTHROPIC_MODEL: Model name (default: claude-3-5-sonnet-20241022)
    STREAMCHAT_MAX_TOKENS: Maximum tokens per response (default: 4096)
    STREAMCHAT_TIMEOUT: Provider request timeout in seconds (default: 30)
    STREAMCHAT_ARCHIVE: Conversation archive backend, memory or sqlite (default: memory)
    STREAMCHAT_ARCHIVE_PATH: SQLite archive path (default: ./streamchat.db)
"""

import os

from pydantic import BaseModel, Field

DEFAULT_MODEL = "claude-3-5-sonnet-20241022"


class ChatConfig(BaseModel):
    """Client configuration."""

    api_key: str | None = Field(default=None, description="Anthropic API key")
    model: str = Field(default=DEFAULT_MODEL, description="Model used for completions")
    max_tokens: int = Field(default=4096, ge=1, description="Maximum tokens per response")
    timeout: float = Field(default=30.0, gt=0, description="Provider request timeout in seconds")
    archive_backend: str = Field(default="memory", description="Conversation archive: memory or sqlite")
    archive_path: str = Field(default="./streamchat.db", description="SQLite archive path")

    @classmethod
    def from_env(cls) -> "ChatConfig":
        """Build a config from environment variables, falling back to defaults."""
        values: dict[str, str] = {}
        env_map = {
            "api_key": "ANTHROPIC_API_KEY",
            "model": "ANTHROPIC_MODEL",
            "max_tokens": "STREAMCHAT_MAX_TOKENS",
            "timeout": "STREAMCHAT_TIMEOUT",
            "archive_backend": "STREAMCHAT_ARCHIVE",
            "archive_path": "STREAMCHAT_ARCHIVE_PATH",
        }
        for field_name, env_var in env_map.items():
            value = os.getenv(env_var)
            if value:
                values[field_name] = value
        return cls(**values)
