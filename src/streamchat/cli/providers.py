"""Provider factory functions for CLI.

Centralizes creation of config, LLM provider and archive instances from
environment variables. Hides configuration details from command implementations.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from ..config import ChatConfig
from ..llm import LLMProvider, create_llm_provider
from ..store.archive import ConversationArchive
from ..ui import build_archive

# Default console for output
_console = Console()


def get_config(
    archive_backend: str | None = None,
    archive_path: str | None = None,
) -> ChatConfig:
    """Load config from the environment, applying command-line overrides."""
    config = ChatConfig.from_env()
    overrides = {}
    if archive_backend:
        overrides["archive_backend"] = archive_backend
    if archive_path:
        overrides["archive_path"] = archive_path
    return config.model_copy(update=overrides) if overrides else config


def get_llm(config: ChatConfig, console: Console | None = None) -> LLMProvider | None:
    """Create the Anthropic provider, or None when no API key is configured.

    Environment variables:
        ANTHROPIC_API_KEY: Anthropic API key
        ANTHROPIC_MODEL: Model (default: claude-3-5-sonnet-20241022)
    """
    con = console or _console
    if not config.api_key:
        con.print("[yellow]Warning: ANTHROPIC_API_KEY not set, responses will fail[/yellow]")
        return None
    return create_llm_provider(
        "anthropic",
        api_key=config.api_key,
        model=config.model,
        timeout=config.timeout,
    )


def get_archive(config: ChatConfig) -> ConversationArchive:
    """Create the conversation archive selected by STREAMCHAT_ARCHIVE."""
    return build_archive(config)


def configure_logging(level: str | None, console: Console | None = None) -> None:
    """Send library log records to the console through Rich."""
    if level is None:
        return
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console or _console, rich_tracebacks=True)],
        force=True,
    )
