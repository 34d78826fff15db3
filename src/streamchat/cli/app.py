"""Main CLI application using Typer."""
import asyncio

import aiosqlite
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from ..chat import ChatSession, SubmitStatus
from ..store import ChatStore, PendingMessage
from .providers import configure_logging, get_archive, get_config, get_llm

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="streamchat",
    help="Terminal chat client for streamed Anthropic responses",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


class DeltaPrinter:
    """Prints only the newly streamed part of the pending message."""

    def __init__(self, out: Console) -> None:
        self._out = out
        self._printed = 0

    def __call__(self, pending: PendingMessage | None) -> None:
        if pending is None:
            if self._printed:
                self._out.print()
            self._printed = 0
            return
        self._out.print(
            pending.content[self._printed:],
            end="",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
        self._printed = len(pending.content)


def _activate_system_prompt(store: ChatStore, system: str | None) -> None:
    if system:
        prompt = store.create_prompt("command line", system)
        store.set_prompt_active(prompt.id, True)


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question to send"),
    system: str | None = typer.Option(
        None,
        "--system",
        "-S",
        help="Extra instructions appended to the default system prompt"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Print logs at level: debug, info, warning, or error"
    ),
):
    """Ask a single question and stream the answer."""
    async def _ask():
        configure_logging(log_level, console)
        config = get_config()
        llm = get_llm(config, console)

        store = ChatStore()
        _activate_system_prompt(store, system)
        session = ChatSession(store, provider=llm, config=config, on_pending=DeltaPrinter(console))

        try:
            result = await session.submit(question)
        finally:
            if llm:
                await llm.close()

        if result.status is SubmitStatus.SKIPPED:
            console.print("[red]Error: question is empty[/red]")
            raise typer.Exit(code=1)
        if result.status is SubmitStatus.FAILED:
            console.print(f"[red]Error: {result.error}[/red]")
            raise typer.Exit(code=1)
        if result.message is None:
            console.print("[yellow]No response received[/yellow]")

    asyncio.run(_ask())


@app.command()
def chat(
    system: str | None = typer.Option(
        None,
        "--system",
        "-S",
        help="Extra instructions appended to the default system prompt"
    ),
    archive: str | None = typer.Option(
        None,
        "--archive",
        "-a",
        help="Conversation archive: 'memory' (session-only) or 'sqlite' (persistent)"
    ),
    archive_path: str | None = typer.Option(
        None,
        "--archive-path",
        help="Path for SQLite archive (only with --archive sqlite)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Print logs at level: debug, info, warning, or error"
    ),
):
    """Interactive console chat with streamed responses."""
    async def _chat():
        configure_logging(log_level, console)
        config = get_config(archive, archive_path)
        llm = get_llm(config, console)
        conversation_archive = get_archive(config)

        store = ChatStore()
        _activate_system_prompt(store, system)
        session = ChatSession(store, provider=llm, config=config, on_pending=DeltaPrinter(console))

        try:
            await conversation_archive.connect()
            store.replace_conversations(await conversation_archive.load_conversations())

            console.print("[bold cyan]Streamchat[/bold cyan]")
            console.print("[dim]Type '/new' for a new chat; 'exit', 'quit', or 'q' to leave[/dim]\n")

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                if not user_input.strip():
                    continue

                command = user_input.strip().lower()
                if command in ('exit', 'quit', 'q'):
                    console.print("[dim]Goodbye![/dim]")
                    break
                if command == "/new":
                    session.new_chat()
                    console.print("[dim]Started a new chat[/dim]\n")
                    continue

                console.print("[bold green]AI:[/bold green] ", end="")
                result = await session.submit(user_input)
                if result.status is SubmitStatus.FAILED:
                    console.print(f"[red]{session.error or result.error}[/red]")
                console.print()

                await conversation_archive.sync(store.list_conversations())

        except aiosqlite.Error as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await conversation_archive.disconnect()
            if llm:
                await llm.close()

    asyncio.run(_chat())


@app.command(name="tui")
def tui_command(
    archive: str | None = typer.Option(
        None,
        "--archive",
        "-a",
        help="Conversation archive: 'memory' (session-only) or 'sqlite' (persistent)"
    ),
    archive_path: str | None = typer.Option(
        None,
        "--archive-path",
        help="Path for SQLite archive (only with --archive sqlite)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch interactive TUI chat interface."""
    from ..ui import run_streamchat_tui

    config = get_config(archive, archive_path)
    try:
        asyncio.run(run_streamchat_tui(config, log_level=log_level))
    except KeyboardInterrupt:
        pass
    console.print("\n[dim]Goodbye![/dim]")


@app.command()
def health(
    archive: str | None = typer.Option(
        None,
        "--archive",
        "-a",
        help="Conversation archive to check"
    ),
    archive_path: str | None = typer.Option(
        None,
        "--archive-path",
        help="Path for SQLite archive"
    ),
):
    """Check configuration and archive access."""
    async def _health():
        all_healthy = True
        config = get_config(archive, archive_path)

        if config.api_key:
            console.print("[green]+[/green] Anthropic API key: SET")
        else:
            console.print("[yellow]![/yellow] Anthropic API key: NOT SET")
            all_healthy = False

        conversation_archive = get_archive(config)
        try:
            async with conversation_archive:
                conversations = await conversation_archive.load_conversations()
            console.print(
                f"[green]+[/green] Archive ({conversation_archive.backend_type}): "
                f"OK, {len(conversations)} conversation(s)"
            )
        except (aiosqlite.Error, OSError) as e:
            console.print(f"[red]x[/red] Archive ({conversation_archive.backend_type}): FAILED ({e})")
            all_healthy = False

        table = Table(show_header=False, box=None)
        table.add_column("Setting", style="bold cyan", width=15)
        table.add_column("Value")
        table.add_row("Model", config.model)
        table.add_row("Max Tokens", str(config.max_tokens))
        table.add_row("Timeout", f"{config.timeout:.0f}s")
        console.print(table)

        if not all_healthy:
            raise typer.Exit(code=1)

    asyncio.run(_health())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
