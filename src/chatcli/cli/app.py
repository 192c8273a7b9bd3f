"""Main CLI application using Typer."""
import asyncio
import logging
from functools import partial
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import ChatConfig
from ..conversation import ConversationEngine
from ..errors import TranscriptError
from ..logging import setup_logging
from ..session import ChatSession, SessionResult, open_file
from ..transcript.xml_store import format_timestamp
from .providers import (
    get_artifacts,
    get_image_provider,
    get_llm,
    get_store,
    prepare_directories,
    require_api_key,
)

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="chat-cli",
    help="Terminal chat with OpenAI models, saved as XML transcripts",
    add_completion=True,
)

# Console for rich output
console = Console()

CONTENT_PREVIEW_LENGTH = 200


def _run_chat(
    model: str | None = None,
    chats_dir: Path | None = None,
    images_dir: Path | None = None,
    no_open: bool = False,
    verbose: bool = False,
) -> None:
    setup_logging(logging.DEBUG if verbose else logging.WARNING)

    config = ChatConfig.from_env(
        model=model,
        chats_dir=chats_dir,
        images_dir=images_dir,
        open_images=False if no_open else None,
    )
    api_key = require_api_key(console)
    prepare_directories(config, console)

    async def _chat() -> SessionResult:
        async with get_llm(config, api_key) as llm, get_image_provider(config, api_key) as images:
            session = ChatSession(
                config=config,
                engine=ConversationEngine(config),
                store=get_store(config),
                llm=llm,
                images=images,
                artifacts=get_artifacts(config),
                console=console,
                opener=partial(open_file, console=console),
            )
            return await session.run()

    try:
        result = asyncio.run(_chat())
    except KeyboardInterrupt:
        # A second Ctrl-C while shutting down
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(code=130)
    if result.exit_code:
        raise typer.Exit(code=result.exit_code)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """Start a chat when no command is given."""
    if ctx.invoked_subcommand is None:
        _run_chat()


@app.command()
def chat(
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Chat completion model (default: gpt-3.5-turbo or $CHAT_MODEL)"
    ),
    chats_dir: Path | None = typer.Option(
        None,
        "--chats-dir",
        help="Directory for XML transcripts (default: chats)"
    ),
    images_dir: Path | None = typer.Option(
        None,
        "--images-dir",
        help="Directory for generated images (default: images)"
    ),
    no_open: bool = typer.Option(
        False,
        "--no-open",
        help="Do not open generated images in the default viewer"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging"
    ),
):
    """Start an interactive chat session."""
    _run_chat(
        model=model,
        chats_dir=chats_dir,
        images_dir=images_dir,
        no_open=no_open,
        verbose=verbose,
    )


@app.command()
def show(
    path: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="Transcript file to display"
    ),
    full: bool = typer.Option(
        False,
        "--full",
        "-f",
        help="Show full message content"
    ),
):
    """Display a saved transcript."""
    store = get_store(ChatConfig(chats_dir=path.parent))
    try:
        conversation = store.load(path)
    except TranscriptError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    console.print(
        f"[bold cyan]{escape(conversation.id)}[/bold cyan] "
        f"[dim]created {format_timestamp(conversation.created_at)}[/dim]"
    )

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Role", style="yellow", width=10)
    table.add_column("Timestamp", style="dim", width=25)
    table.add_column("Content")

    for i, message in enumerate(conversation.messages, 1):
        content = message.content
        if not full and len(content) > CONTENT_PREVIEW_LENGTH:
            content = content[:CONTENT_PREVIEW_LENGTH] + "..."
        table.add_row(str(i), message.role.value, format_timestamp(message.timestamp), escape(content))

    console.print(table)


@app.command("list")
def list_chats(
    chats_dir: Path | None = typer.Option(
        None,
        "--chats-dir",
        help="Directory for XML transcripts (default: chats)"
    ),
):
    """List saved transcripts."""
    config = ChatConfig.from_env(chats_dir=chats_dir)
    store = get_store(config)
    paths = store.list_transcripts()

    if not paths:
        console.print(f"[yellow]No transcripts found in {escape(str(config.chats_dir))}[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("File", style="cyan")
    table.add_column("Created", style="dim")
    table.add_column("Messages", style="green", justify="right")

    for path in paths:
        try:
            conversation = store.load(path)
        except TranscriptError:
            table.add_row(path.name, "[red]unreadable[/red]", "-")
            continue
        table.add_row(path.name, format_timestamp(conversation.created_at), str(len(conversation)))

    console.print(table)


if __name__ == "__main__":
    app()
