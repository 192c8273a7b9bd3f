"""Provider factory functions for CLI.

Centralizes creation of the store, gateways and credential lookup.
Hides configuration details from command implementations.
"""

import typer
from rich.console import Console
from rich.markup import escape

from ..config import API_KEY_ENV, ChatConfig, get_api_key
from ..errors import ConfigError
from ..images import ImageArtifactStore, ImageProvider, create_image_provider
from ..llm import LLMProvider, create_llm_provider
from ..transcript import TranscriptStore, create_transcript_store

# Default console for output
_console = Console()


def require_api_key(console: Console | None = None) -> str:
    """Get the API credential, exiting if it is not configured.

    Raises:
        typer.Exit: If OPENAI_KEY is not set

    Environment variables:
        OPENAI_KEY: OpenAI API key (required)
    """
    con = console or _console
    try:
        return get_api_key()
    except ConfigError as e:
        con.print(f"[red]Error: {escape(str(e))}[/red]")
        con.print(f"Please set it with: export {API_KEY_ENV}='your-api-key'", markup=False, highlight=False)
        raise typer.Exit(code=1)


def prepare_directories(config: ChatConfig, console: Console | None = None) -> None:
    """Create the chats and images directories, exiting on failure."""
    con = console or _console
    try:
        config.ensure_directories()
    except ConfigError as e:
        con.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)


def get_store(config: ChatConfig) -> TranscriptStore:
    """Create the transcript store for the configured chats directory."""
    return create_transcript_store("xml", directory=config.chats_dir)


def get_artifacts(config: ChatConfig) -> ImageArtifactStore:
    """Create the image artifact store for the configured images directory."""
    return ImageArtifactStore(config.images_dir)


def get_llm(config: ChatConfig, api_key: str) -> LLMProvider:
    """Create the completion gateway."""
    return create_llm_provider(
        "openai",
        api_key=api_key,
        model=config.model,
        timeout=config.request_timeout,
    )


def get_image_provider(config: ChatConfig, api_key: str) -> ImageProvider:
    """Create the image gateway."""
    return create_image_provider(
        "openai",
        api_key=api_key,
        model=config.image_model,
        size=config.image_size,
        timeout=config.request_timeout,
    )
