"""Interactive session loop.

Reads one line at a time, routes each turn to the completion or image
backend, and saves the transcript after every change. Turns are strictly
sequential: a line is fully handled before the next one is read.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..config import ChatConfig
from ..conversation import Conversation, ConversationEngine, Role
from ..errors import CompletionError, EmptyCompletionError, ImageGenerationError, TranscriptError
from ..images import ImageArtifactStore, ImageProvider
from ..llm import LLMProvider
from ..transcript import TranscriptStore

logger = logging.getLogger(__name__)

USER_PROMPT = "You: "

ReadLine = Callable[[str], str]
Opener = Callable[[str], object]


@dataclass
class SessionResult:
    """Outcome of a finished session."""

    conversation: Conversation
    transcript_path: Path
    exit_code: int
    turns: int


class ChatSession:
    """Drives one conversation from the first prompt to the final save."""

    def __init__(
        self,
        config: ChatConfig,
        engine: ConversationEngine,
        store: TranscriptStore,
        llm: LLMProvider,
        images: ImageProvider,
        artifacts: ImageArtifactStore,
        console: Console | None = None,
        read_line: ReadLine | None = None,
        opener: Opener | None = None,
    ):
        self._config = config
        self._engine = engine
        self._store = store
        self._llm = llm
        self._images = images
        self._artifacts = artifacts
        self._console = console or Console()
        self._read_line = read_line or self._console.input
        self._opener = opener
        self._conversation = engine.create()
        self._turns = 0

    @property
    def conversation(self) -> Conversation:
        return self._conversation

    async def run(self) -> SessionResult:
        """Run the loop until an exit command, end of input or an interrupt.

        Every way out of the loop goes through the final save.
        """
        self._print_banner()

        while True:
            try:
                line = self._read_line(USER_PROMPT)
            except (EOFError, KeyboardInterrupt):
                self._console.print()
                break

            text = line.strip()
            if not text:
                continue

            if text in self._config.exit_commands:
                self._console.print("Saving conversation and exiting...")
                break

            try:
                await self.handle_turn(text)
            except asyncio.CancelledError:
                # Ctrl-C during a request cancels the running task
                logger.info("Turn %d interrupted", self._turns)
                self._console.print("\nInterrupted.", highlight=False)
                break

        return self._finish()

    async def handle_turn(self, text: str) -> None:
        """Handle one non-empty user input.

        The user message is appended and saved before the backend call, so a
        failed turn still leaves the input in the transcript.
        """
        self._turns += 1
        self._engine.append(self._conversation, Role.USER, text)
        self._save()

        if self._engine.is_image_request(text):
            await self._image_turn(text)
        else:
            await self._completion_turn()

    async def _completion_turn(self) -> None:
        context = self._engine.build_completion_context(self._conversation)
        try:
            response = await self._llm.chat_completion(context, model=self._config.model)
        except EmptyCompletionError as e:
            logger.warning("Completion returned no choices")
            self._error(f"Error: {e}")
            return
        except CompletionError as e:
            logger.warning("Completion failed: %s", e)
            self._error(f"Error: {e}")
            return

        self._console.print(f"Assistant: {response.content}\n", markup=False, highlight=False, soft_wrap=True)
        self._engine.append(self._conversation, Role.ASSISTANT, response.content)
        self._save()

    async def _image_turn(self, prompt: str) -> None:
        self._console.print("Assistant: Generating and saving image...", highlight=False)
        try:
            image = await self._images.generate(prompt)
            reference = self._artifacts.save(image)
        except ImageGenerationError as e:
            logger.warning("Image generation failed: %s", e)
            self._error(f"Error generating image: {e}")
            return

        self._console.print(f"Assistant: Image saved to: {reference}\n", markup=False, highlight=False, soft_wrap=True)
        if self._opener is not None and self._config.open_images and image.data is not None:
            self._opener(reference)

        self._engine.append(self._conversation, Role.ASSISTANT, f"Generated image: {reference}")
        self._save()

    def _save(self) -> bool:
        """Save mid-session. Failures are reported, never raised."""
        try:
            self._store.save(self._conversation)
        except TranscriptError as e:
            logger.warning("Save failed: %s", e)
            self._console.print(f"[yellow]Warning: Failed to save conversation: {escape(str(e))}[/yellow]")
            return False
        return True

    def _finish(self) -> SessionResult:
        path = self._store.path_for(self._conversation)
        exit_code = 0
        try:
            path = self._store.save(self._conversation)
        except TranscriptError as e:
            logger.error("Final save failed: %s", e)
            self._error(f"Error saving conversation: {e}")
            exit_code = 1
        else:
            self._console.print(f"Conversation saved to: {path}", markup=False, highlight=False, soft_wrap=True)

        return SessionResult(
            conversation=self._conversation,
            transcript_path=path,
            exit_code=exit_code,
            turns=self._turns,
        )

    def _error(self, message: str) -> None:
        self._console.print(f"[red]{escape(message)}[/red]", soft_wrap=True)

    def _print_banner(self) -> None:
        self._console.print("[bold]=== OpenAI CLI Chat ===[/bold]")
        self._console.print(
            "Type your messages and press Enter. "
            "Type 'exit' or 'quit' to end the conversation.\n",
            highlight=False,
        )
