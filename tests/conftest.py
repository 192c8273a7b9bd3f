"""Pytest configuration and shared fixtures."""
import io
import os
from collections.abc import Iterable
from typing import Any

import pytest
from rich.console import Console

from chatcli.config import ChatConfig
from chatcli.conversation import ConversationEngine
from chatcli.errors import TranscriptError
from chatcli.images import GeneratedImage, ImageArtifactStore, ImageProvider
from chatcli.llm import ChatMessage, LLMProvider, LLMResponse
from chatcli.transcript import XMLTranscriptStore

FAKE_PNG = b"\x89PNG\r\n\x1a\nfake-image-bytes"


class FakeLLM(LLMProvider):
    """Completion backend that answers every request with a fixed reply."""

    def __init__(self, reply: str = "hi", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[list[ChatMessage]] = []
        self.closed = False

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.reply, model=model or "fake-model")

    async def close(self) -> None:
        self.closed = True


class FakeImages(ImageProvider):
    """Image backend that returns fixed bytes."""

    def __init__(self, data: bytes | None = FAKE_PNG, url: str | None = None, error: Exception | None = None):
        self.data = data
        self.url = url
        self.error = error
        self.prompts: list[str] = []
        self.closed = False

    async def generate(self, prompt: str, **kwargs: Any) -> GeneratedImage:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return GeneratedImage(data=self.data, url=self.url)

    async def close(self) -> None:
        self.closed = True


class CountingStore(XMLTranscriptStore):
    """XML store that records how often it was asked to save."""

    def __init__(self, directory, fail_first: int = 0):
        super().__init__(directory)
        self.save_calls = 0
        self._fail_first = fail_first

    def save(self, conversation):
        self.save_calls += 1
        if self.save_calls <= self._fail_first:
            raise TranscriptError("disk full")
        return super().save(conversation)


def make_reader(lines: Iterable[str]):
    """Line reader that replays ``lines`` and then signals end of input."""
    iterator = iter(lines)
    prompts: list[str] = []

    def read(prompt: str) -> str:
        prompts.append(prompt)
        try:
            return next(iterator)
        except StopIteration:
            raise EOFError from None

    read.prompts = prompts
    return read


@pytest.fixture
def config(tmp_path):
    """Config rooted in a temporary directory, with both directories created."""
    cfg = ChatConfig(
        chats_dir=tmp_path / "chats",
        images_dir=tmp_path / "images",
        open_images=False,
    )
    cfg.ensure_directories()
    return cfg


@pytest.fixture
def engine(config):
    return ConversationEngine(config)


@pytest.fixture
def store(config):
    return CountingStore(config.chats_dir)


@pytest.fixture
def artifacts(config):
    return ImageArtifactStore(config.images_dir)


@pytest.fixture
def console():
    """Console writing plain text into a buffer."""
    return Console(file=io.StringIO(), width=200, color_system=None, force_terminal=False)


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "openai": os.getenv("OPENAI_KEY"),
    }
