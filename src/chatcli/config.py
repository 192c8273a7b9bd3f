"""Runtime configuration.

Centralizes the fixed constants of a chat session into one immutable value
that is built once at startup and handed to every component.
"""

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import ConfigError

# Environment variable holding the OpenAI credential
API_KEY_ENV = "OPENAI_KEY"

DEFAULT_CHATS_DIR = "chats"
DEFAULT_IMAGES_DIR = "images"
DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_IMAGE_MODEL = "dall-e-3"
DEFAULT_IMAGE_SIZE = "1024x1024"
DEFAULT_TRIGGER_KEYWORD = "visualiser"

DEFAULT_SYSTEM_PROMPT = (
    "Du er en frekk, ubehøvlet, avdanka journalist som svarer med en syrlig tone. "
    "Du skal ikke være hjelpsm eller høflig selv om jeg ber om det."
)

# Environment overrides, applied below explicit keyword overrides
_ENV_OVERRIDES = {
    "model": "CHAT_MODEL",
    "image_model": "CHAT_IMAGE_MODEL",
    "chats_dir": "CHAT_CHATS_DIR",
    "images_dir": "CHAT_IMAGES_DIR",
}


class ChatConfig(BaseModel):
    """Immutable settings for one chat session."""

    model_config = ConfigDict(frozen=True)

    chats_dir: Path = Field(default=Path(DEFAULT_CHATS_DIR), description="Transcript directory")
    images_dir: Path = Field(default=Path(DEFAULT_IMAGES_DIR), description="Generated image directory")
    model: str = Field(default=DEFAULT_MODEL, description="Chat completion model")
    image_model: str = Field(default=DEFAULT_IMAGE_MODEL, description="Image generation model")
    image_size: str = Field(default=DEFAULT_IMAGE_SIZE, description="Generated image size")
    system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT, description="Seeded system message")
    trigger_keyword: str = Field(
        default=DEFAULT_TRIGGER_KEYWORD,
        min_length=1,
        description="Keyword that routes a user turn to image generation"
    )
    exit_commands: frozenset[str] = Field(
        default=frozenset({"exit", "quit"}),
        description="Inputs that end the session (exact match)"
    )
    request_timeout: float | None = Field(
        default=120.0,
        gt=0,
        description="Timeout in seconds for backend requests (None disables)"
    )
    open_images: bool = Field(default=True, description="Open generated images in the OS viewer")

    @classmethod
    def from_env(cls, **overrides: Any) -> "ChatConfig":
        """Build a config from environment variables and explicit overrides.

        Overrides whose value is None are ignored so CLI options can be
        passed through unconditionally.

        Environment variables:
            CHAT_MODEL: Chat completion model
            CHAT_IMAGE_MODEL: Image generation model
            CHAT_CHATS_DIR: Transcript directory
            CHAT_IMAGES_DIR: Generated image directory
        """
        values: dict[str, Any] = {}
        for field, env_name in _ENV_OVERRIDES.items():
            env_value = os.getenv(env_name)
            if env_value:
                values[field] = env_value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def ensure_directories(self) -> None:
        """Create the transcript and image directories.

        Raises:
            ConfigError: If either directory cannot be created
        """
        for directory in (self.chats_dir, self.images_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ConfigError(f"Error creating {directory} directory: {e}") from e


def get_api_key() -> str:
    """Read the API credential from the environment.

    Raises:
        ConfigError: If the variable is unset or empty
    """
    api_key = os.getenv(API_KEY_ENV, "").strip()
    if not api_key:
        raise ConfigError(f"{API_KEY_ENV} environment variable not set")
    return api_key
