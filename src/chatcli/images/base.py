from abc import ABC, abstractmethod
from typing import Any

from .models import GeneratedImage


class ImageProvider(ABC):
    """Abstract base class for image generation providers.

    Hides which backend renders the image and how its payload is encoded.
    """

    @abstractmethod
    async def generate(self, prompt: str, **kwargs: Any) -> GeneratedImage:
        """Generate one image from a free-text prompt.

        Raises:
            ImageGenerationError: If the backend fails or returns nothing usable
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""
        pass

    async def __aenter__(self) -> "ImageProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        try:
            await self.close()
        except RuntimeError as e:
            # Suppress harmless cleanup errors from httpx/anyio
            if "Event loop is closed" not in str(e):
                raise
