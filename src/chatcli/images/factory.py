from typing import Any

from .base import ImageProvider
from .providers import OpenAIImageProvider


def create_image_provider(provider: str, **config: Any) -> ImageProvider:
    """Create an image generation provider.

    Args:
        provider: Provider type ('openai')
        **config: Provider-specific configuration
            For OpenAI:
                - api_key: str (required)
                - model: str (default: 'dall-e-3')
                - size: str (default: '1024x1024')
                - timeout: float | None

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing
    """
    provider_lower = provider.lower()

    if provider_lower == "openai":
        if "api_key" not in config:
            raise TypeError("OpenAI image provider requires 'api_key' in config")
        return OpenAIImageProvider(**config)

    raise ValueError(
        f"Unsupported image provider: {provider}. "
        f"Supported providers: 'openai'"
    )
