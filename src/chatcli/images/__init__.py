from .base import ImageProvider
from .factory import create_image_provider
from .models import GeneratedImage
from .providers import OpenAIImageProvider
from .storage import ImageArtifactStore

__all__ = [
    "GeneratedImage",
    "ImageArtifactStore",
    "ImageProvider",
    "OpenAIImageProvider",
    "create_image_provider",
]
