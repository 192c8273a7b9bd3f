import base64
import binascii
import logging
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from ...errors import ImageGenerationError
from ..base import ImageProvider
from ..models import GeneratedImage

logger = logging.getLogger(__name__)


class OpenAIImageProvider(ImageProvider):
    """OpenAI image generation provider.

    Hidden design decisions:
    - Image model and size
    - Requesting inline base64 payloads instead of hosted URLs
    - Error mapping to ImageGenerationError
    """

    def __init__(
        self,
        api_key: str,
        model: str = "dall-e-3",
        size: str = "1024x1024",
        base_url: str | None = None,
        timeout: float | None = None,
        **client_kwargs: Any
    ):
        self._model = model
        self._size = size
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        client_kwargs.setdefault("max_retries", 0)
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, **client_kwargs)

    @property
    def model(self) -> str:
        return self._model

    async def generate(self, prompt: str, **kwargs: Any) -> GeneratedImage:
        """Generate an image, returning its decoded bytes."""
        logger.debug("Requesting %s image from %s", self._size, self._model)
        try:
            response = await self._client.images.generate(
                prompt=prompt,
                model=self._model,
                size=self._size,
                response_format="b64_json",
                n=1,
                **kwargs
            )
        except OpenAIError as e:
            raise ImageGenerationError(f"failed to create image: {e}") from e

        if not response.data:
            raise ImageGenerationError("no image data in response")

        image = response.data[0]
        if image.b64_json:
            try:
                data = base64.b64decode(image.b64_json, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ImageGenerationError(f"failed to decode base64 image: {e}") from e
            return GeneratedImage(data=data, revised_prompt=image.revised_prompt)

        if image.url:
            return GeneratedImage(url=image.url, revised_prompt=image.revised_prompt)

        raise ImageGenerationError("no image data in response")

    async def close(self) -> None:
        await self._client.close()
