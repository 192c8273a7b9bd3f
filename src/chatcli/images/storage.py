"""Storage for generated image artifacts.

Hidden design decisions:
- File naming (``img_<unix-seconds>.png``)
- What gets recorded when the backend only returned a URL
"""

import logging
import time
from pathlib import Path

from ..errors import ImageGenerationError
from .models import GeneratedImage

logger = logging.getLogger(__name__)


class ImageArtifactStore:
    """Writes generated images into a dedicated directory.

    Two images generated within the same second share a file name and the
    later one overwrites the earlier one.
    """

    def __init__(self, directory: str | Path = "images"):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, timestamp: float | None = None) -> Path:
        """File path for an image created at ``timestamp`` (defaults to now)."""
        seconds = int(time.time() if timestamp is None else timestamp)
        return self._directory / f"img_{seconds}.png"

    def save(self, image: GeneratedImage, timestamp: float | None = None) -> str:
        """Persist an image and return the reference to record.

        Returns:
            The written file path, or the image URL when no bytes were returned

        Raises:
            ImageGenerationError: If the file cannot be written
        """
        if image.data is None:
            return image.url or ""

        path = self.path_for(timestamp)
        try:
            path.write_bytes(image.data)
        except OSError as e:
            raise ImageGenerationError(f"failed to write image to file: {e}") from e

        logger.debug("Wrote %d bytes to %s", len(image.data), path)
        return str(path)
