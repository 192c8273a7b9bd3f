"""Factory for creating transcript stores."""

from typing import Any

from .base import TranscriptStore


def create_transcript_store(
    backend: str = "xml",
    **kwargs: Any
) -> TranscriptStore:
    """Create a transcript store.

    Args:
        backend: Backend type ("xml")
        **kwargs: Backend-specific configuration
            For XML:
                - directory: str | Path (default: 'chats')

    Returns:
        TranscriptStore instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "xml":
        from .xml_store import XMLTranscriptStore
        return XMLTranscriptStore(**kwargs)

    raise ValueError(
        f"Unsupported transcript backend: {backend}. "
        f"Supported backends: xml"
    )
