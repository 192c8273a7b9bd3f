"""Abstract base class for transcript stores.

The abstraction hides:
- File format of a persisted conversation
- Where transcripts live and how they are named
- How a save is made atomic
"""

from abc import ABC, abstractmethod
from pathlib import Path

from ..conversation.models import Conversation


class TranscriptStore(ABC):
    """Persists whole conversations, one file per conversation."""

    @abstractmethod
    def path_for(self, conversation: Conversation) -> Path:
        """Deterministic location of a conversation's transcript. No I/O."""

    @abstractmethod
    def save(self, conversation: Conversation) -> Path:
        """Overwrite the transcript with the conversation's current state.

        Raises:
            TranscriptError: If the transcript cannot be serialized or written
        """

    @abstractmethod
    def load(self, path: str | Path) -> Conversation:
        """Read a transcript back into a conversation.

        Raises:
            TranscriptError: If the file is unreadable or malformed
        """

    @abstractmethod
    def list_transcripts(self) -> list[Path]:
        """Transcript files currently in the store."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
