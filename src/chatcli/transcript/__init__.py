"""Transcript persistence for chat-cli.

Writes the full conversation to disk after every turn.
"""

from .base import TranscriptStore
from .factory import create_transcript_store
from .xml_store import XMLTranscriptStore

__all__ = [
    "TranscriptStore",
    "XMLTranscriptStore",
    "create_transcript_store",
]
