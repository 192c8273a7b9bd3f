"""
chat-cli: An interactive terminal chat client with XML transcripts.

Each package hides one design decision: how conversations grow
(conversation), how they are persisted (transcript), and which backend
answers text and image turns (llm, images).
"""

__version__ = "0.1.0"

from .config import ChatConfig
from .conversation import Conversation, ConversationEngine, Message, Role
from .errors import (
    ChatError,
    CompletionError,
    ConfigError,
    ConversationError,
    EmptyCompletionError,
    ImageGenerationError,
    TranscriptError,
)
from .transcript import TranscriptStore, XMLTranscriptStore, create_transcript_store

__all__ = [
    "ChatConfig",
    "ChatError",
    "CompletionError",
    "ConfigError",
    "Conversation",
    "ConversationEngine",
    "ConversationError",
    "EmptyCompletionError",
    "ImageGenerationError",
    "Message",
    "Role",
    "TranscriptError",
    "TranscriptStore",
    "XMLTranscriptStore",
    "create_transcript_store",
]
