"""Conversation state for chat-cli.

Provides the message model and the engine that applies the append and
completion-context policies.
"""

from .engine import ConversationEngine
from .models import Conversation, Message, Role

__all__ = [
    "Conversation",
    "ConversationEngine",
    "Message",
    "Role",
]
