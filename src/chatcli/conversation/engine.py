"""Conversation engine.

Owns the rules for how messages accumulate and which of them are replayed
to the completion backend. Hidden design decisions:
- How conversation ids and timestamps are generated
- How the image trigger keyword is matched
- Which messages form the completion context
"""

import logging

from ..config import ChatConfig
from ..errors import ConversationError
from ..llm.models import ChatMessage
from .models import Conversation, Message, Role, new_conversation_id, now

logger = logging.getLogger(__name__)


class ConversationEngine:
    """Creates conversations and applies the append and context policies."""

    def __init__(self, config: ChatConfig):
        self._config = config
        self._trigger = config.trigger_keyword.lower()

    @property
    def config(self) -> ChatConfig:
        return self._config

    def create(self) -> Conversation:
        """Start a new conversation seeded with the system prompt.

        Returns:
            Conversation holding exactly one system message
        """
        created_at = now()
        conversation = Conversation(
            id=new_conversation_id(created_at),
            created_at=created_at,
        )
        conversation.messages.append(
            Message(role=Role.SYSTEM, content=self._config.system_prompt)
        )
        logger.debug("Created conversation %s", conversation.id)
        return conversation

    def append(self, conversation: Conversation, role: Role, content: str) -> Message:
        """Append a message stamped with the current time.

        Args:
            conversation: Conversation to extend
            role: Sender role
            content: Message text, accepted as-is

        Returns:
            The appended message

        Raises:
            ConversationError: If a second system message is appended
        """
        role = Role(role)
        if role == Role.SYSTEM and conversation.count(Role.SYSTEM) > 0:
            raise ConversationError("Conversation already has a system message")

        message = Message(role=role, content=content)
        conversation.messages.append(message)
        return message

    def is_image_request(self, content: str) -> bool:
        """Check whether user input contains the image trigger keyword.

        Plain case-insensitive substring match, so the keyword also
        matches inside longer words.
        """
        return self._trigger in content.lower()

    def build_completion_context(self, conversation: Conversation) -> list[ChatMessage]:
        """Select the messages to send to the completion backend.

        All messages are kept in order except user messages that triggered
        image generation. Assistant and system content is never checked.
        """
        return [
            ChatMessage(role=msg.role, content=msg.content)
            for msg in conversation.messages
            if not (msg.role == Role.USER and self.is_image_request(msg.content))
        ]
