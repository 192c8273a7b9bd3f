"""Data models for a chat conversation.

These models define the in-memory conversation record, independent of
the transcript format used to persist it.
"""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from ..llm.models import Role


def now() -> datetime:
    """Current local time, timezone-aware, truncated to whole seconds."""
    return datetime.now().astimezone().replace(microsecond=0)


def new_conversation_id(created_at: datetime | None = None) -> str:
    """Generate a time-based conversation id.

    The random suffix keeps ids created within the same second distinct.
    """
    stamp = int((created_at or now()).timestamp())
    return f"chat_{stamp}_{uuid4().hex[:8]}"


class Message(BaseModel):
    """One turn in the conversation. Never mutated after it is appended."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Role of the message sender")
    content: str = Field(description="Text of the message")
    timestamp: datetime = Field(default_factory=now, description="When the message was appended")


class Conversation(BaseModel):
    """A chat session: identity plus the ordered message history."""

    id: str = Field(default_factory=new_conversation_id, frozen=True)
    created_at: datetime = Field(default_factory=now, frozen=True)
    messages: list[Message] = Field(default_factory=list)

    @property
    def system_message(self) -> Message | None:
        """The seeded system message, if the conversation has one."""
        if self.messages and self.messages[0].role == Role.SYSTEM:
            return self.messages[0]
        return None

    def count(self, role: Role) -> int:
        """Number of messages with the given role."""
        return sum(1 for msg in self.messages if msg.role == role)

    def __len__(self) -> int:
        return len(self.messages)
