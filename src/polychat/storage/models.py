"""Data models for persisted conversations.

These models define the structure of conversation records, independent of
the key-value backend they are stored in.
"""

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from ..llm.models import ChatMessage


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Conversation(BaseModel):
    """A named conversation: an ordered message list, system prompt first.

    The system message is never displayed and survives clearing.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(description="Display name")
    messages: list[ChatMessage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    provider: str | None = Field(default=None, description="Provider that produced the replies")

    @classmethod
    def new(cls, name: str, system_prompt: str, provider: str | None = None) -> "Conversation":
        """Create a conversation seeded with its system message."""
        now = utcnow()
        return cls(
            name=name,
            messages=[ChatMessage(role="system", content=system_prompt)],
            created_at=now,
            updated_at=now,
            provider=provider,
        )

    @field_serializer("created_at", "updated_at")
    def serialize_datetime(self, value: datetime) -> str:
        """Serialize datetime to ISO format."""
        return value.isoformat()

    @property
    def system_message(self) -> ChatMessage | None:
        if self.messages and self.messages[0].role == "system":
            return self.messages[0]
        return None

    def visible_messages(self) -> list[ChatMessage]:
        """Messages shown to the user (everything but the system prompt)."""
        return [msg for msg in self.messages if msg.role != "system"]

    def touch(self) -> None:
        self.updated_at = utcnow()

    def cleared(self, system_prompt: str) -> "Conversation":
        """Copy with only a system message left.

        The existing system message is kept; ``system_prompt`` seeds one when
        the conversation has none.
        """
        seed = self.system_message or ChatMessage(role="system", content=system_prompt)
        return self.model_copy(update={"messages": [seed], "updated_at": utcnow()})

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
