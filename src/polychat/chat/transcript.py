"""Plain-text rendering of a conversation for copying."""

from ..storage.models import Conversation

ROLE_LABELS = {"user": "User", "assistant": "Assistant"}


def transcript(conversation: Conversation) -> str:
    """Render visible messages as ``User: ...`` / ``Assistant: ...`` blocks."""
    return "\n\n".join(
        f"{ROLE_LABELS[msg.role]}: {msg.content}" for msg in conversation.visible_messages()
    )
