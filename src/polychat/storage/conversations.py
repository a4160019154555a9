"""Conversation store over a key-value backend.

Application state lives in three independent keys:

    config                -> JSON provider config
    conversations         -> JSON array of conversations
    activeConversationId  -> raw id string

Writes to different keys are not atomic together; readers must tolerate an
active id that points at a conversation that no longer exists.
"""

import json
import logging

from pydantic import TypeAdapter, ValidationError

from ..exceptions import ConfigInvalid, ImportParseError
from ..llm.models import BaseProviderConfig, parse_provider_config
from .base import KeyValueStore
from .codec import decode_import, encode_export
from .models import Conversation

logger = logging.getLogger(__name__)

CONFIG_KEY = "config"
CONVERSATIONS_KEY = "conversations"
ACTIVE_CONVERSATION_KEY = "activeConversationId"

_conversations_adapter: TypeAdapter[list[Conversation]] = TypeAdapter(list[Conversation])


class ConversationStore:
    """CRUD over conversations and provider config.

    Single-writer: no locking is done, concurrent writers race and the last
    write wins.
    """

    def __init__(self, kv: KeyValueStore):
        self._kv = kv

    @property
    def kv(self) -> KeyValueStore:
        return self._kv

    # Config

    async def save_config(self, config: BaseProviderConfig) -> None:
        """Replace the stored config wholesale."""
        await self._kv.set(CONFIG_KEY, json.dumps(config.to_wire()))

    async def get_config(self) -> BaseProviderConfig | None:
        """Load the stored config, tagging legacy Azure configs.

        A stored blob that no longer parses is logged and treated as absent.
        """
        raw = await self._kv.get(CONFIG_KEY)
        if raw is None:
            return None
        try:
            return parse_provider_config(json.loads(raw))
        except (json.JSONDecodeError, ConfigInvalid) as e:
            logger.warning("Ignoring unreadable stored config: %s", e)
            return None

    # Conversations

    async def get_conversations(self) -> list[Conversation]:
        """All conversations in insertion order."""
        raw = await self._kv.get(CONVERSATIONS_KEY)
        if not raw:
            return []
        return _conversations_adapter.validate_json(raw)

    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        for conversation in await self.get_conversations():
            if conversation.id == conversation_id:
                return conversation
        return None

    async def _write_conversations(self, conversations: list[Conversation]) -> None:
        payload = _conversations_adapter.dump_json(conversations, by_alias=True)
        await self._kv.set(CONVERSATIONS_KEY, payload.decode("utf-8"))

    async def save_conversation(self, conversation: Conversation) -> None:
        """Upsert by id.

        An existing entry is replaced in place; a new id is appended.
        """
        conversations = await self.get_conversations()
        for index, existing in enumerate(conversations):
            if existing.id == conversation.id:
                conversations[index] = conversation
                break
        else:
            conversations.append(conversation)
        await self._write_conversations(conversations)

    async def delete_conversation(self, conversation_id: str) -> None:
        """Remove a conversation, clearing the active id if it pointed there."""
        conversations = [c for c in await self.get_conversations() if c.id != conversation_id]
        await self._write_conversations(conversations)

        if await self.get_active_conversation_id() == conversation_id:
            await self.clear_active_conversation_id()

    # Active conversation

    async def set_active_conversation_id(self, conversation_id: str) -> None:
        await self._kv.set(ACTIVE_CONVERSATION_KEY, conversation_id)

    async def get_active_conversation_id(self) -> str | None:
        return await self._kv.get(ACTIVE_CONVERSATION_KEY)

    async def clear_active_conversation_id(self) -> None:
        await self._kv.delete(ACTIVE_CONVERSATION_KEY)

    async def resolve_active_conversation(self) -> Conversation | None:
        """The active conversation, else the first one, else None."""
        conversations = await self.get_conversations()
        active_id = await self.get_active_conversation_id()
        for conversation in conversations:
            if conversation.id == active_id:
                return conversation
        return conversations[0] if conversations else None

    # Import / export

    async def export_data(self) -> str:
        """Serialize config and conversations as a version 2.0 document."""
        return encode_export(await self.get_config(), await self.get_conversations())

    async def import_data(self, text: str) -> bool:
        """Apply an import document.

        The document is fully decoded before anything is written, so a bad
        document leaves storage untouched. The config is overwritten when
        present; the conversation list is replaced, not merged.

        Returns:
            False if the document could not be parsed, True otherwise
        """
        try:
            payload = decode_import(text)
        except ImportParseError as e:
            logger.error("Error importing data: %s", e)
            return False

        if payload.config is not None:
            await self.save_config(payload.config)
        if payload.conversations is not None:
            await self._write_conversations(payload.conversations)

        logger.info(
            "Imported %s config and %d conversations",
            "a" if payload.config is not None else "no",
            len(payload.conversations or []),
        )
        return True
