"""Chat orchestration.

``ChatSession`` is the application-level glue between user actions, the
conversation store and the active provider adapter. It mirrors the stored
state in memory, persists at well-defined checkpoints and turns every
``ChatError`` into a ``Notification`` instead of raising.

Turn state machine::

    IDLE -> AWAITING_RESPONSE -> (STREAMING)* -> IDLE
                      \\______ on failure ______/
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ..exceptions import ChatError
from ..llm import DEFAULT_CONFIG, BaseProviderConfig, ChatMessage, ChatService, create_chat_service
from ..settings import DEFAULT_SYSTEM_PROMPT
from ..storage import Conversation, ConversationStore
from ..storage.models import utcnow

logger = logging.getLogger(__name__)

ServiceFactory = Callable[[BaseProviderConfig], ChatService]
UpdateCallback = Callable[[Conversation], None]
NotifyCallback = Callable[["Notification"], None]


class TurnState(str, Enum):
    """Where the session is within a send/receive cycle."""

    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    STREAMING = "streaming"


@dataclass(frozen=True)
class Notification:
    """A user-visible message raised by a session action."""

    level: str  # "error", "success" or "info"
    message: str


class ChatSession:
    """Application state plus the actions a user can take on it.

    Hidden design decisions:
    - When each change is persisted (user message before the network call,
      assistant reply only once complete)
    - How a failed turn is rolled back
    - Rebuilding the adapter whenever the config changes

    Concurrent ``send_message`` calls are not serialized; they race on the
    same conversation record and the last write to the store wins.
    """

    def __init__(
        self,
        store: ConversationStore,
        service_factory: ServiceFactory | None = None,
        on_update: UpdateCallback | None = None,
        on_notify: NotifyCallback | None = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ):
        """Initialize the session.

        Args:
            store: Conversation store to persist to
            service_factory: Builds an adapter from a config (default: create_chat_service)
            on_update: Called with a conversation snapshot whenever the
                displayed conversation changes, including once per chunk
            on_notify: Called with every notification
            system_prompt: Seed message for new and cleared conversations
        """
        self._store = store
        self._service_factory = service_factory or create_chat_service
        self._on_update = on_update
        self._on_notify = on_notify
        self._system_prompt = system_prompt

        self._config: BaseProviderConfig = DEFAULT_CONFIG
        self._conversations: list[Conversation] = []
        self._active_id: str | None = None
        self._service: ChatService | None = None
        self._state = TurnState.IDLE
        self.notifications: list[Notification] = []

    # State accessors

    @property
    def config(self) -> BaseProviderConfig:
        return self._config

    @property
    def conversations(self) -> list[Conversation]:
        return list(self._conversations)

    @property
    def active_conversation_id(self) -> str | None:
        return self._active_id

    @property
    def active_conversation(self) -> Conversation | None:
        return self._find(self._active_id)

    @property
    def service(self) -> ChatService | None:
        return self._service

    @property
    def state(self) -> TurnState:
        return self._state

    # Internals

    def _find(self, conversation_id: str | None) -> Conversation | None:
        if conversation_id is None:
            return None
        for conversation in self._conversations:
            if conversation.id == conversation_id:
                return conversation
        return None

    def _replace(self, conversation: Conversation) -> None:
        for index, existing in enumerate(self._conversations):
            if existing.id == conversation.id:
                self._conversations[index] = conversation
                return
        self._conversations.append(conversation)

    def _publish(self, conversation: Conversation) -> None:
        if self._on_update is not None:
            self._on_update(conversation)

    def _notify(self, level: str, message: str) -> None:
        notification = Notification(level=level, message=message)
        self.notifications.append(notification)
        if self._on_notify is not None:
            self._on_notify(notification)

    async def _rebuild_service(self) -> None:
        """Replace the adapter for the current config, closing the old one."""
        previous, self._service = self._service, None
        if previous is not None:
            await previous.close()

        try:
            self._service = self._service_factory(self._config)
        except ChatError as e:
            logger.error("Error initializing chat service: %s", e)
            self._notify("error", "Failed to initialize AI service")
            return

        if not self._service.validate_config():
            logger.warning("Invalid configuration for provider: %s", self._config.provider)

    # Lifecycle

    async def load(self) -> None:
        """Read config, conversations and the active pointer from storage."""
        self._config = await self._store.get_config() or DEFAULT_CONFIG
        self._conversations = await self._store.get_conversations()

        active_id = await self._store.get_active_conversation_id()
        if self._find(active_id) is not None:
            self._active_id = active_id
        elif self._conversations:
            self._active_id = self._conversations[0].id
        else:
            self._active_id = None

        await self._rebuild_service()

    async def close(self) -> None:
        if self._service is not None:
            await self._service.close()
            self._service = None

    async def save_config(self, config: BaseProviderConfig) -> None:
        """Replace the config wholesale and rebuild the adapter."""
        self._config = config
        await self._store.save_config(config)
        await self._rebuild_service()

    # Conversation actions

    async def new_conversation(self, name: str | None = None) -> Conversation:
        conversation = Conversation.new(
            name=name or f"Conversation {len(self._conversations) + 1}",
            system_prompt=self._system_prompt,
            provider=self._config.provider,
        )
        self._conversations.append(conversation)
        self._active_id = conversation.id
        await self._store.save_conversation(conversation)
        await self._store.set_active_conversation_id(conversation.id)
        return conversation

    async def select_conversation(self, conversation_id: str) -> Conversation | None:
        conversation = self._find(conversation_id)
        if conversation is None:
            self._notify("error", f"Conversation {conversation_id} not found")
            return None
        self._active_id = conversation_id
        await self._store.set_active_conversation_id(conversation_id)
        return conversation

    async def rename_conversation(self, conversation_id: str, name: str) -> Conversation | None:
        conversation = self._find(conversation_id)
        if conversation is None:
            self._notify("error", f"Conversation {conversation_id} not found")
            return None
        renamed = conversation.model_copy(update={"name": name, "updated_at": utcnow()})
        self._replace(renamed)
        await self._store.save_conversation(renamed)
        return renamed

    async def delete_conversation(self, conversation_id: str) -> bool:
        """Delete a conversation; the active pointer moves to the first remaining one.

        Returns:
            False if no conversation has that id
        """
        if self._find(conversation_id) is None:
            self._notify("error", f"Conversation {conversation_id} not found")
            return False

        self._conversations = [c for c in self._conversations if c.id != conversation_id]
        await self._store.delete_conversation(conversation_id)

        if self._active_id == conversation_id:
            self._active_id = self._conversations[0].id if self._conversations else None
            if self._active_id is not None:
                await self._store.set_active_conversation_id(self._active_id)
        return True

    async def clear_conversation(self) -> Conversation | None:
        """Drop every message of the active conversation except the system prompt."""
        conversation = self.active_conversation
        if conversation is None:
            return None
        cleared = conversation.cleared(self._system_prompt)
        self._replace(cleared)
        await self._store.save_conversation(cleared)
        self._notify("success", "Conversation cleared")
        return cleared

    # Turns

    async def send_message(self, text: str) -> Conversation | None:
        """Run one send/receive turn on the active conversation.

        The user message is persisted before the request goes out. Each
        streamed chunk republishes a snapshot through ``on_update``; the reply
        is persisted only once complete. On failure the placeholder is
        dropped, the conversation is persisted with the user message only and
        a single error notification is recorded.

        Returns:
            The conversation after a successful turn, otherwise None
        """
        if not text.strip():
            return None

        conversation = self.active_conversation
        service = self._service
        if conversation is None or service is None or not service.validate_config():
            name = service.provider_name if service is not None else self._config.provider
            self._notify("error", f"Please configure {name} settings first")
            return None

        with_user = conversation.model_copy(update={
            "messages": [*conversation.messages, ChatMessage(role="user", content=text)],
            "updated_at": utcnow(),
            "provider": self._config.provider,
        })
        self._replace(with_user)
        await self._store.save_conversation(with_user)

        history = list(with_user.messages)
        accumulated: list[str] = []

        def snapshot(content: str) -> Conversation:
            return with_user.model_copy(update={
                "messages": [*history, ChatMessage(role="assistant", content=content)],
            })

        def on_chunk(chunk: str) -> None:
            self._state = TurnState.STREAMING
            accumulated.append(chunk)
            streaming = snapshot("".join(accumulated))
            self._replace(streaming)
            self._publish(streaming)

        self._state = TurnState.AWAITING_RESPONSE
        try:
            self._publish(snapshot(""))
            reply = await service.send_message(history, on_chunk)
        except Exception as e:
            if not isinstance(e, ChatError):
                logger.exception("Unexpected error from %s", service.provider_name)
            else:
                logger.error("API Error: %s", e)
            rolled_back = with_user.model_copy(update={"updated_at": utcnow()})
            self._replace(rolled_back)
            await self._store.save_conversation(rolled_back)
            self._notify("error", f"Error calling {service.provider_name} API")
            self._publish(rolled_back)
            return None
        finally:
            self._state = TurnState.IDLE

        final = snapshot(reply)
        final.touch()
        self._replace(final)
        await self._store.save_conversation(final)
        self._publish(final)
        return final

    # Import / export

    async def export_data(self) -> str:
        return await self._store.export_data()

    async def import_data(self, text: str) -> bool:
        """Import a document and reload state from storage on success."""
        success = await self._store.import_data(text)
        if not success:
            self._notify("error", "Failed to import data. The file may be invalid.")
            return False

        await self.load()
        self._notify("success", "Data imported successfully")
        return True
