"""
Polychat: a multi-provider LLM chat client with local conversation storage.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .chat import ChatSession, Notification, TurnState
from .exceptions import (
    ChatError,
    ConfigInvalid,
    ImportParseError,
    ProviderUnavailable,
    UnsupportedProvider,
    UpstreamError,
)
from .llm import ChatMessage, ChatService, create_chat_service, parse_provider_config
from .storage import Conversation, ConversationStore, create_key_value_store

__all__ = [
    "ChatSession",
    "Notification",
    "TurnState",
    "ChatError",
    "ConfigInvalid",
    "ImportParseError",
    "ProviderUnavailable",
    "UnsupportedProvider",
    "UpstreamError",
    "ChatMessage",
    "ChatService",
    "create_chat_service",
    "parse_provider_config",
    "Conversation",
    "ConversationStore",
    "create_key_value_store",
]
