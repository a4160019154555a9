"""Storage abstraction layer for polychat."""

from .base import KeyValueStore
from .codec import EXPORT_VERSION, ImportPayload, decode_import, encode_export, export_filename
from .conversations import ConversationStore
from .factory import create_key_value_store
from .in_memory import InMemoryKeyValueStore
from .models import Conversation

__all__ = [
    "KeyValueStore",
    "create_key_value_store",
    "InMemoryKeyValueStore",
    "ConversationStore",
    "Conversation",
    "EXPORT_VERSION",
    "ImportPayload",
    "decode_import",
    "encode_export",
    "export_filename",
]
