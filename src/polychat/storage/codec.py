"""JSON codec for exporting and importing the full application state.

Export document layout::

    {
      "config": {...} | null,
      "conversations": [...],
      "version": "2.0"
    }

Documents without ``version`` come from the Azure-only release; their config
has no ``provider`` tag and is upgraded on import.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any

from pydantic import TypeAdapter, ValidationError

from ..exceptions import ConfigInvalid, ImportParseError
from ..llm.models import BaseProviderConfig, coerce_legacy_config, parse_provider_config
from .models import Conversation

logger = logging.getLogger(__name__)

EXPORT_VERSION = "2.0"
LEGACY_VERSION = "1.0"

_conversations_adapter: TypeAdapter[list[Conversation]] = TypeAdapter(list[Conversation])


@dataclass(frozen=True)
class ImportPayload:
    """Decoded import document.

    ``conversations`` is None when the document has no conversation array,
    which leaves the stored list untouched.
    """

    config: BaseProviderConfig | None
    conversations: list[Conversation] | None
    version: str


def encode_export(
    config: BaseProviderConfig | None,
    conversations: list[Conversation],
) -> str:
    """Serialize config and conversations as pretty-printed JSON."""
    document = {
        "config": config.to_wire() if config is not None else None,
        "conversations": [conv.to_wire() for conv in conversations],
        "version": EXPORT_VERSION,
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def decode_import(text: str) -> ImportPayload:
    """Parse and validate an import document without touching storage.

    Raises:
        ImportParseError: If the text is not JSON, not an object, holds a
            config or conversation that does not validate, or repeats a
            conversation id
    """
    try:
        data = json.loads(text)
    except (ValueError, TypeError, RecursionError) as e:
        raise ImportParseError(details=str(e)) from e

    if not isinstance(data, dict):
        raise ImportParseError(details="document root must be a JSON object")

    version = str(data.get("version") or LEGACY_VERSION)

    config = None
    raw_config: Any = data.get("config")
    if raw_config:
        if not isinstance(raw_config, dict):
            raise ImportParseError(details="config must be an object")
        try:
            config = parse_provider_config(coerce_legacy_config(raw_config))
        except ConfigInvalid as e:
            raise ImportParseError("Invalid config in import document", details=e.details) from e

    conversations = None
    raw_conversations = data.get("conversations")
    if isinstance(raw_conversations, list):
        try:
            conversations = _conversations_adapter.validate_python(raw_conversations)
        except ValidationError as e:
            raise ImportParseError("Invalid conversations in import document", details=str(e)) from e

        seen: set[str] = set()
        for conversation in conversations:
            if conversation.id in seen:
                raise ImportParseError(
                    "Invalid conversations in import document",
                    details=f"duplicate conversation id {conversation.id}",
                )
            seen.add(conversation.id)

    if version != EXPORT_VERSION:
        logger.info("Upgrading import document from version %s", version)

    return ImportPayload(config=config, conversations=conversations, version=version)


def export_filename(today: date | None = None) -> str:
    """Default file name for a downloaded export."""
    day = today or date.today()
    return f"polychat-export-{day.isoformat()}.json"
