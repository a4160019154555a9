"""Google Gemini adapter.

Uses the official Google GenAI SDK.
Reference: https://github.com/googleapis/python-genai
"""

from collections.abc import AsyncIterator
from typing import Any

from google import genai
from google.genai import types

from ..base import ChatService
from ..models import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_K,
    DEFAULT_TOP_P,
    ChatMessage,
    GeminiConfig,
)


def _convert_messages(messages: list[ChatMessage]) -> tuple[str | None, list[types.Content]]:
    """Convert ChatMessage list to Gemini format.

    The system prompt becomes the system instruction, ``assistant`` turns are
    sent with role ``model`` and every content string is wrapped in a Part.

    Returns:
        Tuple of (system_instruction, contents)
    """
    system_instruction = None
    contents = []

    for msg in messages:
        if msg.role == "system":
            if system_instruction is None:
                system_instruction = msg.content
            continue
        contents.append(types.Content(
            role="model" if msg.role == "assistant" else "user",
            parts=[types.Part(text=msg.content)]
        ))

    return system_instruction, contents


def _extract_text(response: Any) -> str:
    """Join the text parts of the first candidate, tolerating empty chunks."""
    candidates = getattr(response, "candidates", None)
    if candidates:
        content = candidates[0].content
        if content and content.parts:
            return "".join(part.text for part in content.parts if getattr(part, "text", None))
    return ""


class GeminiService(ChatService):
    """Google Gemini adapter.

    Hidden design decisions:
    - Google GenAI client initialization
    - Message format conversion (roles and parts)
    - Generation config defaults (topK 40)
    """

    _config: GeminiConfig

    @property
    def provider_name(self) -> str:
        return "Gemini"

    def _init_client(self) -> genai.Client | None:
        if not self._config.api_key:
            return None
        return genai.Client(api_key=self._config.api_key)

    def _generation_config(self, system_instruction: str | None) -> types.GenerateContentConfig:
        cfg = self._config
        return types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=cfg.temperature if cfg.temperature is not None else DEFAULT_TEMPERATURE,
            top_k=cfg.top_k if cfg.top_k is not None else DEFAULT_TOP_K,
            top_p=cfg.top_p if cfg.top_p is not None else DEFAULT_TOP_P,
            max_output_tokens=cfg.max_tokens or DEFAULT_MAX_TOKENS,
        )

    async def _complete(self, client: Any, messages: list[ChatMessage]) -> str:
        system_instruction, contents = _convert_messages(messages)
        response = await client.aio.models.generate_content(
            model=self._config.model,
            contents=contents,
            config=self._generation_config(system_instruction),
        )
        return _extract_text(response)

    async def _stream(self, client: Any, messages: list[ChatMessage]) -> AsyncIterator[str]:
        system_instruction, contents = _convert_messages(messages)
        stream = await client.aio.models.generate_content_stream(
            model=self._config.model,
            contents=contents,
            config=self._generation_config(system_instruction),
        )
        async for chunk in stream:
            text = _extract_text(chunk)
            if text:
                yield text

    async def close(self) -> None:
        """Close the Gemini client.

        Note: The Google GenAI client doesn't require explicit closing,
        but we implement this for interface consistency.
        """
        pass
