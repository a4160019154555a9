"""Groq adapter.

Uses Groq's OpenAI-compatible chat completions API through the groq SDK.
"""

from collections.abc import AsyncIterator
from typing import Any

import groq

from ..base import ChatService
from ..models import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_P,
    ChatMessage,
    GroqConfig,
)


class GroqService(ChatService):
    """Groq adapter.

    Hidden design decisions:
    - Groq client initialization (retries disabled)
    - Stop sequence forwarding
    """

    _config: GroqConfig

    @property
    def provider_name(self) -> str:
        return "Groq"

    def _init_client(self) -> groq.AsyncGroq | None:
        if not self._config.api_key:
            return None
        return groq.AsyncGroq(api_key=self._config.api_key, max_retries=0)

    def _request_params(self, messages: list[ChatMessage]) -> dict[str, Any]:
        cfg = self._config
        params: dict[str, Any] = {
            "model": cfg.model,
            "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
            "temperature": cfg.temperature if cfg.temperature is not None else DEFAULT_TEMPERATURE,
            "max_tokens": cfg.max_tokens or DEFAULT_MAX_TOKENS,
            "top_p": cfg.top_p if cfg.top_p is not None else DEFAULT_TOP_P,
        }
        if cfg.stop:
            params["stop"] = list(cfg.stop)
        return params

    async def _complete(self, client: Any, messages: list[ChatMessage]) -> str:
        completion = await client.chat.completions.create(
            **self._request_params(messages), stream=False
        )
        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    async def _stream(self, client: Any, messages: list[ChatMessage]) -> AsyncIterator[str]:
        stream = await client.chat.completions.create(
            **self._request_params(messages), stream=True
        )
        async for chunk in stream:
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content
