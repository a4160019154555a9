"""OpenAI chat completions adapter.

Uses the official OpenAI Python SDK.
Reference: https://github.com/openai/openai-python
"""

from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from ..base import ChatService
from ..models import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_PENALTY,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_P,
    ChatMessage,
    OpenAIConfig,
)


def _to_openai_messages(messages: list[ChatMessage]) -> list[dict[str, str]]:
    """Chat Completions accepts system/user/assistant roles unchanged."""
    return [{"role": msg.role, "content": msg.content} for msg in messages]


class OpenAIService(ChatService):
    """OpenAI adapter.

    Hidden design decisions:
    - OpenAI API client initialization (retries disabled)
    - Generation parameter defaults
    - Delta extraction from streamed chunks
    """

    _config: OpenAIConfig

    @property
    def provider_name(self) -> str:
        return "OpenAI"

    def _init_client(self) -> AsyncOpenAI | None:
        if not self._config.api_key:
            return None
        return AsyncOpenAI(api_key=self._config.api_key, max_retries=0)

    @property
    def _model(self) -> str:
        return self._config.model

    def _request_params(self, messages: list[ChatMessage]) -> dict[str, Any]:
        """Build Chat Completions parameters with defaults for absent fields."""
        cfg = self._config
        return {
            "model": self._model,
            "messages": _to_openai_messages(messages),
            "temperature": cfg.temperature if cfg.temperature is not None else DEFAULT_TEMPERATURE,
            "max_tokens": cfg.max_tokens or DEFAULT_MAX_TOKENS,
            "top_p": cfg.top_p if cfg.top_p is not None else DEFAULT_TOP_P,
            "frequency_penalty": (
                cfg.frequency_penalty if cfg.frequency_penalty is not None else DEFAULT_PENALTY
            ),
            "presence_penalty": (
                cfg.presence_penalty if cfg.presence_penalty is not None else DEFAULT_PENALTY
            ),
        }

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
