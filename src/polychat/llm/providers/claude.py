"""Anthropic Claude adapter.

Uses the official Anthropic Python SDK.
Reference: https://github.com/anthropics/anthropic-sdk-python
"""

from collections.abc import AsyncIterator
from typing import Any

from anthropic import AsyncAnthropic

from ...exceptions import ConfigInvalid
from ..base import ChatService
from ..models import DEFAULT_TEMPERATURE, ChatMessage, ClaudeConfig


def _split_system(messages: list[ChatMessage]) -> tuple[str | None, list[dict[str, str]]]:
    """Separate the system prompt from the conversation turns.

    The Messages API takes the system prompt as a top-level parameter and
    only user/assistant turns in ``messages``.
    """
    system_message = None
    turns = []
    for msg in messages:
        if msg.role == "system":
            if system_message is None:
                system_message = msg.content
        else:
            turns.append({"role": msg.role, "content": msg.content})
    return system_message, turns


class ClaudeService(ChatService):
    """Anthropic Claude adapter.

    Hidden design decisions:
    - Anthropic API client initialization (retries disabled)
    - System message handling
    - Text extraction from content blocks and stream events
    """

    _config: ClaudeConfig

    @property
    def provider_name(self) -> str:
        return "Claude"

    def _init_client(self) -> AsyncAnthropic | None:
        if not self._config.api_key:
            return None
        return AsyncAnthropic(api_key=self._config.api_key, max_retries=0)

    def _request_params(self, messages: list[ChatMessage]) -> dict[str, Any]:
        cfg = self._config
        if not cfg.max_tokens:
            # Anthropic requires max_tokens and there is no sensible default
            raise ConfigInvalid("Claude requires maxTokens to be configured")

        system_message, turns = _split_system(messages)
        params: dict[str, Any] = {
            "model": cfg.model,
            "messages": turns,
            "max_tokens": cfg.max_tokens,
            "temperature": cfg.temperature if cfg.temperature is not None else DEFAULT_TEMPERATURE,
        }
        if system_message:
            params["system"] = system_message
        return params

    async def _complete(self, client: Any, messages: list[ChatMessage]) -> str:
        response = await client.messages.create(**self._request_params(messages))

        content = ""
        for block in response.content:
            if getattr(block, "type", None) == "text":
                content += block.text
        return content

    async def _stream(self, client: Any, messages: list[ChatMessage]) -> AsyncIterator[str]:
        params = self._request_params(messages)
        async with client.messages.stream(**params) as stream:
            async for event in stream:
                if (
                    getattr(event, "type", None) == "content_block_delta"
                    and getattr(event.delta, "type", None) == "text_delta"
                ):
                    yield event.delta.text
