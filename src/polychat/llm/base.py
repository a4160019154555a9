import logging
from abc import ABC, abstractmethod
from contextlib import aclosing
from collections.abc import AsyncIterator, Callable
from typing import Any

from ..exceptions import ChatError, ProviderUnavailable, UpstreamError
from .models import BaseProviderConfig, ChatMessage, is_valid_config

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[str], None]


class ChatService(ABC):
    """Abstract base class for provider adapters.

    This module hides the design decision of which LLM provider answers a
    conversation. Implementations handle:
    - SDK client construction from the provider config
    - Mapping ChatMessage lists to the provider's wire shape
    - Extracting text from full and streamed responses

    The shared ``send_message`` owns the streaming accumulator and the error
    wrapping, so adapters only describe one request of each kind.

    Supports async context manager protocol for proper resource cleanup:
        async with create_chat_service(config) as service:
            text = await service.send_message(messages)
    """

    def __init__(self, config: BaseProviderConfig, client: Any | None = None):
        """Initialize the adapter.

        Args:
            config: Provider configuration for this adapter's variant
            client: Pre-built SDK client (skips construction from config)
        """
        self._config = config
        self._client = client if client is not None else self._init_client()

    @property
    def config(self) -> BaseProviderConfig:
        """Get the provider configuration."""
        return self._config

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Display label for the provider."""

    @abstractmethod
    def _init_client(self) -> Any | None:
        """Build the SDK client, or return None when credentials are missing."""

    @abstractmethod
    async def _complete(self, client: Any, messages: list[ChatMessage]) -> str:
        """Issue a non-streaming request and return the full text."""

    @abstractmethod
    def _stream(self, client: Any, messages: list[ChatMessage]) -> AsyncIterator[str]:
        """Issue a streaming request and yield text fragments in wire order."""

    def validate_config(self) -> bool:
        """Check that every required field for this provider is set."""
        return is_valid_config(self._config)

    async def send_message(
        self,
        messages: list[ChatMessage],
        on_chunk: ChunkCallback | None = None,
    ) -> str:
        """Send the conversation history and return the assistant's reply.

        Args:
            messages: Full history, system prompt first
            on_chunk: When given, the request streams and this is called once
                per text fragment in arrival order

        Returns:
            The full response text. When streaming, exactly the concatenation
            of the fragments passed to ``on_chunk``.

        Raises:
            ProviderUnavailable: If no client was constructed
            UpstreamError: If the request fails for any transport or API reason
        """
        if self._client is None:
            raise ProviderUnavailable(
                f"{self.provider_name} client not initialized. Please check your configuration."
            )

        logger.debug(
            "%s request: %d messages, stream=%s",
            self.provider_name,
            len(messages),
            on_chunk is not None,
        )

        if on_chunk is None:
            try:
                return await self._complete(self._client, messages)
            except ChatError:
                raise
            except Exception as e:
                raise self._upstream_error(e) from e

        parts: list[str] = []
        async with aclosing(self._stream(self._client, messages)) as stream:
            while True:
                try:
                    chunk = await stream.__anext__()
                except StopAsyncIteration:
                    break
                except ChatError:
                    raise
                except Exception as e:
                    raise self._upstream_error(e) from e
                if not chunk:
                    continue
                parts.append(chunk)
                on_chunk(chunk)

        return "".join(parts)

    def _upstream_error(self, cause: Exception) -> UpstreamError:
        logger.warning("%s request failed: %s", self.provider_name, cause)
        return UpstreamError(self.provider_name, cause)

    async def close(self) -> None:
        """Close the underlying SDK client if it holds connections."""
        if self._client is not None and hasattr(self._client, "close"):
            await self._client.close()

    async def __aenter__(self) -> "ChatService":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
