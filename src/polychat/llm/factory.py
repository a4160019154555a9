from typing import Any

from ..exceptions import ConfigInvalid, UnsupportedProvider
from .base import ChatService
from .models import BaseProviderConfig, parse_provider_config
from .providers import (
    AzureOpenAIService,
    ClaudeService,
    GeminiService,
    GroqService,
    OpenAIService,
)

_SERVICES: dict[str, type[ChatService]] = {
    "azure": AzureOpenAIService,
    "openai": OpenAIService,
    "claude": ClaudeService,
    "gemini": GeminiService,
    "groq": GroqService,
}


def create_chat_service(config: BaseProviderConfig | dict[str, Any], **kwargs: Any) -> ChatService:
    """Create the adapter matching a provider configuration.

    This factory function hides which adapter class serves which provider.
    Nothing is cached: rebuild the service whenever the configuration changes
    and close the previous instance.

    Args:
        config: Provider config model, or a raw mapping (legacy Azure configs
            without a ``provider`` tag are accepted)
        **kwargs: Passed to the adapter constructor (e.g. ``client``)

    Returns:
        Adapter instance for the config's provider

    Raises:
        UnsupportedProvider: If the provider tag is not recognized

    Examples:
        >>> service = create_chat_service(
        ...     {"provider": "claude", "apiKey": "sk-ant-...", "model": "claude-3-haiku-20240307",
        ...      "maxTokens": 1024}
        ... )
        >>> service.provider_name
        'Claude'
    """
    if isinstance(config, dict):
        tag = config.get("provider")
        if tag is not None and tag not in _SERVICES:
            raise UnsupportedProvider(f"Unsupported provider: {tag}")
        try:
            config = parse_provider_config(config)
        except ConfigInvalid as e:
            if tag is None:
                raise UnsupportedProvider("Unsupported provider: None", details=e.details) from e
            raise

    service_cls = _SERVICES.get(getattr(config, "provider", None))
    if service_cls is None:
        raise UnsupportedProvider(
            f"Unsupported provider: {getattr(config, 'provider', None)}. "
            f"Supported providers: {', '.join(_SERVICES)}"
        )
    return service_cls(config, **kwargs)
