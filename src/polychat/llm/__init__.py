from .base import ChatService, ChunkCallback
from .factory import create_chat_service
from .models import (
    DEFAULT_CONFIG,
    PROVIDER_MODELS,
    PROVIDERS,
    AzureOpenAIConfig,
    BaseProviderConfig,
    ChatMessage,
    ClaudeConfig,
    GeminiConfig,
    GroqConfig,
    OpenAIConfig,
    ProviderConfig,
    coerce_legacy_config,
    default_config,
    is_valid_config,
    parse_provider_config,
)
from .providers import (
    AzureOpenAIService,
    ClaudeService,
    GeminiService,
    GroqService,
    OpenAIService,
)

__all__ = [
    "ChatService",
    "ChunkCallback",
    "create_chat_service",
    "DEFAULT_CONFIG",
    "PROVIDER_MODELS",
    "PROVIDERS",
    "AzureOpenAIConfig",
    "BaseProviderConfig",
    "ChatMessage",
    "ClaudeConfig",
    "GeminiConfig",
    "GroqConfig",
    "OpenAIConfig",
    "ProviderConfig",
    "coerce_legacy_config",
    "default_config",
    "is_valid_config",
    "parse_provider_config",
    "AzureOpenAIService",
    "ClaudeService",
    "GeminiService",
    "GroqService",
    "OpenAIService",
]
