"""Data models for chat messages and provider configuration.

Provider configuration is a tagged union keyed by ``provider``. Serialized
form uses camelCase keys (``apiKey``, ``deploymentName``, ...), the layout of
the persisted state and of export documents.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from ..exceptions import ConfigInvalid, UnsupportedProvider

ProviderName = Literal["azure", "openai", "claude", "gemini", "groq"]

PROVIDERS: tuple[str, ...] = ("azure", "openai", "claude", "gemini", "groq")

# Generation defaults applied by adapters when a field is absent
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 800
DEFAULT_TOP_P = 0.95
DEFAULT_TOP_K = 40
DEFAULT_PENALTY = 0.0

DEFAULT_AZURE_API_VERSION = "2023-05-15"
DEFAULT_CLAUDE_MAX_TOKENS = 4096

# Model options offered per provider, first entry is the default
PROVIDER_MODELS: dict[str, list[str]] = {
    "openai": ["gpt-4-turbo-preview", "gpt-4", "gpt-3.5-turbo", "gpt-3.5-turbo-16k"],
    "claude": [
        "claude-3-opus-20240229",
        "claude-3-sonnet-20240229",
        "claude-3-haiku-20240307",
        "claude-2.1",
        "claude-2.0",
    ],
    "gemini": ["gemini-pro", "gemini-pro-vision"],
    "groq": ["mixtral-8x7b-32768", "llama2-70b-4096", "gemma-7b-it"],
}


class ChatMessage(BaseModel):
    """Represents a chat message in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"] = Field(
        description="Role of the message sender: 'user', 'assistant', or 'system'"
    )
    content: str = Field(description="Content of the message")


class BaseProviderConfig(BaseModel):
    """Fields shared by every provider configuration."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    api_key: str = Field(default="", description="Provider API key")
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, ge=1)

    def to_wire(self) -> dict[str, Any]:
        """Dump with camelCase keys, dropping unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AzureOpenAIConfig(BaseProviderConfig):
    provider: Literal["azure"] = "azure"
    endpoint: str = ""
    deployment_name: str = ""
    api_version: str = DEFAULT_AZURE_API_VERSION
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None


class OpenAIConfig(BaseProviderConfig):
    provider: Literal["openai"] = "openai"
    model: str = ""
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None


class ClaudeConfig(BaseProviderConfig):
    """Claude has no max_tokens default; a config without one is invalid."""

    provider: Literal["claude"] = "claude"
    model: str = ""


class GeminiConfig(BaseProviderConfig):
    provider: Literal["gemini"] = "gemini"
    model: str = ""
    top_p: float | None = None
    top_k: int | None = None


class GroqConfig(BaseProviderConfig):
    provider: Literal["groq"] = "groq"
    model: str = ""
    top_p: float | None = None
    stop: list[str] | None = None


ProviderConfig = Annotated[
    Union[AzureOpenAIConfig, OpenAIConfig, ClaudeConfig, GeminiConfig, GroqConfig],
    Field(discriminator="provider"),
]

_provider_config_adapter: TypeAdapter[ProviderConfig] = TypeAdapter(ProviderConfig)

REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    "azure": ("api_key", "endpoint", "deployment_name"),
    "openai": ("api_key", "model"),
    "claude": ("api_key", "model", "max_tokens"),
    "gemini": ("api_key", "model"),
    "groq": ("api_key", "model"),
}

DEFAULT_CONFIG = OpenAIConfig(
    api_key="",
    model="gpt-3.5-turbo",
    temperature=DEFAULT_TEMPERATURE,
    max_tokens=DEFAULT_MAX_TOKENS,
    top_p=DEFAULT_TOP_P,
    frequency_penalty=DEFAULT_PENALTY,
    presence_penalty=DEFAULT_PENALTY,
)


def is_valid_config(config: BaseProviderConfig) -> bool:
    """Check that every required field of the active variant is non-empty."""
    required = REQUIRED_FIELDS.get(getattr(config, "provider", ""), None)
    if required is None:
        return False
    return all(bool(getattr(config, name, None)) for name in required)


def coerce_legacy_config(data: dict[str, Any]) -> dict[str, Any]:
    """Tag an untagged legacy Azure-only config as ``azure``.

    Configs written before multi-provider support carry ``endpoint`` and
    ``deploymentName`` but no ``provider`` field.
    """
    if "provider" not in data and "endpoint" in data:
        return {**data, "provider": "azure"}
    return data


def parse_provider_config(data: Any) -> BaseProviderConfig:
    """Parse a raw mapping (or pass through a model) into a provider config.

    Raises:
        ConfigInvalid: If the data has no recognizable provider shape
    """
    if isinstance(data, BaseProviderConfig):
        return data
    if not isinstance(data, dict):
        raise ConfigInvalid("Provider configuration must be an object")
    try:
        return _provider_config_adapter.validate_python(coerce_legacy_config(data))
    except ValidationError as e:
        raise ConfigInvalid("Provider configuration could not be parsed", details=str(e)) from e


def default_config(
    provider: str,
    carry: BaseProviderConfig | None = None,
) -> BaseProviderConfig:
    """Build the default configuration for a provider.

    ``api_key``, ``temperature`` and ``max_tokens`` are carried over from
    ``carry`` when switching providers.
    """
    base: dict[str, Any] = {
        "api_key": carry.api_key if carry else "",
        "temperature": carry.temperature if carry and carry.temperature is not None else DEFAULT_TEMPERATURE,
        "max_tokens": carry.max_tokens if carry and carry.max_tokens is not None else DEFAULT_MAX_TOKENS,
    }

    if provider == "azure":
        return AzureOpenAIConfig(
            **base,
            api_version=DEFAULT_AZURE_API_VERSION,
            top_p=DEFAULT_TOP_P,
            frequency_penalty=DEFAULT_PENALTY,
            presence_penalty=DEFAULT_PENALTY,
        )
    if provider == "openai":
        return OpenAIConfig(
            **base,
            model=PROVIDER_MODELS["openai"][0],
            top_p=DEFAULT_TOP_P,
            frequency_penalty=DEFAULT_PENALTY,
            presence_penalty=DEFAULT_PENALTY,
        )
    if provider == "claude":
        return ClaudeConfig(
            **{**base, "max_tokens": DEFAULT_CLAUDE_MAX_TOKENS},
            model=PROVIDER_MODELS["claude"][0],
        )
    if provider == "gemini":
        return GeminiConfig(
            **base,
            model=PROVIDER_MODELS["gemini"][0],
            top_p=DEFAULT_TOP_P,
            top_k=DEFAULT_TOP_K,
        )
    if provider == "groq":
        return GroqConfig(**base, model=PROVIDER_MODELS["groq"][0], top_p=DEFAULT_TOP_P)

    raise UnsupportedProvider(f"Unsupported provider: {provider}")
