"""Unit and property-based tests for provider config models."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from polychat.exceptions import ConfigInvalid, UnsupportedProvider
from polychat.llm import (
    DEFAULT_CONFIG,
    AzureOpenAIConfig,
    ChatMessage,
    ClaudeConfig,
    GeminiConfig,
    GroqConfig,
    OpenAIConfig,
    coerce_legacy_config,
    default_config,
    is_valid_config,
    parse_provider_config,
)
from polychat.llm.models import REQUIRED_FIELDS


class TestChatMessage:
    """Tests for ChatMessage model."""

    def test_roles(self):
        for role in ("system", "user", "assistant"):
            assert ChatMessage(role=role, content="x").role == role

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            ChatMessage(role="tool", content="x")

    def test_is_frozen(self):
        msg = ChatMessage(role="user", content="x")
        with pytest.raises(ValueError):
            msg.content = "y"


class TestIsValidConfig:
    """Tests for per-variant required field checks."""

    @pytest.mark.parametrize("config", [
        AzureOpenAIConfig(api_key="k", endpoint="https://x.openai.azure.com", deployment_name="gpt4"),
        OpenAIConfig(api_key="k", model="gpt-4"),
        ClaudeConfig(api_key="k", model="claude-3-haiku-20240307", max_tokens=1024),
        GeminiConfig(api_key="k", model="gemini-pro"),
        GroqConfig(api_key="k", model="mixtral-8x7b-32768"),
    ])
    def test_complete_configs_are_valid(self, config):
        assert is_valid_config(config)

    @pytest.mark.parametrize("config", [
        AzureOpenAIConfig(api_key="k", endpoint="", deployment_name="gpt4"),
        AzureOpenAIConfig(api_key="k", endpoint="https://x", deployment_name=""),
        OpenAIConfig(api_key="", model="gpt-4"),
        OpenAIConfig(api_key="k", model=""),
        GeminiConfig(api_key="k"),
        GroqConfig(model="mixtral-8x7b-32768"),
    ])
    def test_missing_required_field_is_invalid(self, config):
        assert not is_valid_config(config)

    def test_claude_requires_max_tokens(self):
        """Claude is the only provider where max_tokens is required."""
        assert not is_valid_config(ClaudeConfig(api_key="k", model="claude-2.1"))
        assert is_valid_config(OpenAIConfig(api_key="k", model="gpt-4"))

    @given(
        provider=st.sampled_from(["azure", "openai", "claude", "gemini", "groq"]),
        values=st.fixed_dictionaries({
            "api_key": st.sampled_from(["", "key"]),
            "endpoint": st.sampled_from(["", "https://e"]),
            "deployment_name": st.sampled_from(["", "dep"]),
            "model": st.sampled_from(["", "m"]),
            "max_tokens": st.sampled_from([None, 256]),
        }),
    )
    def test_valid_iff_required_fields_non_empty(self, provider, values):
        """Property test: validity equals non-emptiness of the required fields."""
        config = parse_provider_config({"provider": provider, **values})
        expected = all(values[name] for name in REQUIRED_FIELDS[provider])
        assert is_valid_config(config) == expected


class TestParsing:
    """Tests for tagged-union parsing and camelCase wire format."""

    def test_parse_camel_case_keys(self):
        config = parse_provider_config({
            "provider": "azure",
            "apiKey": "k",
            "endpoint": "https://x",
            "deploymentName": "dep",
            "apiVersion": "2024-02-01",
            "topP": 0.5,
        })
        assert isinstance(config, AzureOpenAIConfig)
        assert config.deployment_name == "dep"
        assert config.api_version == "2024-02-01"
        assert config.top_p == 0.5

    def test_to_wire_uses_camel_case_and_drops_none(self):
        wire = GroqConfig(api_key="k", model="m", stop=["\n"]).to_wire()
        assert wire == {"apiKey": "k", "provider": "groq", "model": "m", "stop": ["\n"]}

    def test_wire_round_trip(self):
        config = GeminiConfig(api_key="k", model="gemini-pro", temperature=1.2, top_k=10)
        assert parse_provider_config(config.to_wire()) == config

    def test_unknown_provider_fails(self):
        with pytest.raises(ConfigInvalid):
            parse_provider_config({"provider": "mistral", "apiKey": "k"})

    def test_missing_tag_without_endpoint_fails(self):
        with pytest.raises(ConfigInvalid):
            parse_provider_config({"apiKey": "k", "model": "gpt-4"})

    def test_temperature_out_of_range_fails(self):
        with pytest.raises(ConfigInvalid):
            parse_provider_config({"provider": "openai", "apiKey": "k", "temperature": 2.5})

    def test_non_mapping_fails(self):
        with pytest.raises(ConfigInvalid):
            parse_provider_config(["openai"])


class TestLegacyCoercion:
    """Tests for upgrading untagged Azure-only configs."""

    def test_untagged_endpoint_config_becomes_azure(self):
        legacy = {"endpoint": "x", "deploymentName": "y", "apiKey": "k"}
        assert coerce_legacy_config(legacy)["provider"] == "azure"
        config = parse_provider_config(legacy)
        assert config.provider == "azure"
        assert config.deployment_name == "y"

    def test_tagged_config_untouched(self):
        data = {"provider": "openai", "endpoint": "x"}
        assert coerce_legacy_config(data) is data

    def test_untagged_without_endpoint_untouched(self):
        data = {"apiKey": "k"}
        assert "provider" not in coerce_legacy_config(data)


class TestDefaults:
    """Tests for provider default configs."""

    def test_default_config_is_openai(self):
        assert DEFAULT_CONFIG.provider == "openai"
        assert DEFAULT_CONFIG.model == "gpt-3.5-turbo"
        assert DEFAULT_CONFIG.temperature == 0.7
        assert DEFAULT_CONFIG.max_tokens == 800

    def test_switching_provider_carries_credentials(self):
        current = OpenAIConfig(api_key="k", model="gpt-4", temperature=0.2, max_tokens=300)
        gemini = default_config("gemini", carry=current)
        assert isinstance(gemini, GeminiConfig)
        assert gemini.api_key == "k"
        assert gemini.temperature == 0.2
        assert gemini.max_tokens == 300
        assert gemini.top_k == 40
        assert gemini.model == "gemini-pro"

    def test_claude_default_max_tokens(self):
        claude = default_config("claude")
        assert claude.max_tokens == 4096
        assert claude.model == "claude-3-opus-20240229"

    def test_azure_default_api_version(self):
        azure = default_config("azure")
        assert azure.api_version == "2023-05-15"
        assert not is_valid_config(azure)

    def test_unknown_provider(self):
        with pytest.raises(UnsupportedProvider):
            default_config("mistral")
