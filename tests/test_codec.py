"""Unit tests for the import/export codec."""
import json
from datetime import date

import pytest

from polychat.exceptions import ImportParseError
from polychat.llm import AzureOpenAIConfig, ChatMessage, GeminiConfig
from polychat.storage import EXPORT_VERSION, Conversation, decode_import, encode_export, export_filename


def sample_conversations():
    first = Conversation.new("First", "You are a helpful assistant.", provider="gemini")
    first.messages.append(ChatMessage(role="user", content="Hello"))
    first.messages.append(ChatMessage(role="assistant", content="Hi there"))
    second = Conversation.new("Second", "You are a helpful assistant.")
    return [first, second]


class TestEncodeExport:
    """Tests for the export document."""

    def test_document_shape(self):
        config = GeminiConfig(api_key="k", model="gemini-pro", top_k=20)
        text = encode_export(config, sample_conversations())
        document = json.loads(text)

        assert set(document) == {"config", "conversations", "version"}
        assert document["version"] == EXPORT_VERSION == "2.0"
        assert document["config"]["provider"] == "gemini"
        assert document["config"]["topK"] == 20
        assert [c["name"] for c in document["conversations"]] == ["First", "Second"]

    def test_pretty_printed(self):
        text = encode_export(None, [])
        assert text.startswith("{\n  ")
        assert json.loads(text)["config"] is None

    def test_export_filename(self):
        assert export_filename(date(2024, 3, 9)) == "polychat-export-2024-03-09.json"


class TestDecodeImport:
    """Tests for import parsing and the legacy upgrade."""

    def test_round_trip(self):
        config = GeminiConfig(api_key="k", model="gemini-pro")
        conversations = sample_conversations()

        payload = decode_import(encode_export(config, conversations))

        assert payload.config == config
        assert payload.conversations == conversations
        assert payload.version == "2.0"

    @pytest.mark.parametrize("text", ["not json", "", "[1, 2]", "42", '"text"'])
    def test_malformed_documents(self, text):
        with pytest.raises(ImportParseError):
            decode_import(text)

    def test_legacy_document_upgraded(self):
        legacy = json.dumps({
            "config": {
                "apiKey": "k",
                "endpoint": "https://old.openai.azure.com",
                "deploymentName": "gpt35",
                "apiVersion": "2023-05-15",
                "temperature": 0.7,
                "maxTokens": 800,
                "topP": 0.95,
                "frequencyPenalty": 0,
                "presencePenalty": 0,
            },
            "conversations": [{
                "id": "c1",
                "name": "Conversation 1",
                "messages": [{"role": "system", "content": "You are a helpful assistant."}],
                "createdAt": "2024-01-01T00:00:00.000Z",
                "updatedAt": "2024-01-01T00:00:00.000Z",
            }],
        })

        payload = decode_import(legacy)

        assert isinstance(payload.config, AzureOpenAIConfig)
        assert payload.config.deployment_name == "gpt35"
        assert payload.conversations[0].provider is None
        assert payload.version == "1.0"

    def test_partial_documents(self):
        payload = decode_import("{}")
        assert payload.config is None
        assert payload.conversations is None

        payload = decode_import('{"conversations": []}')
        assert payload.conversations == []

    def test_conversations_not_a_list_ignored(self):
        assert decode_import('{"conversations": {"a": 1}}').conversations is None

    def test_invalid_conversation_rejected(self):
        text = json.dumps({"conversations": [{"id": "x", "messages": [{"role": "robot", "content": ""}]}]})
        with pytest.raises(ImportParseError, match="conversations"):
            decode_import(text)

    def test_invalid_config_rejected(self):
        with pytest.raises(ImportParseError, match="config"):
            decode_import(json.dumps({"config": {"provider": "mistral"}}))

    def test_oversized_integer_rejected(self):
        with pytest.raises(ImportParseError):
            decode_import('{"version": ' + "1" * 5000 + "}")

    def test_deeply_nested_document_rejected(self):
        with pytest.raises(ImportParseError):
            decode_import("[" * 100000)

    def test_duplicate_conversation_ids_rejected(self):
        conversation = Conversation.new("A", "sys")
        twin = conversation.model_copy(update={"name": "B"})
        with pytest.raises(ImportParseError, match="duplicate conversation id"):
            decode_import(encode_export(None, [conversation, twin]))


class TestStoreImportExport:
    """Tests for import/export through the conversation store."""

    @pytest.mark.asyncio
    async def test_round_trip_restores_state(self, store):
        config = GeminiConfig(api_key="k", model="gemini-pro")
        conversations = sample_conversations()
        await store.save_config(config)
        for conversation in conversations:
            await store.save_conversation(conversation)

        exported = await store.export_data()

        await store.save_config(GeminiConfig(api_key="other", model="gemini-pro"))
        await store.save_conversation(Conversation.new("Extra", "x"))

        assert await store.import_data(exported) is True
        assert await store.get_config() == config
        assert await store.get_conversations() == conversations

    @pytest.mark.asyncio
    async def test_not_json_leaves_state_unchanged(self, store, kv):
        await store.save_config(GeminiConfig(api_key="k", model="gemini-pro"))
        await store.save_conversation(Conversation.new("Keep", "x"))
        before = kv.data

        assert await store.import_data("not json") is False
        assert kv.data == before

    @pytest.mark.asyncio
    async def test_bad_conversation_entry_leaves_state_unchanged(self, store, kv):
        await store.save_conversation(Conversation.new("Keep", "x"))
        before = kv.data

        text = json.dumps({
            "config": {"provider": "openai", "apiKey": "new", "model": "gpt-4"},
            "conversations": [{"name": "missing messages role", "messages": [{"content": "x"}]}],
        })
        assert await store.import_data(text) is False
        assert kv.data == before

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", [
        '{"version": ' + "1" * 5000 + "}",
        "[" * 100000,
    ], ids=["huge-integer", "deep-nesting"])
    async def test_unparseable_json_returns_false(self, store, kv, text):
        await store.save_conversation(Conversation.new("Keep", "x"))
        before = kv.data

        assert await store.import_data(text) is False
        assert kv.data == before

    @pytest.mark.asyncio
    async def test_duplicate_ids_leave_state_unchanged(self, store, kv):
        existing = Conversation.new("Keep", "x")
        await store.save_conversation(existing)
        before = kv.data

        incoming = Conversation.new("A", "x")
        text = encode_export(None, [incoming, incoming.model_copy(update={"name": "B"})])

        assert await store.import_data(text) is False
        assert kv.data == before
        assert [c.id for c in await store.get_conversations()] == [existing.id]

    @pytest.mark.asyncio
    async def test_import_replaces_conversations(self, store):
        await store.save_conversation(Conversation.new("Old", "x"))
        incoming = Conversation.new("New", "x")

        assert await store.import_data(encode_export(None, [incoming])) is True

        stored = await store.get_conversations()
        assert [c.name for c in stored] == ["New"]

    @pytest.mark.asyncio
    async def test_import_without_config_keeps_config(self, store):
        config = GeminiConfig(api_key="k", model="gemini-pro")
        await store.save_config(config)

        assert await store.import_data('{"conversations": []}') is True
        assert await store.get_config() == config
        assert await store.get_conversations() == []

    @pytest.mark.asyncio
    async def test_empty_object_is_accepted(self, store):
        assert await store.import_data("{}") is True
