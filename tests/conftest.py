"""Pytest configuration and shared fixtures."""
import os
from types import SimpleNamespace

import pytest

from polychat.llm import ChatMessage
from polychat.storage import ConversationStore, InMemoryKeyValueStore


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "openai": os.getenv("OPENAI_API_KEY"),
        "anthropic": os.getenv("ANTHROPIC_API_KEY"),
        "gemini": os.getenv("GEMINI_API_KEY"),
        "groq": os.getenv("GROQ_API_KEY"),
    }


@pytest.fixture
def kv():
    """An empty in-memory key-value backend."""
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv):
    """Conversation store over the in-memory backend."""
    return ConversationStore(kv)


@pytest.fixture
def history():
    """A short conversation history, system prompt first."""
    return [
        ChatMessage(role="system", content="You are a helpful assistant."),
        ChatMessage(role="user", content="Hello"),
        ChatMessage(role="assistant", content="Hi! How can I help?"),
        ChatMessage(role="user", content="Tell me a joke"),
    ]


async def aiter_of(items):
    """Async iterator over a list, with an optional exception at the end."""
    for item in items:
        if isinstance(item, BaseException):
            raise item
        yield item


class FakeCompletions:
    """Stand-in for ``client.chat.completions`` of the OpenAI and Groq SDKs."""

    def __init__(self, content="", chunks=(), error=None):
        self.content = content
        self.chunks = list(chunks)
        self.error = error
        self.calls = []

    async def create(self, **params):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        if params.get("stream"):
            return aiter_of([
                item if isinstance(item, BaseException) else SimpleNamespace(
                    choices=[SimpleNamespace(delta=SimpleNamespace(content=item))]
                )
                for item in self.chunks
            ] + [SimpleNamespace(choices=[])])
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))]
        )


class FakeOpenAIClient:
    def __init__(self, **kwargs):
        self.chat = SimpleNamespace(completions=FakeCompletions(**kwargs))
        self.closed = False

    @property
    def calls(self):
        return self.chat.completions.calls

    async def close(self):
        self.closed = True


class FakeClaudeStream:
    def __init__(self, events):
        self._events = events
        self.exited = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.exited = True
        return False

    def __aiter__(self):
        return aiter_of(self._events)


class FakeClaudeMessages:
    def __init__(self, content="", chunks=(), error=None):
        self.content = content
        self.chunks = list(chunks)
        self.error = error
        self.calls = []
        self.streams = []

    async def create(self, **params):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.content)])

    def stream(self, **params):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        events = [SimpleNamespace(type="message_start")]
        events += [
            SimpleNamespace(type="content_block_delta", delta=SimpleNamespace(type="text_delta", text=text))
            for text in self.chunks
        ]
        events.append(SimpleNamespace(type="message_stop"))
        stream = FakeClaudeStream(events)
        self.streams.append(stream)
        return stream


class FakeClaudeClient:
    def __init__(self, **kwargs):
        self.messages = FakeClaudeMessages(**kwargs)

    @property
    def calls(self):
        return self.messages.calls

    async def close(self):
        pass


def gemini_response(text):
    parts = [SimpleNamespace(text=text)] if text else []
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))])


class FakeGeminiModels:
    def __init__(self, content="", chunks=(), error=None):
        self.content = content
        self.chunks = list(chunks)
        self.error = error
        self.calls = []

    async def generate_content(self, **params):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return gemini_response(self.content)

    async def generate_content_stream(self, **params):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return aiter_of([gemini_response(text) for text in self.chunks])


class FakeGeminiClient:
    def __init__(self, **kwargs):
        self.aio = SimpleNamespace(models=FakeGeminiModels(**kwargs))

    @property
    def calls(self):
        return self.aio.models.calls


class StubService:
    """Adapter double for session tests: replays fixed chunks or fails."""

    provider_name = "Stub"

    def __init__(self, chunks=(), error=None, valid=True):
        self.chunks = list(chunks)
        self.error = error
        self.valid = valid
        self.calls = []
        self.closed = False

    def validate_config(self):
        return self.valid

    async def send_message(self, messages, on_chunk=None):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        for chunk in self.chunks:
            if on_chunk is not None:
                on_chunk(chunk)
        return "".join(self.chunks)

    async def close(self):
        self.closed = True
