"""
Exception hierarchy for polychat.

Exception Hierarchy:
    ChatError (base)
    ├── ConfigInvalid
    ├── ProviderUnavailable
    ├── UnsupportedProvider
    ├── UpstreamError
    └── ImportParseError

All of these are caught at the chat session boundary and turned into
user-visible notifications. Storage I/O errors are not wrapped.

Usage:
    from polychat.exceptions import UpstreamError

    raise UpstreamError("OpenAI", cause=exc)
"""

from __future__ import annotations


class ChatError(Exception):
    """Base exception for all polychat errors.

    Attributes:
        message: Human-readable error message
        details: Additional error details (optional)
    """

    default_message: str = "An error occurred"

    def __init__(self, message: str | None = None, details: str | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigInvalid(ChatError):
    """Required fields for the active provider are missing."""

    default_message = "Provider configuration is incomplete"


class ProviderUnavailable(ChatError):
    """The adapter has no client because credentials were not configured."""

    default_message = "Provider client is not initialized"


class UnsupportedProvider(ChatError):
    """The provider tag is not one of the known providers."""

    default_message = "Unsupported provider"


class UpstreamError(ChatError):
    """A network, transport or API failure while talking to a provider."""

    default_message = "Provider request failed"

    def __init__(self, provider: str, cause: BaseException | None = None) -> None:
        self.provider = provider
        self.cause = cause
        super().__init__(
            f"Error calling {provider} API",
            details=str(cause) if cause is not None else None,
        )


class ImportParseError(ChatError):
    """An import document could not be parsed or validated."""

    default_message = "Could not parse import document"
