"""
Custom exceptions for the library assistant chat.

Provides specific exception types for better error handling and debugging.
"""

from __future__ import annotations

from constants import GREETING_ERROR_MESSAGE, NOT_INITIALIZED_MESSAGE


class LibraryChatError(Exception):
    """Base exception for all library chat errors."""

    pass


class ConfigurationError(LibraryChatError):
    """Raised when an environment setting has an invalid value."""

    def __init__(self, name: str, value: str, reason: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Invalid value for {name}: {value!r} ({reason})")


class LLMError(LibraryChatError):
    """Raised when LLM operations fail."""

    pass


class CredentialMissingError(LLMError):
    """Raised when a model client is built without a usable API key."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"{provider.upper()} API key not found in environment variables")


class UnknownProviderError(LLMError):
    """Raised when no model client is registered for a provider name."""

    def __init__(self, provider: str, available: list[str]) -> None:
        self.provider = provider
        self.available = available
        super().__init__(
            f"Unknown chat provider: {provider!r} (available: {', '.join(available)})"
        )


class ProviderError(LLMError):
    """Raised when the remote completion call fails."""

    pass


class ProviderTimeoutError(ProviderError):
    """Raised when the provider request times out."""

    pass


class ProviderConnectionError(ProviderError):
    """Raised when the provider cannot be reached."""

    pass


class ProviderResponseError(ProviderError):
    """Raised when the provider returns an invalid or empty response."""

    pass


class SessionError(LibraryChatError):
    """Base exception for chat session errors."""

    pass


class SessionNotInitializedError(SessionError):
    """Raised when a turn is submitted to a session without a pipeline."""

    def __init__(self) -> None:
        super().__init__(NOT_INITIALIZED_MESSAGE)


class InitGreetingError(SessionError):
    """Raised when the opening greeting could not be generated."""

    def __init__(self) -> None:
        super().__init__(GREETING_ERROR_MESSAGE)
