"""
Base class for chat model wrappers.

This module defines the interface every provider wrapper implements: take the
rendered chat messages, return the reply as one string.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, NoReturn

from langchain_core.callbacks.manager import CallbackManagerForLLMRun
from langchain_core.language_models.chat_models import SimpleChatModel
from langchain_core.messages import BaseMessage

from exceptions import (
    CredentialMissingError,
    ProviderConnectionError,
    ProviderError,
    ProviderResponseError,
    ProviderTimeoutError,
)


class BaseChatAdapter(SimpleChatModel, ABC):
    """
    Abstract base class for all provider chat wrappers.

    Extends LangChain's SimpleChatModel so a wrapper can be composed with a
    chat prompt and an output parser. Wrappers never retry: a failed request
    surfaces to the caller as a ProviderError.

    Subclasses must implement:
    - _call(): Send the messages and return the reply text
    - _llm_type: Property returning the model type identifier
    - _identifying_params: Property returning model configuration parameters

    Provides shared functionality:
    - _get_api_key(): Resolve API key from instance or environment
    - _initialize_client(): Initialize SDK client with error handling
    - _handle_api_error(): Map SDK failures onto the ProviderError family
    - _require_text(): Reject empty replies
    """

    def _get_api_key(
        self, env_var_name: str, provider_name: str, required: bool = True
    ) -> str | None:
        """
        Resolve API key from instance attribute or environment variable.

        Blank keys count as missing.

        Args:
            env_var_name: Name of environment variable to check (e.g., "GROQ_API_KEY")
            provider_name: Provider name for error messages (e.g., "Groq")
            required: If True, raises CredentialMissingError when key not found

        Returns:
            Resolved API key or None if not required and not found

        Raises:
            CredentialMissingError: If required=True and API key not found
        """
        api_key = getattr(self, "api_key", None)
        resolved_key = (api_key or os.getenv(env_var_name) or "").strip()

        if required and not resolved_key:
            raise CredentialMissingError(provider_name)

        return resolved_key or None

    def _initialize_client(
        self, client_class: type[Any], api_key: str, package_name: str, **client_kwargs: Any
    ) -> Any:
        """
        Initialize an SDK client with standardized error handling.

        Args:
            client_class: The client class to instantiate (e.g., Groq, OpenAI)
            api_key: The API key to pass to the client
            package_name: Package name for import error messages (e.g., "groq")
            **client_kwargs: Additional keyword arguments to pass to client constructor

        Returns:
            Initialized client instance

        Raises:
            ImportError: If the SDK package is not installed
        """
        try:
            return client_class(api_key=api_key, **client_kwargs)
        except (ImportError, NameError):
            raise ImportError(
                f"{package_name} package not installed. Install it with: pip install {package_name}"
            )

    def _handle_api_error(
        self,
        exception: Exception,
        provider_name: str,
        timeout_types: tuple[type[BaseException], ...] = (),
        connection_types: tuple[type[BaseException], ...] = (),
    ) -> NoReturn:
        """
        Re-raise a provider failure as part of the ProviderError family.

        - ProviderError subclasses are re-raised unchanged
        - Timeouts (builtin or SDK-specific) become ProviderTimeoutError
        - Connection failures become ProviderConnectionError
        - Everything else becomes ProviderError
        The original exception is always kept as the cause.

        Args:
            exception: The caught exception to handle
            provider_name: Provider name for error messages (e.g., "Groq")
            timeout_types: SDK exception classes that mean the request timed out
            connection_types: SDK exception classes that mean the host was unreachable
        """
        if isinstance(exception, ProviderError):
            raise exception

        # Timeout types are often subclasses of the SDK's connection error
        if isinstance(exception, (TimeoutError, *timeout_types)):
            raise ProviderTimeoutError(
                f"{provider_name} API request timed out: {exception}"
            ) from exception
        if isinstance(exception, (ConnectionError, *connection_types)):
            raise ProviderConnectionError(
                f"{provider_name} API connection failed: {exception}"
            ) from exception

        raise ProviderError(
            f"{provider_name} API call failed: {exception.__class__.__name__}: {exception}"
        ) from exception

    def _require_text(self, text: str | None, provider_name: str) -> str:
        """Return text, or raise ProviderResponseError when the reply is empty."""
        if text is None or not text.strip():
            raise ProviderResponseError(f"{provider_name} response did not contain any text.")
        return text

    @property
    @abstractmethod
    def _llm_type(self) -> str:
        """
        Return the type of chat model.

        Returns:
            String identifier for this model type (e.g., "groq", "openai")
        """
        pass

    @property
    @abstractmethod
    def _identifying_params(self) -> dict[str, Any]:
        """
        Return a dictionary of identifying parameters.

        Returns:
            Dictionary containing model configuration (model_name, temperature, etc.)
        """
        pass

    @abstractmethod
    def _call(
        self,
        messages: list[BaseMessage],
        stop: Sequence[str] | None = None,
        run_manager: CallbackManagerForLLMRun | None = None,
        **kwargs: Any,
    ) -> str:
        """
        Generate a reply to the chat messages.

        Args:
            messages: Rendered prompt messages (system + human)
            stop: Optional list of stop sequences
            run_manager: Optional callback manager for tracking
            **kwargs: Additional model-specific parameters

        Returns:
            Reply text

        Raises:
            ProviderError: If the provider fails to generate a reply
        """
        pass
