"""
Model wrappers for different chat providers.

This module provides unified interfaces for Groq, OpenAI and Claude models and
a registry that builds one by provider name.
"""

from __future__ import annotations

from typing import Optional

from chat_core.models.anthropic import ClaudeModel
from chat_core.models.base import BaseChatAdapter
from chat_core.models.groq import GroqModel
from chat_core.models.openai import OpenAIModel
from constants import LLM_MAX_TOKENS_CHAT, LLM_REQUEST_TIMEOUT_SECONDS, LLM_TEMPERATURE_CHAT
from exceptions import UnknownProviderError

# Provider name -> wrapper class
CHAT_MODELS: dict[str, type[BaseChatAdapter]] = {
    "groq": GroqModel,
    "openai": OpenAIModel,
    "anthropic": ClaudeModel,
}


def create_chat_model(
    provider: str,
    api_key: str,
    model_name: Optional[str] = None,
    temperature: float = LLM_TEMPERATURE_CHAT,
    max_tokens: int = LLM_MAX_TOKENS_CHAT,
    request_timeout: float = LLM_REQUEST_TIMEOUT_SECONDS,
) -> BaseChatAdapter:
    """
    Build the chat model wrapper for a provider.

    Args:
        provider: Registered provider name ("groq", "openai", "anthropic")
        api_key: Provider credential
        model_name: Model identifier; the wrapper's default when None or empty
        temperature: Sampling temperature
        max_tokens: Maximum reply length in tokens
        request_timeout: Seconds before a request is abandoned

    Raises:
        UnknownProviderError: If no wrapper is registered for provider
        CredentialMissingError: If api_key is blank
    """
    model_class = CHAT_MODELS.get(provider)
    if model_class is None:
        raise UnknownProviderError(provider, sorted(CHAT_MODELS))

    params = {
        "api_key": api_key,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "request_timeout": request_timeout,
    }
    if model_name:
        params["model_name"] = model_name
    return model_class(**params)


__all__ = [
    "BaseChatAdapter",
    "CHAT_MODELS",
    "ClaudeModel",
    "GroqModel",
    "OpenAIModel",
    "create_chat_model",
]
