"""
Configuration loader module.

Provides centralized access to chat settings and the provider credential.
Values come from the process environment, seeded once from a ``.env`` file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from constants import (
    API_KEY_ENV_VARS,
    DEFAULT_MODELS,
    DEFAULT_PROVIDER,
    LLM_MAX_TOKENS_CHAT,
    LLM_REQUEST_TIMEOUT_SECONDS,
    LLM_TEMPERATURE_CHAT,
)
from exceptions import ConfigurationError

# Guard so the .env file is read at most once per process
_env_loaded = False


@dataclass(frozen=True)
class ChatSettings:
    """
    Model parameters for a chat session.

    Attributes:
        provider: Provider name used to pick the model client (e.g. "groq")
        model_name: Provider-specific model identifier
        temperature: Sampling temperature
        max_tokens: Maximum number of tokens to generate per reply
        request_timeout: Seconds before the provider request is abandoned
    """

    provider: str = DEFAULT_PROVIDER
    model_name: str = DEFAULT_MODELS[DEFAULT_PROVIDER]
    temperature: float = LLM_TEMPERATURE_CHAT
    max_tokens: int = LLM_MAX_TOKENS_CHAT
    request_timeout: float = LLM_REQUEST_TIMEOUT_SECONDS


def load_environment(dotenv_path: str | Path | None = None) -> None:
    """
    Load a .env file into the process environment.

    Existing environment variables win over values in the file. Only the first
    call has an effect.
    """
    global _env_loaded

    if _env_loaded:
        return
    load_dotenv(dotenv_path=dotenv_path, override=False)
    _env_loaded = True


def _read_number(name: str, default: float, cast: type) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(name, raw, f"expected {cast.__name__}")


def get_chat_settings() -> ChatSettings:
    """
    Build chat settings from the environment.

    Env vars:
      - CHAT_PROVIDER (optional; default: groq)
      - CHAT_MODEL (optional; default depends on provider)
      - CHAT_TEMPERATURE, CHAT_MAX_TOKENS, CHAT_REQUEST_TIMEOUT (optional)

    Raises:
        ConfigurationError: If a numeric setting cannot be parsed
    """
    load_environment()

    provider = os.getenv("CHAT_PROVIDER", DEFAULT_PROVIDER).strip().lower() or DEFAULT_PROVIDER
    model_name = os.getenv("CHAT_MODEL") or DEFAULT_MODELS.get(provider, "")

    return ChatSettings(
        provider=provider,
        model_name=model_name,
        temperature=_read_number("CHAT_TEMPERATURE", LLM_TEMPERATURE_CHAT, float),
        max_tokens=_read_number("CHAT_MAX_TOKENS", LLM_MAX_TOKENS_CHAT, int),
        request_timeout=_read_number("CHAT_REQUEST_TIMEOUT", LLM_REQUEST_TIMEOUT_SECONDS, float),
    )


def get_api_key_env_var(provider: str) -> str:
    """Name of the environment variable holding the provider's API key."""
    return API_KEY_ENV_VARS.get(provider, f"{provider.upper()}_API_KEY")


def get_api_key(provider: str) -> str | None:
    """
    Return the provider credential, or None when it is unset or blank.

    Example: get_api_key("groq") reads GROQ_API_KEY.
    """
    load_environment()
    value = os.getenv(get_api_key_env_var(provider), "")
    return value.strip() or None


__all__ = [
    "ChatSettings",
    "get_api_key",
    "get_api_key_env_var",
    "get_chat_settings",
    "load_environment",
]
