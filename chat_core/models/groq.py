"""
Groq model wrapper.

This module provides a LangChain-compatible wrapper for models hosted on Groq.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import groq
from langchain_core.callbacks.manager import CallbackManagerForLLMRun
from langchain_core.messages import BaseMessage
from pydantic import PrivateAttr

from chat_core.models.base import BaseChatAdapter
from chat_core.utils import to_provider_messages
from constants import (
    DEFAULT_MODELS,
    LLM_MAX_TOKENS_CHAT,
    LLM_REQUEST_TIMEOUT_SECONDS,
    LLM_TEMPERATURE_CHAT,
)
from exceptions import ProviderResponseError


class GroqModel(BaseChatAdapter):
    """
    LangChain-compatible wrapper for Groq chat models.

    Uses the Groq SDK's OpenAI-style chat completions endpoint. SDK retries
    are disabled.

    Attributes:
        model_name: Groq model identifier (e.g., "llama-3.1-8b-instant")
        temperature: Controls randomness in generation (0.0 to 2.0)
        max_tokens: Maximum number of tokens to generate
        request_timeout: Seconds before the request is abandoned
        api_key: Optional API key (defaults to GROQ_API_KEY env variable)
    """

    model_name: str = DEFAULT_MODELS["groq"]
    temperature: float = LLM_TEMPERATURE_CHAT
    max_tokens: int = LLM_MAX_TOKENS_CHAT
    request_timeout: float = LLM_REQUEST_TIMEOUT_SECONDS
    api_key: str | None = None

    _client: Any = PrivateAttr()

    def __init__(self, **data: Any):
        super().__init__(**data)
        resolved_api_key = self._get_api_key("GROQ_API_KEY", "Groq")

        self._client = self._initialize_client(
            groq.Groq,
            resolved_api_key,
            "groq",
            timeout=self.request_timeout,
            max_retries=0,
        )

    def _call(
        self,
        messages: list[BaseMessage],
        stop: Sequence[str] | None = None,
        run_manager: CallbackManagerForLLMRun | None = None,
        **kwargs: Any,
    ) -> str:
        temperature = kwargs.pop("temperature", self.temperature)
        max_tokens = kwargs.pop("max_tokens", self.max_tokens)

        try:
            response = self._client.chat.completions.create(
                model=self.model_name,
                messages=to_provider_messages(messages),
                temperature=temperature,
                max_tokens=max_tokens,
                stop=list(stop) if stop else None,
                **kwargs,
            )

            if not response.choices:
                raise ProviderResponseError("Groq response did not contain any choices.")

            return self._require_text(response.choices[0].message.content, "Groq")

        except Exception as e:
            self._handle_api_error(
                e,
                "Groq",
                timeout_types=(groq.APITimeoutError,),
                connection_types=(groq.APIConnectionError,),
            )

    @property
    def _llm_type(self) -> str:
        return "groq"

    @property
    def _identifying_params(self) -> dict[str, Any]:
        return {
            "model_name": self.model_name,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
