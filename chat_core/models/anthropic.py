"""
Anthropic Claude model wrapper.

This module provides a LangChain-compatible wrapper for Claude models.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import anthropic
from langchain_core.callbacks.manager import CallbackManagerForLLMRun
from langchain_core.messages import BaseMessage
from pydantic import PrivateAttr

from chat_core.models.base import BaseChatAdapter
from chat_core.utils import split_system_messages, to_provider_messages
from constants import (
    DEFAULT_MODELS,
    LLM_MAX_TOKENS_CHAT,
    LLM_REQUEST_TIMEOUT_SECONDS,
    LLM_TEMPERATURE_CHAT,
)
from exceptions import ProviderResponseError


class ClaudeModel(BaseChatAdapter):
    """
    LangChain-compatible wrapper for Anthropic Claude models.

    The Messages API takes the system prompt as a separate argument, so the
    persona is lifted out of the message list before sending.

    Attributes:
        model_name: Name of the Claude model to use
        temperature: Controls randomness in generation (0.0 to 1.0)
        max_tokens: Maximum number of tokens to generate
        request_timeout: Seconds before the request is abandoned
        api_key: Optional API key (defaults to ANTHROPIC_API_KEY env variable)
    """

    model_name: str = DEFAULT_MODELS["anthropic"]
    temperature: float = LLM_TEMPERATURE_CHAT
    max_tokens: int = LLM_MAX_TOKENS_CHAT
    request_timeout: float = LLM_REQUEST_TIMEOUT_SECONDS
    api_key: str | None = None

    _client: Any = PrivateAttr()

    def __init__(self, **data: Any):
        super().__init__(**data)
        resolved_api_key = self._get_api_key("ANTHROPIC_API_KEY", "Anthropic")

        self._client = self._initialize_client(
            anthropic.Anthropic,
            resolved_api_key,
            "anthropic",
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
        system_text, chat_messages = split_system_messages(to_provider_messages(messages))

        request: dict[str, Any] = {
            "model": self.model_name,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": chat_messages,
        }
        if system_text:
            request["system"] = system_text
        if stop:
            request["stop_sequences"] = list(stop)

        try:
            response = self._client.messages.create(**request, **kwargs)

            if not response.content:
                raise ProviderResponseError("Claude response did not contain any content.")

            text = "".join(
                block.text for block in response.content if getattr(block, "type", "") == "text"
            )
            return self._require_text(text, "Claude")

        except Exception as e:
            self._handle_api_error(
                e,
                "Claude",
                timeout_types=(anthropic.APITimeoutError,),
                connection_types=(anthropic.APIConnectionError,),
            )

    @property
    def _llm_type(self) -> str:
        return "anthropic-claude"

    @property
    def _identifying_params(self) -> dict[str, Any]:
        return {
            "model_name": self.model_name,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
