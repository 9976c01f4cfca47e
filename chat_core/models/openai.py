"""
OpenAI model wrapper.

This module provides a LangChain-compatible wrapper for OpenAI chat models.
"""

from collections.abc import Sequence
from typing import Any, Dict, Optional

import openai
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


class OpenAIModel(BaseChatAdapter):
    """
    LangChain-compatible wrapper for OpenAI models.

    Attributes:
        model_name: Name of the OpenAI model to use (e.g., "gpt-4o-mini")
        temperature: Controls randomness in generation (0.0 to 2.0)
        max_tokens: Maximum number of tokens to generate
        request_timeout: Seconds before the request is abandoned
        api_key: Optional API key (defaults to OPENAI_API_KEY env variable)
    """

    model_name: str = DEFAULT_MODELS["openai"]
    temperature: float = LLM_TEMPERATURE_CHAT
    max_tokens: int = LLM_MAX_TOKENS_CHAT
    request_timeout: float = LLM_REQUEST_TIMEOUT_SECONDS
    api_key: Optional[str] = None

    _client: Any = PrivateAttr()

    def __init__(self, **data: Any):
        super().__init__(**data)
        resolved_api_key = self._get_api_key("OPENAI_API_KEY", "OpenAI")
        self._client = self._initialize_client(
            openai.OpenAI,
            resolved_api_key,
            "openai",
            timeout=self.request_timeout,
            max_retries=0,
        )

    def _call(
        self,
        messages: list[BaseMessage],
        stop: Optional[Sequence[str]] = None,
        run_manager: Optional[CallbackManagerForLLMRun] = None,
        **kwargs: Any,
    ) -> str:
        """
        Generate a reply using the OpenAI chat completions API.

        Args:
            messages: Rendered prompt messages
            stop: Optional list of stop sequences
            run_manager: Optional callback manager
            **kwargs: Additional parameters (temperature, max_tokens, etc.)

        Returns:
            Reply text

        Raises:
            ProviderError: If OpenAI fails to generate a reply
        """
        temperature = kwargs.pop("temperature", self.temperature)
        max_tokens = kwargs.pop("max_tokens", self.max_tokens)

        try:
            response = self._client.chat.completions.create(
                model=self.model_name,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=to_provider_messages(messages),
                stop=list(stop) if stop else None,
                **kwargs,
            )

            if not response.choices or len(response.choices) == 0:
                raise ProviderResponseError("OpenAI response did not contain any choices.")

            return self._require_text(response.choices[0].message.content, "OpenAI")

        except Exception as e:
            self._handle_api_error(
                e,
                "OpenAI",
                timeout_types=(openai.APITimeoutError,),
                connection_types=(openai.APIConnectionError,),
            )

    @property
    def _llm_type(self) -> str:
        return "openai"

    @property
    def _identifying_params(self) -> Dict[str, Any]:
        return {
            "model_name": self.model_name,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
