"""
Completion pipeline.

Composes the chat prompt, a chat model wrapper and a string output parser
into one immutable callable. The session builds it once and reuses it for
the greeting and every turn.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable, RunnableSequence

from chat_core.prompts import PromptBuilder, input_variable
from metrics import track_llm_call

logger = logging.getLogger(__name__)


class CompletionPipeline:
    """
    prompt -> model -> StrOutputParser, assembled once.

    ``invoke`` always returns a plain ``str``. Exceptions raised by the model
    propagate unchanged; the pipeline adds no wrapping of its own.
    """

    __slots__ = ("_prompt", "_model", "_parser", "_chain")

    def __init__(
        self,
        prompt: ChatPromptTemplate,
        model: BaseChatModel,
        parser: Runnable,
    ) -> None:
        self._prompt = prompt
        self._model = model
        self._parser = parser
        self._chain: RunnableSequence = prompt | model | parser

    @classmethod
    def build(
        cls,
        model: BaseChatModel,
        prompt: Optional[ChatPromptTemplate] = None,
        parser: Optional[Runnable] = None,
    ) -> CompletionPipeline:
        """
        Assemble a pipeline from its three parts.

        Args:
            model: Chat model wrapper that answers the rendered messages
            prompt: Chat prompt (defaults to the library assistant prompt)
            parser: Output normalizer (defaults to StrOutputParser)
        """
        return cls(
            prompt=prompt or PromptBuilder.build_chat_prompt(),
            model=model,
            parser=parser or StrOutputParser(),
        )

    def __setattr__(self, name, value):
        if hasattr(self, "_chain"):
            raise AttributeError("CompletionPipeline is immutable once built")
        object.__setattr__(self, name, value)

    @property
    def model(self) -> BaseChatModel:
        return self._model

    @property
    def prompt(self) -> ChatPromptTemplate:
        return self._prompt

    @property
    def provider(self) -> str:
        return getattr(self._model, "_llm_type", type(self._model).__name__)

    @property
    def model_name(self) -> str:
        return getattr(self._model, "model_name", "") or "unknown"

    def invoke(self, input_text: str) -> str:
        """Run the chain synchronously for one input and return the reply text."""
        # StrOutputParser may hand back a str subclass
        return str(self._chain.invoke({input_variable: input_text}))

    async def ainvoke(self, input_text: str) -> str:
        """
        Run the chain without blocking the event loop.

        The provider SDK call is blocking, so it runs in the loop's default
        executor. Latency is recorded whether the call succeeds or fails.

        Args:
            input_text: Free text for the human message

        Returns:
            The reply string
        """
        loop = asyncio.get_running_loop()
        with track_llm_call(provider=self.provider, model=self.model_name):
            return await loop.run_in_executor(None, lambda: self.invoke(input_text))
