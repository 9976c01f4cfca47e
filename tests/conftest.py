"""
Shared fixtures for the chat tests.

Provides a scripted chat model that replays replies (or raises errors) in
order, so sessions and pipelines run end to end without network calls.
"""

import threading
from typing import Any, List

import pytest
from langchain_core.language_models.chat_models import SimpleChatModel
from pydantic import Field

from config import ChatSettings
from sessions.session_controller import SessionController


class ScriptedChatModel(SimpleChatModel):
    """Chat model double that replays scripted replies and errors in order."""

    script: List[Any] = Field(default_factory=list)
    received: List[Any] = Field(default_factory=list)
    gate: Any = None
    model_name: str = "scripted-model"

    def _call(self, messages, stop=None, run_manager=None, **kwargs) -> str:
        self.received.append([(m.type, m.content) for m in messages])
        if self.gate is not None and not self.gate.wait(timeout=5):
            raise TimeoutError("scripted model gate was never opened")
        if not self.script:
            raise AssertionError("scripted model ran out of replies")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def hold(self) -> threading.Event:
        """Block subsequent calls until the returned event is set."""
        self.gate = threading.Event()
        return self.gate

    @property
    def _llm_type(self) -> str:
        return "scripted"


@pytest.fixture
def settings():
    """Chat settings that never touch the environment."""
    return ChatSettings(provider="groq", model_name="test-model")


@pytest.fixture
def scripted_model():
    """Scripted chat model with an empty script."""
    return ScriptedChatModel()


@pytest.fixture
def make_controller(settings):
    """Factory for a controller wired to a given model and credential."""

    def _make(model, api_key="test-key"):
        return SessionController(
            settings=settings,
            credential_provider=lambda: api_key,
            model_factory=lambda key: model,
        )

    return _make
