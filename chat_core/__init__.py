"""
Chat Core - prompt, model and pipeline pieces for the library assistant.

This package renders the fixed two-message prompt, wraps chat completion
providers (Groq, OpenAI, Claude) behind LangChain chat models and composes
them into the completion pipeline used by a chat session.
"""

from chat_core.models.base import BaseChatAdapter
from chat_core.pipeline import CompletionPipeline
from chat_core.prompts.builder import PromptBuilder
from chat_core.types import Role, SessionPhase, SessionSnapshot, SubmitOutcome, TranscriptEntry

__all__ = [
    "BaseChatAdapter",
    "CompletionPipeline",
    "PromptBuilder",
    "Role",
    "SessionPhase",
    "SessionSnapshot",
    "SubmitOutcome",
    "TranscriptEntry",
]

__version__ = "0.1.0"
