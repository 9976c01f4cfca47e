"""
Prompt templates and builders for the library assistant.

This module contains the persona text, the priming instruction and the
builder that turns them into a LangChain chat prompt.
"""

from chat_core.prompts.builder import PromptBuilder
from chat_core.prompts.templates import (
    greeting_instruction,
    human_template,
    input_variable,
    system_persona,
)

__all__ = [
    "PromptBuilder",
    "greeting_instruction",
    "human_template",
    "input_variable",
    "system_persona",
]
