"""
Prompt builder for the two-message chat request.

This module provides the PromptBuilder class, which assembles the system
persona and the human input slot into a LangChain chat prompt.
"""

from typing import List

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate

from chat_core.prompts.templates import human_template, input_variable, system_persona


class PromptBuilder:
    """
    Builder for the chat prompt.

    The prompt always has exactly two messages: the constant system persona
    followed by a human message whose whole content is the caller's input.
    Input text is substituted verbatim and never parsed as a template.
    """

    @staticmethod
    def build_chat_prompt(persona: str = system_persona) -> ChatPromptTemplate:
        """
        Build the system + human chat prompt.

        Args:
            persona: System message text. Braces are escaped so the persona is
                     never treated as a substitution point.

        Returns:
            ChatPromptTemplate with a single "input" variable
        """
        escaped = persona.replace("{", "{{").replace("}", "}}")
        return ChatPromptTemplate.from_messages(
            [
                ("system", escaped),
                ("human", human_template),
            ]
        )

    @staticmethod
    def format_messages(input_text: str, prompt: ChatPromptTemplate = None) -> List[BaseMessage]:
        """
        Render the prompt for one input.

        Args:
            input_text: Free text placed in the human message
            prompt: Prompt to render (defaults to the library assistant prompt)

        Returns:
            [SystemMessage, HumanMessage]
        """
        prompt = prompt or PromptBuilder.build_chat_prompt()
        return prompt.format_messages(**{input_variable: input_text})
