"""
Utility functions for the chat core.

Converts LangChain messages into the role/content dictionaries that provider
SDKs expect.
"""

from typing import Dict, List, Sequence, Tuple

from langchain_core.messages import BaseMessage

# LangChain message type -> provider chat role
ROLE_BY_MESSAGE_TYPE = {
    "system": "system",
    "human": "user",
    "ai": "assistant",
}


def to_provider_messages(messages: Sequence[BaseMessage]) -> List[Dict[str, str]]:
    """
    Convert LangChain messages to ``{"role", "content"}`` dictionaries.

    Args:
        messages: Messages produced by the chat prompt

    Returns:
        List of role/content dicts in the same order

    Raises:
        ValueError: If a message type has no chat role (e.g. tool messages)

    Examples:
        >>> to_provider_messages([SystemMessage("be kind"), HumanMessage("hi")])
        [{"role": "system", "content": "be kind"}, {"role": "user", "content": "hi"}]
    """
    converted = []
    for message in messages:
        role = ROLE_BY_MESSAGE_TYPE.get(message.type)
        if role is None:
            raise ValueError(f"Unsupported message type for chat completion: {message.type}")
        converted.append({"role": role, "content": content_text(message)})
    return converted


def content_text(message: BaseMessage) -> str:
    """Plain text of a message, joining text blocks when content is a list."""
    if isinstance(message.content, str):
        return message.content
    parts = []
    for block in message.content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def split_system_messages(
    messages: List[Dict[str, str]],
) -> Tuple[str, List[Dict[str, str]]]:
    """
    Separate system instructions from the conversational messages.

    Some providers take the system prompt as a separate parameter.

    Returns:
        (joined system text, remaining messages)
    """
    system_parts = [m["content"] for m in messages if m["role"] == "system"]
    rest = [m for m in messages if m["role"] != "system"]
    return "\n\n".join(system_parts), rest
