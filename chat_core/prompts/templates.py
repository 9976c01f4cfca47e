"""
Prompt text for the library assistant.

This module contains the fixed persona, the human message slot and the
priming instruction used to generate the opening greeting.
"""

# System persona sent with every request
system_persona = (
    "You are a friendly and helpful library assistant. Start the conversation with "
    "a warm greeting about how you can help with library-related questions."
)

# Name of the single substitution point in the human message
input_variable = "input"

# Human message: the user's text, verbatim
human_template = "{" + input_variable + "}"

# Priming instruction for the automatic opening message
greeting_instruction = (
    "Please provide a warm greeting to the user about helping with library-related questions."
)
