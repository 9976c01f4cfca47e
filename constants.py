"""
Project-wide constants.

Centralizes model defaults, fixed prompt text and logging configuration.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# LLM Configuration
# =============================================================================
DEFAULT_PROVIDER: Final[str] = "groq"
LLM_TEMPERATURE_CHAT: Final[float] = 0.7
LLM_MAX_TOKENS_CHAT: Final[int] = 1024
LLM_REQUEST_TIMEOUT_SECONDS: Final[float] = 60.0

# Default model per provider (overridable with CHAT_MODEL)
DEFAULT_MODELS: Final[dict[str, str]] = {
    "groq": "llama-3.1-8b-instant",
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-haiku-20241022",
}

# Credential environment variable per provider
API_KEY_ENV_VARS: Final[dict[str, str]] = {
    "groq": "GROQ_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}

# =============================================================================
# Session Messages (user-visible)
# =============================================================================
INIT_ERROR_PREFIX: Final[str] = "Initialization Error"
TURN_ERROR_PREFIX: Final[str] = "Conversation Error"
GREETING_ERROR_MESSAGE: Final[str] = "Could not generate initial greeting"
NOT_INITIALIZED_MESSAGE: Final[str] = (
    "Chat system not properly initialized. Please check API key configuration."
)

# =============================================================================
# Logging Configuration
# =============================================================================
LOG_LEVEL_PRODUCTION: Final[str] = "INFO"
LOG_LEVEL_DEVELOPMENT: Final[str] = "DEBUG"
LOG_FORMAT_JSON: Final[bool] = True  # Set to False for development readable format
LOG_SNIPPET_MAX_CHARS: Final[int] = 200  # Truncation for message text in log records
