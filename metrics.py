"""
Prometheus metrics instrumentation for the library assistant chat.

This module provides metrics tracking for:
- Turn outcomes (completed / failed / cancelled)
- Ignored or rejected submissions by reason
- LLM API latency
- Error rate by type

Usage:
    from metrics import track_llm_call, track_turn, track_error

    with track_llm_call(provider="groq", model="llama-3.1-8b-instant"):
        # ... call LLM ...
        pass

    track_turn("completed")
    track_error("provider_timeout")
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Generator

from prometheus_client import Counter, Histogram

if TYPE_CHECKING:
    from typing import Literal

# === COUNTERS ===

# Resolved turns by status
turns_total = Counter(
    "library_chat_turns_total",
    "Total number of resolved chat turns",
    ["status"],
)

# Submissions that did not start a turn, by reason
submissions_ignored_total = Counter(
    "library_chat_submissions_ignored_total",
    "Total number of submissions that did not start a turn",
    ["reason"],
)

# Total number of errors by type
errors_total = Counter(
    "library_chat_errors_total",
    "Total number of errors encountered",
    ["error_type"],
)

# === HISTOGRAMS ===

# LLM API latency (seconds) by provider and model
llm_latency_seconds = Histogram(
    "library_chat_llm_latency_seconds",
    "Time taken for LLM API calls",
    ["provider", "model"],
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, float("inf")),
)

# === CONTEXT MANAGERS ===


@contextmanager
def track_llm_call(
    provider: str,
    model: str,
) -> Generator[None, None, None]:
    """
    Context manager to track LLM API call metrics.

    Args:
        provider: The LLM provider (e.g., "groq", "openai", "anthropic")
        model: The model name (e.g., "llama-3.1-8b-instant")

    Example:
        with track_llm_call("groq", "llama-3.1-8b-instant"):
            # ... call LLM API ...
            pass
    """
    start_time = time.time()
    try:
        yield
    finally:
        duration = time.time() - start_time
        llm_latency_seconds.labels(provider=provider, model=model).observe(duration)


def track_turn(status: Literal["completed", "failed", "cancelled"]) -> None:
    """Count a resolved turn."""
    turns_total.labels(status=status).inc()


def track_ignored_submission(reason: str) -> None:
    """Count a submission that was ignored or rejected (e.g. "empty", "busy")."""
    submissions_ignored_total.labels(reason=reason).inc()


def track_error(error_type: str) -> None:
    """
    Track an error occurrence.

    Args:
        error_type: The type of error (e.g., "credential_missing", "greeting_failed")
    """
    errors_total.labels(error_type=error_type).inc()
