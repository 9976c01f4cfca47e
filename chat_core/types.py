"""
Data types for the chat session.

This module defines the core data structures shared by the session and its
presentation layer:
- Role: Who produced a transcript entry
- TranscriptEntry: A single immutable line of the visible conversation
- SessionPhase: Lifecycle state of a session
- SubmitOutcome: What happened to a submitted input
- SessionSnapshot: Read-only view of the session published after each change
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Role(Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class TranscriptEntry:
    """
    One message in the visible conversation.

    Attributes:
        role: Whether the user or the assistant wrote it
        text: Message text exactly as shown
    """

    role: Role
    text: str

    @classmethod
    def user(cls, text: str) -> TranscriptEntry:
        return cls(Role.USER, text)

    @classmethod
    def assistant(cls, text: str) -> TranscriptEntry:
        return cls(Role.ASSISTANT, text)


class SessionPhase(Enum):
    """
    Lifecycle of a session.

    UNINITIALIZED -> INITIALIZING -> READY, with INIT_FAILED absorbing.
    Each accepted turn moves READY -> BUSY -> READY.
    """

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    BUSY = "busy"
    INIT_FAILED = "init_failed"


class SubmitOutcome(Enum):
    ACCEPTED = "accepted"
    IGNORED_EMPTY = "ignored_empty"
    IGNORED_BUSY = "ignored_busy"
    REJECTED_NOT_INITIALIZED = "rejected_not_initialized"


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Read-only copy of session state for rendering.

    Attributes:
        transcript: Conversation so far, oldest first
        is_busy: True while a turn is awaiting the model
        last_error: Most recent user-visible error, if any
        phase: Current lifecycle phase
        pending_input: Current contents of the input buffer
        can_submit: True when submitting the buffer would start a turn
    """

    transcript: Tuple[TranscriptEntry, ...]
    is_busy: bool
    last_error: Optional[str]
    phase: SessionPhase
    pending_input: str = ""
    can_submit: bool = False
