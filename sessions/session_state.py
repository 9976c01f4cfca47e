"""
Session State Module

Mutable state owned by a single SessionController. Nothing outside the
controller writes to it; readers get a SessionSnapshot instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from chat_core.types import SessionPhase, SessionSnapshot, TranscriptEntry


@dataclass
class SessionState:
    """
    Transcript, input buffer and flags for one chat session.

    Attributes:
        transcript: Visible conversation, oldest first
        pending_input: Text currently typed into the input surface
        phase: Lifecycle phase; BUSY while a turn awaits the model
        last_error: Most recent user-visible error (replaced, never accumulated)
        pipeline_ready: True once the completion pipeline has been built
    """

    transcript: List[TranscriptEntry] = field(default_factory=list)
    pending_input: str = ""
    phase: SessionPhase = SessionPhase.UNINITIALIZED
    last_error: Optional[str] = None
    pipeline_ready: bool = False

    @property
    def is_busy(self) -> bool:
        return self.phase is SessionPhase.BUSY

    @property
    def can_submit(self) -> bool:
        return (
            self.phase is SessionPhase.READY
            and self.pipeline_ready
            and bool(self.pending_input.strip())
        )

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            transcript=tuple(self.transcript),
            is_busy=self.is_busy,
            last_error=self.last_error,
            phase=self.phase,
            pending_input=self.pending_input,
            can_submit=self.can_submit,
        )
