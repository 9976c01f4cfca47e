"""
Session Controller Module

Drives one library assistant conversation: builds the completion pipeline
once, asks it for an opening greeting, then runs user turns one at a time.

Turn rules:
- Empty input and input submitted while a turn is in flight are ignored
  silently.
- A session without a pipeline rejects input with a visible error.
- A failed turn removes the user's unanswered message from the transcript.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import secrets
from typing import Callable, Optional

from chat_core.models import BaseChatAdapter, create_chat_model
from chat_core.pipeline import CompletionPipeline
from chat_core.prompts import greeting_instruction
from chat_core.types import (
    SessionPhase,
    SessionSnapshot,
    SubmitOutcome,
    TranscriptEntry,
)
from config import ChatSettings, get_api_key, get_chat_settings
from constants import INIT_ERROR_PREFIX, TURN_ERROR_PREFIX
from exceptions import CredentialMissingError, InitGreetingError, SessionNotInitializedError
from logging_config import StructuredLoggerAdapter, snippet
from metrics import track_error, track_ignored_submission, track_turn
from sessions.session_state import SessionState

logger = logging.getLogger(__name__)

Subscriber = Callable[[SessionSnapshot], None]


class SessionController:
    """
    Owns the state of a single chat session and every transition on it.

    All mutation happens on the event loop thread. The only suspension point
    is the pipeline call; the busy phase keeps turns from overlapping.
    """

    def __init__(
        self,
        settings: Optional[ChatSettings] = None,
        credential_provider: Optional[Callable[[], Optional[str]]] = None,
        model_factory: Optional[Callable[[str], BaseChatAdapter]] = None,
    ) -> None:
        """
        Create an uninitialized session.

        Args:
            settings: Model parameters (read from the environment when omitted)
            credential_provider: Returns the API key, or None when it is absent
            model_factory: Builds the chat model from the API key
        """
        self.settings = settings or get_chat_settings()
        self.session_id = secrets.token_urlsafe(16)
        self._credential_provider = credential_provider or (
            lambda: get_api_key(self.settings.provider)
        )
        self._model_factory = model_factory or self._create_model

        self._state = SessionState()
        self._pipeline: Optional[CompletionPipeline] = None
        self._subscribers: list[Subscriber] = []
        self._inflight: Optional[asyncio.Task] = None
        self._background_tasks: set[asyncio.Task] = set()

        self.logger = StructuredLoggerAdapter(
            logger,
            {
                "session_id": self.session_id,
                "provider": self.settings.provider,
            },
        )
        self.logger.info_event("session_created", "Chat session created")

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def transcript(self) -> tuple[TranscriptEntry, ...]:
        return tuple(self._state.transcript)

    @property
    def is_busy(self) -> bool:
        return self._state.is_busy

    @property
    def last_error(self) -> Optional[str]:
        return self._state.last_error

    @property
    def pending_input(self) -> str:
        return self._state.pending_input

    @property
    def pipeline_ready(self) -> bool:
        return self._state.pipeline_ready

    @property
    def can_submit(self) -> bool:
        return self._state.can_submit

    def snapshot(self) -> SessionSnapshot:
        return self._state.snapshot()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> None:
        """Register a callback that receives a snapshot after every transition."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _publish(self) -> None:
        snapshot = self._state.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                self.logger.exception("Session subscriber raised while handling a snapshot")

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def _create_model(self, api_key: str) -> BaseChatAdapter:
        return create_chat_model(
            self.settings.provider,
            api_key,
            model_name=self.settings.model_name,
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
            request_timeout=self.settings.request_timeout,
        )

    def _build_pipeline(self) -> CompletionPipeline:
        api_key = self._credential_provider()
        if not api_key or not api_key.strip():
            raise CredentialMissingError(self.settings.provider)
        model = self._model_factory(api_key)
        return CompletionPipeline.build(model=model)

    async def initialize(self) -> SessionSnapshot:
        """
        Build the pipeline and generate the opening greeting.

        Runs once per session. A missing credential leaves the session in
        INIT_FAILED for good; a failed greeting leaves it READY with an error
        and an empty transcript.

        Returns:
            Snapshot after initialization finished
        """
        if self._state.phase is not SessionPhase.UNINITIALIZED:
            self.logger.warning_event(
                "session_init_skipped",
                "Session already initialized",
                phase=self._state.phase.value,
            )
            return self.snapshot()

        self._state.phase = SessionPhase.INITIALIZING
        self._publish()

        try:
            pipeline = self._build_pipeline()
        except Exception as e:
            self._state.phase = SessionPhase.INIT_FAILED
            self._state.last_error = f"{INIT_ERROR_PREFIX}: {e}"
            error_type = "credential_missing" if isinstance(e, CredentialMissingError) else "init_failed"
            track_error(error_type)
            self.logger.error_event(
                "session_init_failed",
                "Error initializing chat",
                error=str(e),
                error_class=e.__class__.__name__,
            )
            self._publish()
            return self.snapshot()

        self._pipeline = pipeline
        self._state.pipeline_ready = True
        self.logger.info_event(
            "pipeline_built",
            "Completion pipeline built",
            model=pipeline.model_name,
        )

        await self._send_greeting()
        return self.snapshot()

    async def _send_greeting(self) -> None:
        try:
            greeting = await self._pipeline.ainvoke(greeting_instruction)
        except Exception as e:
            self._state.last_error = str(InitGreetingError())
            track_error("greeting_failed")
            self.logger.error_event(
                "greeting_failed",
                "Error sending initial greeting",
                error=str(e),
                error_class=e.__class__.__name__,
            )
        else:
            self._state.transcript = [TranscriptEntry.assistant(greeting)]
            self.logger.info_event(
                "greeting_generated",
                "Initial greeting generated",
                reply=snippet(greeting),
            )
        finally:
            self._state.phase = SessionPhase.READY
            self._publish()

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    def set_pending_input(self, text: str) -> None:
        """Replace the input buffer. Allowed while a turn is in flight."""
        self._state.pending_input = text
        self._publish()

    def submit_input(self, text: Optional[str] = None) -> SubmitOutcome:
        """
        Submit the input buffer as a new turn.

        Must be called from a running event loop. On acceptance the user entry
        is appended at once and the model call runs as a background task; use
        ``wait_idle()`` or ``send()`` to wait for the reply.

        Args:
            text: Text to submit; the input buffer is used when None

        Returns:
            What happened to the submission
        """
        if text is None:
            text = self._state.pending_input

        # The buffer is only touched once the submission is accepted
        trimmed = text.strip()
        if not trimmed:
            track_ignored_submission("empty")
            self.logger.debug_event("turn_ignored", "Ignored empty input", reason="empty")
            return SubmitOutcome.IGNORED_EMPTY

        if self._pipeline is None:
            self._state.last_error = str(SessionNotInitializedError())
            track_ignored_submission("not_initialized")
            self.logger.warning_event(
                "turn_rejected",
                "Input submitted before the pipeline was built",
                phase=self._state.phase.value,
            )
            self._publish()
            return SubmitOutcome.REJECTED_NOT_INITIALIZED

        if self._state.phase is not SessionPhase.READY:
            track_ignored_submission("busy")
            self.logger.debug_event(
                "turn_ignored",
                "Ignored input while a request is outstanding",
                reason="busy",
                phase=self._state.phase.value,
            )
            return SubmitOutcome.IGNORED_BUSY

        loop = asyncio.get_running_loop()

        entry = TranscriptEntry.user(trimmed)
        self._state.transcript.append(entry)
        self._state.pending_input = ""
        self._state.last_error = None
        self._state.phase = SessionPhase.BUSY
        self.logger.info_event(
            "turn_submitted",
            "User turn submitted",
            user_text=snippet(trimmed),
            transcript_length=len(self._state.transcript),
        )
        self._publish()

        task = loop.create_task(self._run_turn(entry))
        self._inflight = task
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(functools.partial(self._settle_unstarted_cancel, entry))
        return SubmitOutcome.ACCEPTED

    async def _run_turn(self, entry: TranscriptEntry) -> None:
        try:
            reply = await self._pipeline.ainvoke(entry.text)
        except asyncio.CancelledError:
            self._rollback(entry)
            track_turn("cancelled")
            self.logger.warning_event("turn_cancelled", "Turn task was cancelled")
            raise
        except Exception as e:
            self._state.last_error = f"{TURN_ERROR_PREFIX}: {e}"
            self._rollback(entry)
            track_turn("failed")
            track_error(e.__class__.__name__)
            self.logger.error_event(
                "turn_failed",
                "Conversation error",
                error=str(e),
                error_class=e.__class__.__name__,
                transcript_length=len(self._state.transcript),
            )
        else:
            self._state.transcript.append(TranscriptEntry.assistant(reply))
            track_turn("completed")
            self.logger.info_event(
                "turn_completed",
                "Assistant replied",
                reply=snippet(reply),
                transcript_length=len(self._state.transcript),
            )
        finally:
            self._state.phase = SessionPhase.READY
            self._inflight = None
            self._publish()

    def _settle_unstarted_cancel(self, entry: TranscriptEntry, task: asyncio.Task) -> None:
        # A task cancelled before its first step never runs _run_turn's handlers
        if not task.cancelled() or self._inflight is not task:
            return
        self._rollback(entry)
        track_turn("cancelled")
        self._state.phase = SessionPhase.READY
        self._inflight = None
        self.logger.warning_event("turn_cancelled", "Turn task was cancelled before it started")
        self._publish()

    def _rollback(self, entry: TranscriptEntry) -> None:
        """Remove the unanswered user entry appended for this turn."""
        transcript = self._state.transcript
        if transcript and transcript[-1] is entry:
            transcript.pop()
            return
        # Only one turn is ever in flight, so the entry should be last
        for index in range(len(transcript) - 1, -1, -1):
            if transcript[index] is entry:
                del transcript[index]
                self.logger.warning_event(
                    "rollback_out_of_order",
                    "Unanswered entry was not the last transcript entry",
                    index=index,
                )
                return

    async def wait_idle(self) -> None:
        """Wait until the in-flight turn, if any, has resolved."""
        task = self._inflight
        if task is not None:
            await asyncio.shield(task)

    async def send(self, text: str) -> SubmitOutcome:
        """Submit text and, when accepted, wait for the turn to resolve."""
        outcome = self.submit_input(text)
        if outcome is SubmitOutcome.ACCEPTED:
            await self.wait_idle()
        return outcome
