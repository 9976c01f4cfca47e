"""
Tests for the SessionController state machine.

Covers initialization (credential and greeting failures), turn execution,
rollback of failed turns, the single-flight busy guard and snapshot
publication.
"""

import asyncio

import pytest
import pytest_asyncio

from chat_core.prompts import greeting_instruction, system_persona
from chat_core.types import Role, SessionPhase, SubmitOutcome, TranscriptEntry
from constants import GREETING_ERROR_MESSAGE, NOT_INITIALIZED_MESSAGE
from exceptions import ProviderError, ProviderTimeoutError

GREETING = "Hello! How can I help you find a book today?"


class TestInitialization:
    """Test session start-up."""

    @pytest.mark.asyncio
    async def test_missing_credential_fails_initialization(self, make_controller, scripted_model):
        """A missing API key is terminal and blocks every turn."""
        controller = make_controller(scripted_model, api_key=None)

        snapshot = await controller.initialize()

        assert snapshot.phase is SessionPhase.INIT_FAILED
        assert snapshot.last_error == (
            "Initialization Error: GROQ API key not found in environment variables"
        )
        assert snapshot.transcript == ()
        assert controller.pipeline_ready is False

        outcome = controller.submit_input("hello")

        assert outcome is SubmitOutcome.REJECTED_NOT_INITIALIZED
        assert controller.last_error == NOT_INITIALIZED_MESSAGE
        assert controller.transcript == ()
        assert controller.phase is SessionPhase.INIT_FAILED
        assert scripted_model.received == []

    @pytest.mark.asyncio
    async def test_blank_credential_counts_as_missing(self, make_controller, scripted_model):
        """Whitespace-only keys are treated as absent."""
        controller = make_controller(scripted_model, api_key="   ")

        snapshot = await controller.initialize()

        assert snapshot.phase is SessionPhase.INIT_FAILED
        assert "API key not found" in snapshot.last_error

    @pytest.mark.asyncio
    async def test_model_construction_failure_fails_initialization(self, settings):
        """Any error while building the model leaves the session without a pipeline."""
        from sessions.session_controller import SessionController

        def broken_factory(api_key):
            raise RuntimeError("SDK exploded")

        controller = SessionController(
            settings=settings,
            credential_provider=lambda: "key",
            model_factory=broken_factory,
        )

        snapshot = await controller.initialize()

        assert snapshot.phase is SessionPhase.INIT_FAILED
        assert snapshot.last_error == "Initialization Error: SDK exploded"

    @pytest.mark.asyncio
    async def test_greeting_success(self, make_controller, scripted_model):
        """The priming call's reply becomes the first transcript entry."""
        scripted_model.script = [GREETING]
        controller = make_controller(scripted_model)

        snapshot = await controller.initialize()

        assert snapshot.phase is SessionPhase.READY
        assert snapshot.transcript == (TranscriptEntry(Role.ASSISTANT, GREETING),)
        assert snapshot.is_busy is False
        assert snapshot.last_error is None

    @pytest.mark.asyncio
    async def test_greeting_uses_priming_instruction(self, make_controller, scripted_model):
        """The greeting request carries the persona and the fixed instruction."""
        scripted_model.script = [GREETING]
        controller = make_controller(scripted_model)

        await controller.initialize()

        assert scripted_model.received == [
            [("system", system_persona), ("human", greeting_instruction)]
        ]

    @pytest.mark.asyncio
    async def test_greeting_failure_is_not_fatal(self, make_controller, scripted_model):
        """A failed greeting leaves the session usable with an error shown."""
        scripted_model.script = [ProviderError("service unavailable"), "Second floor, aisle 12."]
        controller = make_controller(scripted_model)

        snapshot = await controller.initialize()

        assert snapshot.phase is SessionPhase.READY
        assert snapshot.transcript == ()
        assert snapshot.last_error == GREETING_ERROR_MESSAGE
        assert controller.pipeline_ready is True

        outcome = await controller.send("Where is the fiction section?")

        assert outcome is SubmitOutcome.ACCEPTED
        assert len(controller.transcript) == 2
        assert controller.last_error is None

    @pytest.mark.asyncio
    async def test_initialize_runs_once(self, make_controller, scripted_model):
        """A second initialize call does not rebuild or re-greet."""
        scripted_model.script = [GREETING]
        controller = make_controller(scripted_model)

        await controller.initialize()
        snapshot = await controller.initialize()

        assert len(scripted_model.received) == 1
        assert snapshot.transcript == (TranscriptEntry.assistant(GREETING),)

    @pytest.mark.asyncio
    async def test_submit_while_greeting_outstanding_is_ignored(self, make_controller, scripted_model):
        """Input arriving before the greeting resolves cannot jump ahead of it."""
        scripted_model.script = [GREETING]
        gate = scripted_model.hold()
        controller = make_controller(scripted_model)

        init_task = asyncio.create_task(controller.initialize())
        for _ in range(100):
            if controller.pipeline_ready:
                break
            await asyncio.sleep(0.01)

        assert controller.phase is SessionPhase.INITIALIZING
        assert controller.submit_input("too early") is SubmitOutcome.IGNORED_BUSY

        gate.set()
        await init_task

        assert controller.transcript == (TranscriptEntry.assistant(GREETING),)


class TestTurns:
    """Test turn submission and resolution."""

    @pytest_asyncio.fixture
    async def ready_controller(self, make_controller, scripted_model):
        scripted_model.script = [GREETING]
        controller = make_controller(scripted_model)
        await controller.initialize()
        return controller

    @pytest.mark.asyncio
    async def test_successful_turn_appends_pair(self, ready_controller, scripted_model):
        """A resolved turn adds the user message and the reply, in order."""
        scripted_model.script = ["Second floor, aisle 12."]

        outcome = await ready_controller.send("Where is the fiction section?")

        assert outcome is SubmitOutcome.ACCEPTED
        assert ready_controller.transcript[1:] == (
            TranscriptEntry(Role.USER, "Where is the fiction section?"),
            TranscriptEntry(Role.ASSISTANT, "Second floor, aisle 12."),
        )
        assert ready_controller.is_busy is False
        assert ready_controller.last_error is None

    @pytest.mark.asyncio
    async def test_input_is_trimmed_and_buffer_cleared(self, ready_controller, scripted_model):
        """Only the trimmed text is sent and recorded."""
        scripted_model.script = ["We open at nine."]
        ready_controller.set_pending_input("  When do you open?  \n")

        assert ready_controller.can_submit is True
        outcome = ready_controller.submit_input()
        await ready_controller.wait_idle()

        assert outcome is SubmitOutcome.ACCEPTED
        assert ready_controller.pending_input == ""
        assert ready_controller.transcript[1] == TranscriptEntry.user("When do you open?")
        assert scripted_model.received[-1][1] == ("human", "When do you open?")

    @pytest.mark.asyncio
    async def test_failed_turn_rolls_back_user_entry(self, ready_controller, scripted_model):
        """A provider timeout removes the unanswered message and reports an error."""
        before = ready_controller.transcript
        scripted_model.script = [ProviderTimeoutError("Groq API request timed out: read timeout")]

        outcome = await ready_controller.send("test")

        assert outcome is SubmitOutcome.ACCEPTED
        assert ready_controller.transcript == before
        assert ready_controller.last_error == (
            "Conversation Error: Groq API request timed out: read timeout"
        )
        assert ready_controller.is_busy is False
        assert ready_controller.phase is SessionPhase.READY

    @pytest.mark.asyncio
    async def test_rollback_on_unexpected_error(self, ready_controller, scripted_model):
        """Errors outside the ProviderError family are rolled back the same way."""
        before = ready_controller.transcript
        scripted_model.script = [ValueError("bad payload")]

        await ready_controller.send("anything")

        assert ready_controller.transcript == before
        assert ready_controller.last_error.startswith("Conversation Error:")

    @pytest.mark.asyncio
    async def test_session_recovers_after_failed_turn(self, ready_controller, scripted_model):
        """The next accepted turn clears the previous error."""
        scripted_model.script = [ProviderError("rate limited"), "Yes, we have it."]

        await ready_controller.send("Do you have Dune?")
        assert ready_controller.last_error is not None

        await ready_controller.send("Do you have Dune?")

        assert ready_controller.last_error is None
        assert [entry.role for entry in ready_controller.transcript] == [
            Role.ASSISTANT,
            Role.USER,
            Role.ASSISTANT,
        ]

    @pytest.mark.asyncio
    async def test_errors_replace_rather_than_accumulate(self, ready_controller, scripted_model):
        """Only the most recent error is kept."""
        scripted_model.script = [ProviderError("first"), ProviderError("second")]

        await ready_controller.send("one")
        await ready_controller.send("two")

        assert ready_controller.last_error == "Conversation Error: second"

    @pytest.mark.asyncio
    async def test_busy_for_whole_turn(self, ready_controller, scripted_model):
        """is_busy is set on acceptance and cleared only on resolution."""
        scripted_model.script = ["Reply"]
        gate = scripted_model.hold()

        assert ready_controller.is_busy is False
        ready_controller.submit_input("question")
        assert ready_controller.is_busy is True

        await asyncio.sleep(0.05)
        assert ready_controller.is_busy is True

        gate.set()
        await ready_controller.wait_idle()
        assert ready_controller.is_busy is False

    @pytest.mark.asyncio
    async def test_ignored_busy_submission_keeps_draft(self, ready_controller, scripted_model):
        """Input rejected as busy leaves the buffered draft and publishes nothing."""
        scripted_model.script = ["reply to a"]
        gate = scripted_model.hold()
        ready_controller.submit_input("a")
        ready_controller.set_pending_input("draft in progress")
        before = ready_controller.snapshot()
        published = []
        ready_controller.subscribe(published.append)

        outcome = ready_controller.submit_input("b")

        assert outcome is SubmitOutcome.IGNORED_BUSY
        assert ready_controller.snapshot() == before
        assert published == []

        gate.set()
        await ready_controller.wait_idle()
        assert ready_controller.pending_input == "draft in progress"

    @pytest.mark.asyncio
    async def test_transcript_holds_plain_strings(self, ready_controller, scripted_model):
        """Greeting, user text and replies are stored as plain str values."""
        scripted_model.script = ["Second floor, aisle 12."]

        await ready_controller.send("Where is the fiction section?")

        assert [type(entry.text) for entry in ready_controller.transcript] == [str, str, str]

    @pytest.mark.asyncio
    async def test_overlapping_submission_is_ignored(self, ready_controller, scripted_model):
        """A second submission while the first is outstanding is a silent no-op."""
        scripted_model.script = ["reply to a", "unused"]
        gate = scripted_model.hold()

        first = ready_controller.submit_input("a")
        second = ready_controller.submit_input("b")

        assert first is SubmitOutcome.ACCEPTED
        assert second is SubmitOutcome.IGNORED_BUSY
        assert ready_controller.last_error is None

        gate.set()
        await ready_controller.wait_idle()

        assert ready_controller.transcript[1:] == (
            TranscriptEntry.user("a"),
            TranscriptEntry.assistant("reply to a"),
        )
        assert len(scripted_model.received) == 2  # greeting + "a"

    @pytest.mark.parametrize("text", ["", "   ", "\n\t  "])
    @pytest.mark.asyncio
    async def test_empty_input_changes_nothing(self, make_controller, scripted_model, text):
        """Empty or whitespace input leaves the whole snapshot untouched, draft included."""
        scripted_model.script = [ProviderError("down")]
        controller = make_controller(scripted_model)
        await controller.initialize()
        controller.set_pending_input("draft in progress")
        before = controller.snapshot()
        published = []
        controller.subscribe(published.append)

        outcome = controller.submit_input(text)

        assert outcome is SubmitOutcome.IGNORED_EMPTY
        assert controller.snapshot() == before
        assert controller.pending_input == "draft in progress"
        assert controller.last_error == GREETING_ERROR_MESSAGE
        assert published == []

    @pytest.mark.parametrize("greeting_ok", [True, False])
    @pytest.mark.asyncio
    async def test_transcript_length_after_n_turns(self, make_controller, scripted_model, greeting_ok):
        """Length is greeting count plus two entries per successful turn."""
        greeting = GREETING if greeting_ok else ProviderError("down")
        scripted_model.script = [greeting, "r1", "r2", "r3"]
        controller = make_controller(scripted_model)
        await controller.initialize()

        for index in range(3):
            await controller.send(f"question {index}")

        assert len(controller.transcript) == (1 if greeting_ok else 0) + 2 * 3

    @pytest.mark.asyncio
    async def test_submission_ignored_when_not_ready(self, ready_controller):
        """Submissions outside READY never append entries."""
        ready_controller._state.phase = SessionPhase.BUSY
        before = ready_controller.transcript

        assert ready_controller.submit_input("hello") is SubmitOutcome.IGNORED_BUSY
        assert ready_controller.transcript == before

        ready_controller._state.phase = SessionPhase.READY


class TestUnresolvedCalls:
    """The controller has no timeout of its own and no cancel operation."""

    @pytest.mark.asyncio
    async def test_session_stays_busy_while_provider_never_resolves(
        self, make_controller, scripted_model
    ):
        """Known limitation: a call that never resolves keeps the session busy."""
        scripted_model.script = [GREETING, "late reply"]
        controller = make_controller(scripted_model)
        await controller.initialize()
        gate = scripted_model.hold()

        controller.submit_input("hello?")
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(controller.wait_idle(), timeout=0.1)

        assert controller.is_busy is True
        assert controller.submit_input("anyone?") is SubmitOutcome.IGNORED_BUSY

        gate.set()
        await controller.wait_idle()
        assert controller.is_busy is False

    @pytest.mark.asyncio
    async def test_cancelled_turn_is_rolled_back(self, make_controller, scripted_model):
        """If the turn task is cancelled externally the user entry is removed."""
        scripted_model.script = [GREETING, "never shown"]
        controller = make_controller(scripted_model)
        await controller.initialize()
        before = controller.transcript
        gate = scripted_model.hold()

        controller.submit_input("cancel me")
        await asyncio.sleep(0.05)
        task = controller._inflight
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert controller.transcript == before
        assert controller.is_busy is False
        gate.set()

    @pytest.mark.asyncio
    async def test_turn_cancelled_before_start_is_rolled_back(self, make_controller, scripted_model):
        """Cancelling a turn task before its first step still restores the transcript."""
        scripted_model.script = [GREETING]
        controller = make_controller(scripted_model)
        await controller.initialize()
        before = controller.transcript

        controller.submit_input("cancel me")
        task = controller._inflight
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        await asyncio.sleep(0)

        assert task.cancelled()
        assert controller.transcript == before
        assert controller.phase is SessionPhase.READY
        assert len(scripted_model.received) == 1


class TestSnapshots:
    """Test snapshot publication to subscribers."""

    @pytest.mark.asyncio
    async def test_subscribers_see_every_transition(self, make_controller, scripted_model):
        scripted_model.script = [GREETING, "Second floor, aisle 12."]
        controller = make_controller(scripted_model)
        seen = []
        controller.subscribe(seen.append)

        await controller.initialize()
        await controller.send("Where is the fiction section?")

        phases = [snapshot.phase for snapshot in seen]
        assert phases == [
            SessionPhase.INITIALIZING,
            SessionPhase.READY,
            SessionPhase.BUSY,
            SessionPhase.READY,
        ]
        assert [len(snapshot.transcript) for snapshot in seen] == [0, 1, 2, 3]
        assert [snapshot.is_busy for snapshot in seen] == [False, False, True, False]

    @pytest.mark.asyncio
    async def test_broken_subscriber_does_not_break_session(self, make_controller, scripted_model):
        scripted_model.script = [GREETING]
        controller = make_controller(scripted_model)

        def broken(snapshot):
            raise RuntimeError("renderer crashed")

        seen = []
        controller.subscribe(broken)
        controller.subscribe(seen.append)

        snapshot = await controller.initialize()

        assert snapshot.phase is SessionPhase.READY
        assert seen[-1].transcript == (TranscriptEntry.assistant(GREETING),)

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_updates(self, make_controller, scripted_model):
        scripted_model.script = [GREETING]
        controller = make_controller(scripted_model)
        seen = []
        controller.subscribe(seen.append)
        controller.unsubscribe(seen.append)

        await controller.initialize()

        assert seen == []

    @pytest.mark.asyncio
    async def test_snapshot_is_read_only_copy(self, make_controller, scripted_model):
        scripted_model.script = [GREETING]
        controller = make_controller(scripted_model)
        await controller.initialize()

        snapshot = controller.snapshot()

        assert isinstance(snapshot.transcript, tuple)
        with pytest.raises(AttributeError):
            snapshot.is_busy = True
