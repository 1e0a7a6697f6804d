"""Capture session state machine for recording and processing a dream."""

import asyncio
import logging
import math
import time
import unicodedata
from dataclasses import dataclass, field

from dreamcatcher.domain.capture import InputMode, ProcessingStep, TranscriptUpdate
from dreamcatcher.domain.dreams import DreamRecord, toggle_tag
from dreamcatcher.services.drafts import DraftService
from dreamcatcher.services.journal import JournalService
from dreamcatcher.services.workflow import DreamProcessingError, DreamWorkflow

logger = logging.getLogger(__name__)


class InvalidTransition(RuntimeError):
    """Raised when a command is not allowed in the current state."""


@dataclass(frozen=True)
class CaptureSnapshot:
    """Read-only view of a capture session."""

    step: ProcessingStep
    input_mode: InputMode
    transcript: str
    audio_level: float
    recording_seconds: float
    note: str
    text: str
    awaiting_note: bool
    draft: DreamRecord | None
    error_message: str | None


@dataclass
class CaptureSession:
    """Single-user capture flow from recording to a saved dream."""

    workflow: DreamWorkflow
    journal: JournalService
    drafts: DraftService
    debug_errors: bool = False

    step: ProcessingStep = ProcessingStep.IDLE
    input_mode: InputMode = InputMode.AUDIO
    transcript: str = ""
    audio_level: float = 0.0
    note: str = ""
    text: str = ""
    awaiting_note: bool = False
    draft: DreamRecord | None = None
    error_message: str | None = None
    _updates: asyncio.Queue[TranscriptUpdate | None] | None = field(
        default=None, repr=False
    )
    _consumer: asyncio.Task[None] | None = field(default=None, repr=False)
    _recording_started: float | None = field(default=None, repr=False)
    _recording_seconds: float = field(default=0.0, repr=False)

    def snapshot(self) -> CaptureSnapshot:
        """Return the current state."""
        seconds = self._recording_seconds
        if self._recording_started is not None:
            seconds = time.monotonic() - self._recording_started
        return CaptureSnapshot(
            step=self.step,
            input_mode=self.input_mode,
            transcript=self.transcript,
            audio_level=self.audio_level,
            recording_seconds=seconds,
            note=self.note,
            text=self.text,
            awaiting_note=self.awaiting_note,
            draft=self.draft,
            error_message=self.error_message,
        )

    def restore_draft(self) -> None:
        """Load the persisted typed text from a previous run."""
        self.text = self.drafts.load()

    async def start_recording(self) -> None:
        """Begin receiving transcript updates from the recognizer."""
        self._require("start_recording", ProcessingStep.IDLE)
        self.input_mode = InputMode.AUDIO
        self.transcript = ""
        self.audio_level = 0.0
        self.awaiting_note = False
        self._recording_started = time.monotonic()
        self._recording_seconds = 0.0
        self._updates = asyncio.Queue()
        self._consumer = asyncio.create_task(self._consume(self._updates))
        self.step = ProcessingStep.TRANSCRIBING

    def publish(self, update: TranscriptUpdate) -> None:
        """Queue a transcript update; the session consumes them in order."""
        self._require("publish", ProcessingStep.TRANSCRIBING)
        if self._updates is None:
            raise InvalidTransition("Recording channel is closed")
        self._updates.put_nowait(update)

    async def stop_recording(self) -> None:
        """Close the update channel and wait until it is drained."""
        self._require("stop_recording", ProcessingStep.TRANSCRIBING)
        if self._updates is not None:
            self._updates.put_nowait(None)
        if self._consumer is not None:
            await self._consumer
        self._updates = None
        self._consumer = None
        if self._recording_started is not None:
            self._recording_seconds = time.monotonic() - self._recording_started
        self._recording_started = None
        self.audio_level = 0.0
        self.step = ProcessingStep.IDLE
        self.awaiting_note = bool(self.transcript.strip())

    def set_note(self, note: str) -> None:
        """Attach a note that replaces the transcript as the saved text."""
        self._require("set_note", ProcessingStep.IDLE, ProcessingStep.ERRORED)
        self.note = note

    def set_input_mode(self, mode: InputMode) -> None:
        """Switch between spoken and typed input."""
        self._require("set_input_mode", ProcessingStep.IDLE)
        self.input_mode = mode

    def set_text(self, text: str) -> None:
        """Update the typed description and autosave it as a draft."""
        self._require("set_text", ProcessingStep.IDLE, ProcessingStep.ERRORED)
        self.text = sanitize_text(text)
        self.drafts.save(self.text)

    async def submit(self) -> CaptureSnapshot:
        """Run the dream workflow on the current input."""
        self._require("submit", ProcessingStep.IDLE, ProcessingStep.ERRORED)
        description = self._description()
        if not description:
            raise ValueError("Nothing to process")
        self.awaiting_note = False
        self.error_message = None
        self.draft = None
        self.step = ProcessingStep.OPTIMIZING
        try:
            record = await self.workflow.process(
                description,
                note=self.note,
                text_content=self.text if self.input_mode is InputMode.TEXT else "",
                on_step=self._on_step,
            )
        except DreamProcessingError as exc:
            self.error_message = self._format_error(exc)
            self.step = ProcessingStep.ERRORED
            return self.snapshot()
        self.draft = record
        self.step = ProcessingStep.COMPLETED
        return self.snapshot()

    async def retry(self) -> CaptureSnapshot:
        """Re-run the whole workflow after a failure."""
        self._require("retry", ProcessingStep.ERRORED)
        return await self.submit()

    def toggle_tag(self, tag: str) -> DreamRecord:
        """Toggle a tag on the unsaved draft."""
        self.draft = toggle_tag(self._require_draft("toggle_tag"), tag)
        return self.draft

    def save(self) -> DreamRecord:
        """Persist the draft to the journal and reset the session."""
        record = self.journal.save(self._require_draft("save"))
        logger.info("Saved dream %s", record.id)
        self._reset()
        return record

    def discard(self) -> None:
        """Drop the draft or error without saving anything."""
        self._require("discard", ProcessingStep.COMPLETED, ProcessingStep.ERRORED)
        if self.draft is not None and self.draft.image_ref:
            # Generated file stays on disk with no record pointing at it.
            logger.info("Discarded draft leaves image %s", self.draft.image_ref)
        self._reset()

    def _on_step(self, step: ProcessingStep) -> None:
        self.step = step

    def _description(self) -> str:
        if self.input_mode is InputMode.TEXT:
            return self.text.strip()
        return self.transcript.strip()

    def _reset(self) -> None:
        self.step = ProcessingStep.IDLE
        self.draft = None
        self.error_message = None
        self.transcript = ""
        self.note = ""
        self.awaiting_note = False
        self._recording_seconds = 0.0
        if self.input_mode is InputMode.TEXT:
            self.text = ""
            self.drafts.clear()

    def _format_error(self, exc: DreamProcessingError) -> str:
        cause = exc.__cause__
        if self.debug_errors and cause is not None:
            return f"{exc.user_message}\n(debug: {type(cause).__name__}: {cause})"
        return exc.user_message

    def _require_draft(self, command: str) -> DreamRecord:
        self._require(command, ProcessingStep.COMPLETED)
        if self.draft is None:
            raise InvalidTransition(f"Cannot {command} without a draft")
        return self.draft

    def _require(self, command: str, *allowed: ProcessingStep) -> None:
        if self.step not in allowed:
            raise InvalidTransition(f"Cannot {command} while {self.step}")

    async def _consume(self, updates: asyncio.Queue[TranscriptUpdate | None]) -> None:
        while True:
            update = await updates.get()
            if update is None:
                return
            self.transcript = update.text
            self.audio_level = _clamp_level(update.level)


def _clamp_level(level: float) -> float:
    if not math.isfinite(level):
        return 0.0
    return min(max(level, 0.0), 1.0)


def sanitize_text(text: str) -> str:
    """Drop control characters other than newlines."""
    return "".join(
        char for char in text if char == "\n" or unicodedata.category(char) != "Cc"
    )
