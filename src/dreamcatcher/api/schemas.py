"""Pydantic models for the HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from dreamcatcher.domain.capture import InputMode, ProcessingStep
from dreamcatcher.domain.dreams import DreamRecord
from dreamcatcher.services.capture import CaptureSnapshot


class DreamOut(BaseModel):
    """Dream card payload."""

    id: UUID
    captured_at: datetime
    original_text: str
    optimized_prompt: str
    image_ref: str
    interpretation: str
    story: str
    psychological_mapping: str
    action_suggestion: str
    text_content: str
    tags: list[str]

    @classmethod
    def from_record(cls, record: DreamRecord) -> "DreamOut":
        """Build the payload from a domain record."""
        return cls(
            id=record.id,
            captured_at=record.captured_at,
            original_text=record.original_text,
            optimized_prompt=record.optimized_prompt,
            image_ref=record.image_ref,
            interpretation=record.interpretation,
            story=record.story,
            psychological_mapping=record.psychological_mapping,
            action_suggestion=record.action_suggestion,
            text_content=record.text_content,
            tags=list(record.tags),
        )


class CaptureOut(BaseModel):
    """Capture session payload."""

    step: ProcessingStep
    input_mode: InputMode
    transcript: str
    audio_level: float
    recording_seconds: float
    note: str
    text: str
    awaiting_note: bool
    draft: DreamOut | None = None
    error_message: str | None = None

    @classmethod
    def from_snapshot(cls, snapshot: CaptureSnapshot) -> "CaptureOut":
        """Build the payload from a session snapshot."""
        return cls(
            step=snapshot.step,
            input_mode=snapshot.input_mode,
            transcript=snapshot.transcript,
            audio_level=snapshot.audio_level,
            recording_seconds=snapshot.recording_seconds,
            note=snapshot.note,
            text=snapshot.text,
            awaiting_note=snapshot.awaiting_note,
            draft=DreamOut.from_record(snapshot.draft) if snapshot.draft else None,
            error_message=snapshot.error_message,
        )


class TranscriptIn(BaseModel):
    """Partial transcript pushed by the client's recognizer."""

    text: str
    level: float = Field(default=0.0, allow_inf_nan=False)


class NoteIn(BaseModel):
    """Note attached to a recorded dream."""

    note: str


class TextIn(BaseModel):
    """Typed dream description."""

    text: str


class ModeIn(BaseModel):
    """Input mode switch."""

    mode: InputMode
