"""Models for the dream capture flow."""

from dataclasses import dataclass
from enum import StrEnum


class ProcessingStep(StrEnum):
    """States of a capture session."""

    IDLE = "idle"
    TRANSCRIBING = "transcribing"
    OPTIMIZING = "optimizing"
    GENERATING = "generating"
    COMPLETED = "completed"
    ERRORED = "errored"


class InputMode(StrEnum):
    """Where the dream description comes from."""

    AUDIO = "audio"
    TEXT = "text"


@dataclass(frozen=True)
class TranscriptUpdate:
    """Partial transcription result pushed by the speech recognizer."""

    text: str
    level: float = 0.0
