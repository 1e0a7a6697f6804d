"""Persistence for in-progress typed dream text."""

from dataclasses import dataclass
from typing import Protocol

TEXT_DRAFT_KEY = "dream_text_draft"


class DraftRepository(Protocol):
    """Key-value persistence for drafts."""

    def get(self, key: str) -> str | None:
        """Return the stored draft text, if any."""

    def set(self, key: str, text: str) -> None:
        """Store draft text under the key."""

    def clear(self, key: str) -> None:
        """Remove the draft stored under the key."""


@dataclass
class DraftService:
    """Saves and restores the typed dream draft."""

    repository: DraftRepository

    def load(self) -> str:
        """Return the saved draft or an empty string."""
        return self.repository.get(TEXT_DRAFT_KEY) or ""

    def save(self, text: str) -> None:
        """Persist the current typed text."""
        if text:
            self.repository.set(TEXT_DRAFT_KEY, text)
        else:
            self.repository.clear(TEXT_DRAFT_KEY)

    def clear(self) -> None:
        """Forget the saved draft."""
        self.repository.clear(TEXT_DRAFT_KEY)
