"""Saved dream journal: persistence and browsing."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from dreamcatcher.domain.dreams import TAG_VOCABULARY, DreamRecord, toggle_tag


class DreamNotFoundError(LookupError):
    """Raised when a dream id is not in the journal."""


class DreamRepository(Protocol):
    """Persistence interface for saved dreams."""

    def insert(self, record: DreamRecord) -> None:
        """Persist a new dream record."""

    def delete(self, dream_id: UUID) -> None:
        """Delete a dream record."""

    def get(self, dream_id: UUID) -> DreamRecord | None:
        """Return a dream by id, if present."""

    def list_dreams(
        self,
        tag: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[DreamRecord]:
        """Return dreams newest first, optionally by tag and capture range."""

    def update_tags(self, dream_id: UUID, tags: tuple[str, ...]) -> None:
        """Replace the tags of a saved dream."""


@dataclass
class JournalService:
    """Application service for saved dreams."""

    repository: DreamRepository
    timezone_name: str = "UTC"

    def save(self, record: DreamRecord) -> DreamRecord:
        """Insert a draft into the journal."""
        self.repository.insert(record)
        return record

    def get(self, dream_id: UUID) -> DreamRecord:
        """Return a saved dream or raise DreamNotFoundError."""
        record = self.repository.get(dream_id)
        if record is None:
            raise DreamNotFoundError(str(dream_id))
        return record

    def delete(self, dream_id: UUID) -> None:
        """Remove a saved dream."""
        self.get(dream_id)
        self.repository.delete(dream_id)

    def list_dreams(
        self, tag: str | None = None, day: date | None = None
    ) -> list[DreamRecord]:
        """List dreams newest first, filtered by tag and local calendar day."""
        if tag is not None and tag not in TAG_VOCABULARY:
            raise ValueError(f"Unknown tag: {tag}")
        if day is None:
            return self.repository.list_dreams(tag=tag)
        start, end = self._day_bounds(day)
        return self.repository.list_dreams(tag=tag, start=start, end=end)

    def dream_days(self, year: int, month: int) -> list[date]:
        """Return the local calendar days of a month that have at least one dream."""
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid month: {month}")
        tz = ZoneInfo(self.timezone_name)
        first = date(year, month, 1)
        following = date(year + month // 12, month % 12 + 1, 1)
        start = datetime.combine(first, time.min, tzinfo=tz).astimezone(UTC)
        end = datetime.combine(following, time.min, tzinfo=tz).astimezone(UTC)
        records = self.repository.list_dreams(start=start, end=end)
        return sorted({record.captured_at.astimezone(tz).date() for record in records})

    def toggle_tag(self, dream_id: UUID, tag: str) -> DreamRecord:
        """Add or remove a tag on a saved dream."""
        updated = toggle_tag(self.get(dream_id), tag)
        self.repository.update_tags(dream_id, updated.tags)
        return updated

    def _day_bounds(self, day: date) -> tuple[datetime, datetime]:
        tz = ZoneInfo(self.timezone_name)
        start = datetime.combine(day, time.min, tzinfo=tz)
        end = start + timedelta(days=1)
        return start.astimezone(UTC), end.astimezone(UTC)
