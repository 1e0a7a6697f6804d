"""Supabase repository for saved dreams."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from dreamcatcher.domain.dreams import DreamRecord
from dreamcatcher.services.journal import DreamRepository


@dataclass
class SupabaseDreamRepository(DreamRepository):
    """Supabase implementation for the dream journal."""

    client: Client

    def insert(self, record: DreamRecord) -> None:
        """Insert a dream row."""
        response = self.client.table("dreams").insert(_to_row(record)).execute()
        if not response.data:
            raise RuntimeError("Failed to save dream")

    def delete(self, dream_id: UUID) -> None:
        """Delete a dream row."""
        self.client.table("dreams").delete().eq("id", str(dream_id)).execute()

    def get(self, dream_id: UUID) -> DreamRecord | None:
        """Return a dream by id, if present."""
        response = (
            self.client.table("dreams")
            .select("*")
            .eq("id", str(dream_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def list_dreams(
        self,
        tag: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[DreamRecord]:
        """Return dreams newest first."""
        query = self.client.table("dreams").select("*")
        if tag is not None:
            query = query.contains("tags", [tag])
        if start is not None:
            query = query.gte("captured_at", start.isoformat())
        if end is not None:
            query = query.lt("captured_at", end.isoformat())
        response = query.order("captured_at", desc=True).execute()
        return [_parse_row(row) for row in response.data or []]

    def update_tags(self, dream_id: UUID, tags: tuple[str, ...]) -> None:
        """Replace the tag list of a dream."""
        self.client.table("dreams").update({"tags": list(tags)}).eq(
            "id", str(dream_id)
        ).execute()


def _to_row(record: DreamRecord) -> dict[str, object]:
    return {
        "id": str(record.id),
        "captured_at": record.captured_at.isoformat(),
        "original_text": record.original_text,
        "optimized_prompt": record.optimized_prompt,
        "image_ref": record.image_ref,
        "interpretation": record.interpretation,
        "story": record.story,
        "psychological_mapping": record.psychological_mapping,
        "action_suggestion": record.action_suggestion,
        "text_content": record.text_content,
        "tags": list(record.tags),
    }


def _parse_row(row: dict[str, object]) -> DreamRecord:
    """Parse a dreams row into a domain model."""
    captured_raw = row.get("captured_at")
    captured_at = (
        datetime.fromisoformat(captured_raw)
        if isinstance(captured_raw, str) and captured_raw
        else datetime.min.replace(tzinfo=UTC)
    )
    tags = row.get("tags") or []
    return DreamRecord(
        id=UUID(str(row["id"])),
        captured_at=captured_at,
        original_text=str(row.get("original_text") or ""),
        optimized_prompt=str(row.get("optimized_prompt") or ""),
        image_ref=str(row.get("image_ref") or ""),
        interpretation=str(row.get("interpretation") or ""),
        story=str(row.get("story") or ""),
        psychological_mapping=str(row.get("psychological_mapping") or ""),
        action_suggestion=str(row.get("action_suggestion") or ""),
        text_content=str(row.get("text_content") or ""),
        tags=tuple(str(tag) for tag in tags) if isinstance(tags, list) else (),
    )
