"""Supabase repository for typed-text drafts."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from dreamcatcher.services.drafts import DraftRepository


@dataclass
class SupabaseDraftRepository(DraftRepository):
    """Stores drafts in a key-value table, apart from the dreams table."""

    client: Client

    def get(self, key: str) -> str | None:
        """Return the stored draft text."""
        response = (
            self.client.table("drafts")
            .select("text")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("text")

    def set(self, key: str, text: str) -> None:
        """Upsert the draft text for a key."""
        self.client.table("drafts").upsert(
            {
                "key": key,
                "text": text,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="key",
        ).execute()

    def clear(self, key: str) -> None:
        """Delete the draft for a key."""
        self.client.table("drafts").delete().eq("key", key).execute()
