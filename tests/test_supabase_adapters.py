"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from dreamcatcher.adapters.supabase_draft_repository import SupabaseDraftRepository
from dreamcatcher.adapters.supabase_dream_repository import SupabaseDreamRepository
from dreamcatcher.domain.dreams import DreamRecord


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {
            "select": [],
            "insert": [],
            "update": [],
            "delete": [],
            "upsert": [],
        }
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_order: tuple[str, bool] | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def upsert(  # type: ignore[no-untyped-def]
        self, payload, on_conflict: str = ""
    ) -> "FakeTable":
        self._action = "upsert"
        self.last_payload = payload
        self.last_filters.append(("on_conflict", on_conflict))
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def contains(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def gte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((f"{column}>=", value))
        return self

    def lt(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((f"{column}<", value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, column: str, desc: bool = False) -> "FakeTable":
        self.last_order = (column, desc)
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _row(dream_id: str, captured_at: str, tags: list[str]) -> dict[str, object]:
    return {
        "id": dream_id,
        "captured_at": captured_at,
        "original_text": "我梦见大海",
        "optimized_prompt": "endless ocean",
        "image_ref": "file:///docs/dream_1.jpg",
        "interpretation": "a",
        "story": "b",
        "psychological_mapping": None,
        "action_suggestion": "c",
        "text_content": "",
        "tags": tags,
    }


def test_supabase_dream_repository_insert_and_get() -> None:
    client = FakeSupabaseClient()
    dreams_table = client.table("dreams")
    record = DreamRecord(original_text="我梦见大海", tags=("深海",))
    dreams_table.queue("insert", [{"id": str(record.id)}])
    dreams_table.queue(
        "select", [_row(str(record.id), record.captured_at.isoformat(), ["深海"])]
    )

    repository = SupabaseDreamRepository(client)
    repository.insert(record)
    fetched = repository.get(record.id)

    assert isinstance(dreams_table.last_payload, dict)
    assert dreams_table.last_payload["tags"] == ["深海"]
    assert fetched is not None
    assert fetched.id == record.id
    assert fetched.captured_at == record.captured_at
    assert fetched.tags == ("深海",)
    assert fetched.psychological_mapping == ""


def test_supabase_dream_repository_insert_failure_raises() -> None:
    repository = SupabaseDreamRepository(FakeSupabaseClient())

    with pytest.raises(RuntimeError):
        repository.insert(DreamRecord(original_text="dream"))


def test_supabase_dream_repository_list_applies_filters() -> None:
    client = FakeSupabaseClient()
    dreams_table = client.table("dreams")
    dreams_table.queue(
        "select", [_row(str(uuid4()), "2024-03-01T15:30:00+00:00", ["飞行"])]
    )
    start = datetime(2024, 3, 1, tzinfo=UTC)
    end = datetime(2024, 3, 2, tzinfo=UTC)

    records = SupabaseDreamRepository(client).list_dreams(
        tag="飞行", start=start, end=end
    )

    assert len(records) == 1
    assert ("tags", ["飞行"]) in dreams_table.last_filters
    assert ("captured_at>=", start.isoformat()) in dreams_table.last_filters
    assert ("captured_at<", end.isoformat()) in dreams_table.last_filters
    assert dreams_table.last_order == ("captured_at", True)


def test_supabase_dream_repository_update_and_delete() -> None:
    client = FakeSupabaseClient()
    dreams_table = client.table("dreams")
    dream_id = uuid4()
    repository = SupabaseDreamRepository(client)

    repository.update_tags(dream_id, ("美梦", "童年"))
    assert dreams_table.last_payload == {"tags": ["美梦", "童年"]}

    repository.delete(dream_id)
    assert ("id", str(dream_id)) in dreams_table.last_filters


def test_supabase_draft_repository() -> None:
    client = FakeSupabaseClient()
    drafts_table = client.table("drafts")
    drafts_table.queue("select", [{"text": "half a dream"}])
    repository = SupabaseDraftRepository(client)

    assert repository.get("dream_text_draft") == "half a dream"
    assert repository.get("dream_text_draft") is None

    repository.set("dream_text_draft", "more")
    assert isinstance(drafts_table.last_payload, dict)
    assert drafts_table.last_payload["text"] == "more"

    repository.clear("dream_text_draft")
    assert ("key", "dream_text_draft") in drafts_table.last_filters
