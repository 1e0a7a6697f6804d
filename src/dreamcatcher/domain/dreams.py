"""Domain models for saved dreams."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

# Labels a user can attach to a dream card.
TAG_VOCABULARY: tuple[str, ...] = ("美梦", "噩梦", "飞行", "深海", "追逐", "童年", "未知")


@dataclass(frozen=True)
class DreamRecord:
    """A processed dream, either held as a draft or saved to the journal."""

    original_text: str
    optimized_prompt: str = ""
    image_ref: str = ""
    interpretation: str = ""
    story: str = ""
    psychological_mapping: str = ""
    action_suggestion: str = ""
    text_content: str = ""
    tags: tuple[str, ...] = ()
    id: UUID = field(default_factory=uuid4)
    captured_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


def toggle_tag(record: DreamRecord, tag: str) -> DreamRecord:
    """Return a copy of the record with the tag removed or appended."""
    if tag not in TAG_VOCABULARY:
        raise ValueError(f"Unknown tag: {tag}")
    if tag in record.tags:
        tags = tuple(existing for existing in record.tags if existing != tag)
    else:
        tags = (*record.tags, tag)
    return replace(record, tags=tags)
