"""Structured dream analysis returned by the language model."""

from pydantic import BaseModel, StrictStr, field_validator


class DreamAnalysis(BaseModel):
    """Four narrative fields describing a dream."""

    interpretation: StrictStr
    story: StrictStr
    psychological_mapping: str = ""
    action_suggestion: StrictStr

    @field_validator("psychological_mapping", mode="before")
    @classmethod
    def _render_mapping(cls, value: object) -> str:
        """Accept a plain string or a flat symbol -> meaning mapping."""
        if isinstance(value, str):
            return value
        if isinstance(value, dict) and all(
            isinstance(key, str) and isinstance(meaning, str)
            for key, meaning in value.items()
        ):
            return "\n".join(f"- {key}: {meaning}" for key, meaning in value.items())
        return ""
