"""Prompt optimization and dream analysis via a chat completion model."""

import json
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from dreamcatcher.domain.analysis import DreamAnalysis

logger = logging.getLogger(__name__)

PROMPT_ENGINEER_INSTRUCTION = (
    "You are an expert AI art prompt engineer.\n"
    "Your task is to convert the user's dream description into a high-quality, "
    "detailed English prompt for image generation.\n"
    "Style: Surrealistic, ethereal, dreamlike, 8k resolution, highly detailed.\n"
    "Output ONLY the English prompt, no other text."
)

FALLBACK_INTERPRETATION = "梦境迷雾太浓，解析未能完全穿透..."
FALLBACK_SUGGESTION = "今晚，试着在枕边放一本笔记，再次捕捉梦的尾巴。"


def dream_analyst_instruction(language: str) -> str:
    """Build the system instruction for the four-field analysis."""
    return (
        "You are a professional dream interpreter and storyteller.\n"
        "Analyze the user's dream and provide four parts in JSON format.\n\n"
        f"IMPORTANT: The output content MUST be in {language}.\n\n"
        "Required JSON structure:\n"
        '1. "interpretation": A deep psychological interpretation of the dream.\n'
        '2. "story": A short, creative retelling of the dream as a mystical story.\n'
        '3. "psychological_mapping": A concise mapping of dream symbols to the '
        'user\'s subconscious state (e.g., "Flying -> Desire for freedom").\n'
        '4. "action_suggestion": A poetic and actionable suggestion for the user '
        "today based on the dream.\n\n"
        "IMPORTANT: Return ONLY raw JSON. Do not wrap it in markdown code blocks.\n\n"
        "Format example:\n"
        "{\n"
        '  "interpretation": "...",\n'
        '  "story": "...",\n'
        '  "psychological_mapping": "...",\n'
        '  "action_suggestion": "..."\n'
        "}"
    )


class CompletionClient(Protocol):
    """Interface for a two-message chat completion call."""

    async def complete(self, system_prompt: str, user_message: str) -> str:
        """Return the top choice's text for the exchange."""


@dataclass
class CompletionService:
    """Turns dream descriptions into image prompts and interpretations."""

    client: CompletionClient
    analysis_language: str = "Simplified Chinese (简体中文)"

    async def optimize_prompt(self, text: str) -> str:
        """Return an English image-generation prompt for the dream."""
        prompt = await self.client.complete(PROMPT_ENGINEER_INSTRUCTION, text)
        return prompt.strip()

    async def analyze_dream(self, text: str) -> DreamAnalysis:
        """Return the dream analysis, or a canned one if the reply is malformed."""
        raw = await self.client.complete(
            dream_analyst_instruction(self.analysis_language), text
        )
        try:
            return parse_analysis(raw)
        except (json.JSONDecodeError, ValidationError):
            logger.warning("Failed to parse dream analysis: %s", raw)
            return fallback_analysis(text)


def parse_analysis(raw: str) -> DreamAnalysis:
    """Parse a model reply into a DreamAnalysis, ignoring a code fence."""
    return DreamAnalysis.model_validate(json.loads(strip_code_fence(raw)))


def strip_code_fence(raw: str) -> str:
    """Remove a surrounding markdown code fence from a reply."""
    output = raw.strip()
    if output.startswith("```json"):
        output = output[len("```json") :]
    elif output.startswith("```"):
        output = output[len("```") :]
    if output.endswith("```"):
        output = output[: -len("```")]
    return output.strip()


def fallback_analysis(text: str) -> DreamAnalysis:
    """Generic analysis used when the model reply cannot be parsed."""
    return DreamAnalysis(
        interpretation=FALLBACK_INTERPRETATION,
        story=text,
        psychological_mapping="",
        action_suggestion=FALLBACK_SUGGESTION,
    )
