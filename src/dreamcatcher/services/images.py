"""Illustration generation with tiered model fallback."""

import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol
from urllib.parse import quote, urlencode

logger = logging.getLogger(__name__)

# Path-safe characters minus "/" and "?", which must stay escaped inside the prompt.
_PROMPT_SAFE_CHARS = "!$&'()*+,;=:@"

IMAGE_WIDTH = 1080
IMAGE_HEIGHT = 720
MAX_SEED = 10000

FALLBACK_IMAGE_URLS: tuple[str, ...] = (
    # starry sky
    "https://images.unsplash.com/photo-1518066000714-58c45f1a2c0a?q=80&w=2070&auto=format&fit=crop",
    # misty forest
    "https://images.unsplash.com/photo-1502481851512-e9e2529bfbf9?q=80&w=2069&auto=format&fit=crop",
    # cosmos
    "https://images.unsplash.com/photo-1446776811953-b23d57bd21aa?q=80&w=2072&auto=format&fit=crop",
    # aurora
    "https://images.unsplash.com/photo-1517544845501-bb78ccdad31e?q=80&w=2069&auto=format&fit=crop",
    # rainy night
    "https://images.unsplash.com/photo-1507608616759-54f48f0af0ee?q=80&w=1974&auto=format&fit=crop",
)


@dataclass(frozen=True)
class ImageTier:
    """Backend model and the prompt length it accepts."""

    model: str
    max_prompt_length: int


HIGH_QUALITY_TIER = ImageTier(model="flux", max_prompt_length=250)
FAST_TIER = ImageTier(model="turbo", max_prompt_length=150)


class ImageFetcher(Protocol):
    """Interface for downloading image bytes."""

    async def fetch(self, url: str) -> bytes:
        """Download the URL and return image bytes."""


class ImageStore(Protocol):
    """Interface for durable local image storage."""

    def save(self, data: bytes) -> str:
        """Persist image bytes under a unique name and return a reference."""

    def resolve(self, ref: str) -> Path | None:
        """Return the local file for a reference, if it can be found."""


def build_image_url(base_url: str, prompt: str, tier: ImageTier, seed: int) -> str:
    """Build the generation URL for a prompt, truncated for the tier."""
    encoded_prompt = quote(prompt[: tier.max_prompt_length], safe=_PROMPT_SAFE_CHARS)
    query = urlencode(
        {
            "width": IMAGE_WIDTH,
            "height": IMAGE_HEIGHT,
            "seed": seed,
            "nologo": "true",
            "model": tier.model,
        }
    )
    return f"{base_url.rstrip('/')}/prompt/{encoded_prompt}?{query}"


@dataclass
class ImageService:
    """Generates an illustration, degrading to a stock image when needed."""

    fetcher: ImageFetcher
    store: ImageStore
    base_url: str = "https://image.pollinations.ai"
    tiers: tuple[ImageTier, ...] = (HIGH_QUALITY_TIER, FAST_TIER)
    fallback_urls: tuple[str, ...] = FALLBACK_IMAGE_URLS
    rng: random.Random = field(default_factory=random.Random)

    async def generate(self, prompt: str) -> str:
        """Return a reference to a saved illustration for the prompt."""
        last_error: Exception | None = None
        for tier in self.tiers:
            url = build_image_url(
                self.base_url, prompt, tier, self.rng.randint(0, MAX_SEED)
            )
            logger.info("Requesting image with model %s", tier.model)
            try:
                data = await self.fetcher.fetch(url)
            except Exception as exc:
                logger.warning("Image model %s failed: %s", tier.model, exc)
                last_error = exc
                continue
            return self.store.save(data)

        fallback_url = self.rng.choice(self.fallback_urls)
        logger.warning("All image models failed, using fallback %s", fallback_url)
        try:
            data = await self.fetcher.fetch(fallback_url)
        except Exception:
            if last_error is None:
                raise
            raise last_error  # noqa: B904
        return self.store.save(data)
