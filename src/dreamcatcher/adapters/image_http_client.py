"""HTTP client for downloading generated and stock images."""

from dataclasses import dataclass

import httpx

from dreamcatcher.services.images import ImageFetcher


@dataclass
class HttpxImageFetcher(ImageFetcher):
    """Image fetcher using httpx."""

    http_client: httpx.AsyncClient
    timeout: float = 60.0

    @classmethod
    def create(cls, timeout: float = 60.0) -> "HttpxImageFetcher":
        """Create an image fetcher with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True), timeout=timeout
        )

    async def fetch(self, url: str) -> bytes:
        """Download image bytes, rejecting empty or non-image responses."""
        response = await self.http_client.get(url, timeout=self.timeout)
        response.raise_for_status()
        content_type = response.headers.get("content-type", "")
        if content_type and not content_type.startswith("image/"):
            raise RuntimeError(f"Unexpected content type: {content_type}")
        if not response.content:
            raise RuntimeError("Image response was empty")
        return response.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
