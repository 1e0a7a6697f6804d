"""Filesystem storage for dream illustrations."""

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlparse
from uuid import uuid4

from dreamcatcher.services.images import ImageStore


@dataclass
class LocalImageStore(ImageStore):
    """Stores images as uniquely named files under a root directory."""

    root: Path

    def save(self, data: bytes) -> str:
        """Write bytes to a new file and return its file:// URI."""
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / f"dream_{uuid4()}{_detect_extension(data)}"
        path.write_bytes(data)
        return path.resolve().as_uri()

    def resolve(self, ref: str) -> Path | None:
        """Find the file for a reference, falling back to its name under root.

        The root may move between runs, so a recorded absolute path that no
        longer exists is looked up by file name in the current root.
        """
        if not ref:
            return None
        parsed = urlparse(ref)
        if parsed.scheme in {"http", "https"}:
            return None
        if parsed.scheme == "file":
            recorded = Path(unquote(parsed.path))
        else:
            recorded = Path(ref)
        if recorded.is_absolute() and recorded.is_file():
            return recorded
        candidate = self.root / recorded.name
        if candidate.is_file():
            return candidate
        return None


def _detect_extension(data: bytes) -> str:
    """Infer an image file extension from its signature."""
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return ".png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ".webp"
    return ".jpg"
