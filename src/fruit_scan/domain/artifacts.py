"""Captured photo references."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ImageArtifact:
    """Reference to a captured photo on local storage."""

    uri: Path
    mime_type: str = "image/jpeg"
    filename: str = "photo.jpg"
    owned: bool = False

    def read_bytes(self) -> bytes:
        """Return the photo content."""
        return self.uri.read_bytes()
