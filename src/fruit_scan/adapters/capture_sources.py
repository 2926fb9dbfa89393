"""Capture sources that turn photos into image artifacts."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from uuid import uuid4

from fruit_scan.domain.artifacts import ImageArtifact
from fruit_scan.domain.errors import CaptureError

_logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


class CaptureSource(Protocol):
    """Interface for anything that can produce a captured photo."""

    async def capture(self) -> ImageArtifact:
        """Capture a photo and return a reference to it."""


@dataclass
class FileCaptureSource(CaptureSource):
    """Uses a photo that already exists on disk."""

    path: Path

    async def capture(self) -> ImageArtifact:
        """Validate the file and reference it in place."""
        try:
            with self.path.open("rb") as handle:
                header = handle.read(12)
        except OSError as exc:
            raise CaptureError(f"Photo {self.path} is not readable") from exc
        if not header:
            raise CaptureError(f"Photo {self.path} is empty")
        return ImageArtifact(
            uri=self.path,
            mime_type=detect_mime_type(header),
            filename=self.path.name,
        )


@dataclass
class UploadCaptureSource(CaptureSource):
    """Stores uploaded photo bytes in the capture directory."""

    directory: Path
    content: bytes
    filename: str | None = None
    content_type: str | None = None

    async def capture(self) -> ImageArtifact:
        """Write the upload to disk and return an owned artifact."""
        if not self.content:
            raise CaptureError("Uploaded photo is empty")
        mime_type = self.content_type
        if mime_type not in _EXTENSIONS:
            mime_type = detect_mime_type(self.content)
        path = self.directory / f"{uuid4().hex}{_EXTENSIONS[mime_type]}"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(self.content)
        except OSError as exc:
            raise CaptureError(
                f"Cannot store uploaded photo in {self.directory}"
            ) from exc
        return ImageArtifact(
            uri=path,
            mime_type=mime_type,
            filename=self.filename or f"photo{_EXTENSIONS[mime_type]}",
            owned=True,
        )


def discard_artifact(artifact: ImageArtifact | None) -> None:
    """Delete an artifact's file if the pipeline created it."""
    if artifact is None or not artifact.owned:
        return
    try:
        artifact.uri.unlink(missing_ok=True)
    except OSError:
        _logger.warning("Failed to delete captured photo %s", artifact.uri)


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
