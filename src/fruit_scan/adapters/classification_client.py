"""Fruit classification service client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from fruit_scan.adapters.http_support import request_json
from fruit_scan.domain.artifacts import ImageArtifact
from fruit_scan.domain.errors import CaptureError

IMAGE_FIELD = "image"


class ClassificationClient(Protocol):
    """Interface for the remote fruit classifier."""

    async def predict(self, artifact: ImageArtifact) -> object:
        """Upload a photo and return the decoded response body."""


@dataclass
class HttpxClassificationClient(ClassificationClient):
    """HTTPX-backed classification client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15.0

    @classmethod
    def create(
        cls, base_url: str, timeout: float = 15.0
    ) -> "HttpxClassificationClient":
        """Create a classification client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient(), timeout=timeout)

    async def predict(self, artifact: ImageArtifact) -> object:
        """POST the photo as multipart form data to ``/predict``."""
        try:
            content = artifact.read_bytes()
        except OSError as exc:
            raise CaptureError(f"Cannot read captured photo {artifact.uri}") from exc
        if not content:
            raise CaptureError(f"Captured photo {artifact.uri} is empty")

        return await request_json(
            self.http_client,
            "POST",
            f"{self.base_url.rstrip('/')}/predict",
            files={IMAGE_FIELD: (artifact.filename, content, artifact.mime_type)},
            timeout=self.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
