"""Classification service validating classifier responses."""

from dataclasses import dataclass

from pydantic import ValidationError

from fruit_scan.adapters.classification_client import ClassificationClient
from fruit_scan.domain.artifacts import ImageArtifact
from fruit_scan.domain.classification import ClassificationResponse, Label
from fruit_scan.domain.errors import MalformedResponseError, PreconditionError


@dataclass
class ClassificationService:
    """Turns a captured photo into a normalized label."""

    client: ClassificationClient

    async def classify(self, artifact: ImageArtifact | None) -> Label:
        """Classify a photo via the configured client."""
        if artifact is None:
            raise PreconditionError("No photo captured to classify")
        raw = await self.client.predict(artifact)
        try:
            response = ClassificationResponse.model_validate(raw)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Classifier response has no usable 'fruit' field: {raw!r:.200}"
            ) from exc
        return Label(response.fruit)
