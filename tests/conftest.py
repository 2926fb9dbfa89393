"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from fruit_scan.adapters.classification_client import ClassificationClient
from fruit_scan.adapters.nutrition_data_client import NutritionDataClient
from fruit_scan.config import Settings
from fruit_scan.containers import AppContainer, controller_factory
from fruit_scan.domain.artifacts import ImageArtifact
from fruit_scan.domain.errors import ConfigurationError, FruitScanError
from fruit_scan.domain.pipeline import PipelineState, Stage
from fruit_scan.services.classification import ClassificationService
from fruit_scan.services.enrichment import EnrichmentService
from fruit_scan.services.observability import PipelineObserver
from fruit_scan.services.pipeline import PipelineController
from fruit_scan.services.sessions import PipelineSessions

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"fake-jpeg-body"

APPLE_NUTRITION = {
    "totalNutrients": {
        "ENERC_KCAL": {"label": "Energy", "quantity": 52.0, "unit": "kcal"},
    }
}


@dataclass
class FakeClassificationClient(ClassificationClient):
    """Fake classifier returning queued payloads or raising queued errors."""

    responses: list[object] = field(default_factory=lambda: [{"fruit": "apple"}])
    calls: list[ImageArtifact] = field(default_factory=list)
    gate: asyncio.Event | None = None

    async def predict(self, artifact: ImageArtifact) -> object:
        self.calls.append(artifact)
        if self.gate is not None:
            await self.gate.wait()
        return _next_response(self.responses)


@dataclass
class FakeNutritionDataClient(NutritionDataClient):
    """Fake nutrition-data client returning queued payloads."""

    responses: list[object] = field(default_factory=lambda: [APPLE_NUTRITION])
    configured: bool = True
    calls: list[str] = field(default_factory=list)

    async def nutrition_data(self, ingredient: str) -> object:
        if not self.configured:
            raise ConfigurationError("missing credentials")
        self.calls.append(ingredient)
        return _next_response(self.responses)


@dataclass
class RecordingPipelineObserver(PipelineObserver):
    """Observer that keeps every event in memory."""

    transitions: list[tuple[str, str]] = field(default_factory=list)
    calls: list[tuple[Stage, str | None]] = field(default_factory=list)

    def transition(self, previous: PipelineState, current: PipelineState) -> None:
        self.transitions.append((previous.name, current.name))

    def call_started(self, stage: Stage) -> None:
        return None

    def call_finished(
        self, stage: Stage, elapsed_seconds: float, error: FruitScanError | None
    ) -> None:
        self.calls.append((stage, error.kind if error else None))


@dataclass
class StaticCaptureSource:
    """Capture source returning a fixed artifact."""

    artifact: ImageArtifact

    async def capture(self) -> ImageArtifact:
        return self.artifact


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        classification_base_url="http://classifier.test",
        nutrition_base_url="https://nutrition.test/api",
        edamam_app_id="app-id",
        edamam_app_key="app-key",
        capture_dir=tmp_path / "captures",
    )


@pytest.fixture
def photo(tmp_path: Path) -> Path:
    path = tmp_path / "apple.jpg"
    path.write_bytes(JPEG_BYTES)
    return path


@pytest.fixture
def artifact(photo: Path) -> ImageArtifact:
    return ImageArtifact(uri=photo, filename=photo.name)


@pytest.fixture
def classification_client() -> FakeClassificationClient:
    return FakeClassificationClient()


@pytest.fixture
def nutrition_client() -> FakeNutritionDataClient:
    return FakeNutritionDataClient()


@pytest.fixture
def observer() -> RecordingPipelineObserver:
    return RecordingPipelineObserver()


@pytest.fixture
def controller(
    classification_client: FakeClassificationClient,
    nutrition_client: FakeNutritionDataClient,
    observer: RecordingPipelineObserver,
) -> PipelineController:
    return PipelineController(
        classification=ClassificationService(classification_client),
        enrichment=EnrichmentService(nutrition_client),
        observer=observer,
    )


@pytest.fixture
def container(
    settings: Settings,
    classification_client: FakeClassificationClient,
    nutrition_client: FakeNutritionDataClient,
) -> AppContainer:
    classification_service = ClassificationService(classification_client)
    enrichment_service = EnrichmentService(nutrition_client)
    sessions = PipelineSessions(
        factory=controller_factory(
            settings, classification_service, enrichment_service
        )
    )

    async def close_resources() -> None:
        sessions.close_all()

    return AppContainer(
        settings=settings,
        classification_service=classification_service,
        enrichment_service=enrichment_service,
        sessions=sessions,
        close_resources=close_resources,
    )


def _next_response(responses: list[object]) -> object:
    """Pop queued responses, repeating the last one; raise queued errors."""
    response = responses.pop(0) if len(responses) > 1 else responses[0]
    if isinstance(response, Exception):
        raise response
    return response
