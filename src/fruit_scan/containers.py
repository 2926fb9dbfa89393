"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from fruit_scan.adapters.classification_client import HttpxClassificationClient
from fruit_scan.adapters.nutrition_data_client import HttpxNutritionDataClient
from fruit_scan.config import Settings, nutrition_credentials
from fruit_scan.services.classification import ClassificationService
from fruit_scan.services.enrichment import EnrichmentService
from fruit_scan.services.observability import LoggingPipelineObserver
from fruit_scan.services.pipeline import PipelineController
from fruit_scan.services.sessions import PipelineSessions


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    classification_service: ClassificationService
    enrichment_service: EnrichmentService
    sessions: PipelineSessions
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    classification_client = HttpxClassificationClient.create(
        base_url=resolved_settings.classification_base_url,
        timeout=resolved_settings.http_timeout_seconds,
    )
    nutrition_client = HttpxNutritionDataClient.create(
        base_url=resolved_settings.nutrition_base_url,
        credentials=nutrition_credentials(resolved_settings),
        timeout=resolved_settings.http_timeout_seconds,
    )
    classification_service = ClassificationService(classification_client)
    enrichment_service = EnrichmentService(nutrition_client)
    sessions = PipelineSessions(
        factory=controller_factory(
            resolved_settings, classification_service, enrichment_service
        ),
        idle_ttl_seconds=resolved_settings.session_ttl_seconds,
    )

    async def close_resources() -> None:
        sessions.close_all()
        await classification_client.close()
        await nutrition_client.close()

    return AppContainer(
        settings=resolved_settings,
        classification_service=classification_service,
        enrichment_service=enrichment_service,
        sessions=sessions,
        close_resources=close_resources,
    )


def controller_factory(
    settings: Settings,
    classification_service: ClassificationService,
    enrichment_service: EnrichmentService,
) -> Callable[[str], PipelineController]:
    """Build per-session controllers sharing the same services."""

    def create(session_id: str) -> PipelineController:
        return PipelineController(
            classification=classification_service,
            enrichment=enrichment_service,
            observer=LoggingPipelineObserver(session_id),
            reclassify_on_enrich=settings.reclassify_on_enrich,
        )

    return create
