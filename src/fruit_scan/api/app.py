"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, HTTPException, Request, UploadFile, status

from fruit_scan.adapters.capture_sources import UploadCaptureSource
from fruit_scan.api.models import NutrientRow, PipelineError, PipelineSnapshotResponse
from fruit_scan.app_logging import configure_logging
from fruit_scan.containers import AppContainer
from fruit_scan.domain.errors import ErrorKind, PreconditionError
from fruit_scan.domain.nutrition import Nutrient, NutrientSet
from fruit_scan.domain.pipeline import (
    Classified,
    Enriched,
    Failed,
    PipelineSnapshot,
    Stage,
)
from fruit_scan.services.pipeline import PipelineController


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/sessions/{session_id}")
    async def get_session(
        session_id: str, request: Request
    ) -> PipelineSnapshotResponse:
        """Return the current pipeline snapshot without starting a session."""
        state_container: AppContainer = request.app.state.container
        sessions = state_container.sessions
        controller = sessions.peek(session_id) or sessions.factory(session_id)
        return _snapshot_response(session_id, controller, controller.snapshot())

    @app.post("/sessions/{session_id}/capture")
    async def capture(
        session_id: str, request: Request, image: UploadFile = File(...)
    ) -> PipelineSnapshotResponse:
        """Store an uploaded photo as the session's capture."""
        state_container: AppContainer = request.app.state.container
        controller = _controller(request, session_id)
        source = UploadCaptureSource(
            directory=state_container.settings.capture_dir,
            content=await image.read(),
            filename=image.filename,
            content_type=image.content_type,
        )
        snapshot = await controller.request_capture(source)
        return _snapshot_response(session_id, controller, snapshot)

    @app.post("/sessions/{session_id}/classify")
    async def classify(session_id: str, request: Request) -> PipelineSnapshotResponse:
        """Classify the captured photo."""
        controller = _controller(request, session_id)
        try:
            snapshot = await controller.request_classification()
        except PreconditionError as exc:
            logger.info("Rejected classify for session %s: %s", session_id, exc)
            raise HTTPException(status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        return _snapshot_response(session_id, controller, snapshot)

    @app.post("/sessions/{session_id}/enrich")
    async def enrich(session_id: str, request: Request) -> PipelineSnapshotResponse:
        """Look up nutrition for the classified fruit."""
        controller = _controller(request, session_id)
        try:
            snapshot = await controller.request_enrichment()
        except PreconditionError as exc:
            logger.info("Rejected enrich for session %s: %s", session_id, exc)
            raise HTTPException(status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        return _snapshot_response(session_id, controller, snapshot)

    @app.post("/sessions/{session_id}/retry")
    async def retry(session_id: str, request: Request) -> PipelineSnapshotResponse:
        """Repeat the failed action."""
        controller = _controller(request, session_id)
        try:
            snapshot = await controller.retry()
        except PreconditionError as exc:
            raise HTTPException(status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        return _snapshot_response(session_id, controller, snapshot)

    @app.delete("/sessions/{session_id}")
    async def end_session(session_id: str, request: Request) -> dict[str, str]:
        """End a session and drop its photo and results."""
        state_container: AppContainer = request.app.state.container
        if not state_container.sessions.end(session_id):
            raise HTTPException(status.HTTP_404_NOT_FOUND)
        return {"status": "ok"}

    return app


def _controller(request: Request, session_id: str) -> PipelineController:
    state_container: AppContainer = request.app.state.container
    return state_container.sessions.get(session_id)


def _snapshot_response(
    session_id: str, controller: PipelineController, snapshot: PipelineSnapshot
) -> PipelineSnapshotResponse:
    state = snapshot.state
    idle = not snapshot.busy
    can_enrich = isinstance(state, Classified | Enriched) or (
        isinstance(state, Failed) and state.label is not None
    )
    if controller.reclassify_on_enrich:
        can_enrich = snapshot.has_artifact
    nutrients = snapshot.nutrients
    return PipelineSnapshotResponse(
        session_id=session_id,
        state=state.name,
        has_artifact=snapshot.has_artifact,
        busy=snapshot.busy,
        label=snapshot.label,
        nutrients=_nutrient_rows(nutrients) if nutrients is not None else None,
        error=_error_payload(state) if isinstance(state, Failed) else None,
        can_classify=idle and snapshot.has_artifact,
        can_enrich=idle and can_enrich,
    )


def _nutrient_rows(nutrients: NutrientSet) -> list[NutrientRow]:
    """List every tracked nutrient, marking missing ones as unknown."""
    rows = []
    for nutrient in Nutrient:
        amount = nutrients.get(nutrient)
        rows.append(
            NutrientRow(
                nutrient=nutrient,
                name=nutrient.display_name,
                quantity=amount.quantity if amount else None,
                unit=amount.unit if amount else None,
                display=nutrients.describe(nutrient),
            )
        )
    return rows


def _error_payload(state: Failed) -> PipelineError:
    return PipelineError(
        kind=state.kind,
        stage=state.stage,
        status_code=state.status_code,
        message=_error_message(state),
        retriable=state.stage is not None,
    )


def _error_message(state: Failed) -> str:  # noqa: PLR0911
    """Build a user-facing message for a failed state."""
    action = "identify the fruit" if state.stage is Stage.CLASSIFY else "load nutrition"
    if state.kind is ErrorKind.CAPTURE:
        return "The photo could not be captured. Please take another one."
    if state.kind is ErrorKind.NETWORK:
        return f"Could not reach the service to {action}. Check your connection."
    if state.kind is ErrorKind.SERVICE:
        if state.status_code in {401, 403}:
            return (
                f"The service refused the request to {action}. "
                "Check the API credentials."
            )
        return f"The service failed to {action} (HTTP {state.status_code})."
    if state.kind is ErrorKind.MALFORMED_RESPONSE:
        if state.stage is Stage.CLASSIFY:
            return "No fruit was recognized in the photo."
        return "The nutrition service returned an unexpected response."
    if state.kind is ErrorKind.CONFIGURATION:
        return f"The service to {action} is not configured."
    return "Something went wrong. Please try again."
