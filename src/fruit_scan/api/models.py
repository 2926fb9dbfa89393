"""Pydantic models for pipeline API responses."""

from pydantic import BaseModel

from fruit_scan.domain.errors import ErrorKind
from fruit_scan.domain.nutrition import Nutrient
from fruit_scan.domain.pipeline import Stage


class NutrientRow(BaseModel):
    """One tracked nutrient; quantity and unit are null when unknown."""

    nutrient: Nutrient
    name: str
    quantity: float | None = None
    unit: str | None = None
    display: str


class PipelineError(BaseModel):
    """Failure details for the ``failed`` state."""

    kind: ErrorKind
    stage: Stage | None = None
    status_code: int | None = None
    message: str
    retriable: bool


class PipelineSnapshotResponse(BaseModel):
    """Snapshot of a session's pipeline."""

    session_id: str
    state: str
    has_artifact: bool
    busy: bool
    label: str | None = None
    nutrients: list[NutrientRow] | None = None
    error: PipelineError | None = None
    can_classify: bool
    can_enrich: bool
