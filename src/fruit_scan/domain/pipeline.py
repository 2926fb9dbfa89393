"""Pipeline state machine models."""

from dataclasses import dataclass
from enum import StrEnum

from fruit_scan.domain.classification import Label
from fruit_scan.domain.errors import ErrorKind
from fruit_scan.domain.nutrition import NutrientSet


class Stage(StrEnum):
    """Pipeline phase an error belongs to."""

    CLASSIFY = "classify"
    ENRICH = "enrich"


@dataclass(frozen=True)
class Idle:
    """No request made since the last capture."""

    name = "idle"


@dataclass(frozen=True)
class AwaitingClassification:
    """Classification call in flight."""

    name = "awaiting_classification"


@dataclass(frozen=True)
class Classified:
    """Classification succeeded."""

    label: Label
    name = "classified"


@dataclass(frozen=True)
class AwaitingEnrichment:
    """Enrichment call in flight for a known label."""

    label: Label
    name = "awaiting_enrichment"


@dataclass(frozen=True)
class Enriched:
    """Nutrition lookup succeeded."""

    label: Label
    nutrients: NutrientSet
    name = "enriched"


@dataclass(frozen=True)
class Failed:
    """A pipeline step failed.

    ``stage`` is ``None`` when the capture itself failed. ``label`` is kept
    for enrichment failures so the user does not need to capture again.
    """

    kind: ErrorKind
    stage: Stage | None
    label: Label | None = None
    status_code: int | None = None
    detail: str = ""
    name = "failed"


PipelineState = (
    Idle | AwaitingClassification | Classified | AwaitingEnrichment | Enriched | Failed
)


def label_of(state: PipelineState) -> Label | None:
    """Return the label carried by a state, if any."""
    return getattr(state, "label", None)


@dataclass(frozen=True)
class PipelineSnapshot:
    """Read-only view of a controller handed to the presentation layer."""

    state: PipelineState
    has_artifact: bool
    busy: bool

    @property
    def label(self) -> Label | None:
        return label_of(self.state)

    @property
    def nutrients(self) -> NutrientSet | None:
        if isinstance(self.state, Enriched):
            return self.state.nutrients
        return None
