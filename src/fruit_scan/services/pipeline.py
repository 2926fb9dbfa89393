"""Pipeline controller driving capture, classification and enrichment."""

import time
from collections.abc import Awaitable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TypeVar

from fruit_scan.adapters.capture_sources import CaptureSource, discard_artifact
from fruit_scan.domain.artifacts import ImageArtifact
from fruit_scan.domain.classification import Label
from fruit_scan.domain.errors import CaptureError, FruitScanError, PreconditionError
from fruit_scan.domain.pipeline import (
    AwaitingClassification,
    AwaitingEnrichment,
    Classified,
    Enriched,
    Failed,
    Idle,
    PipelineSnapshot,
    PipelineState,
    Stage,
)
from fruit_scan.services.classification import ClassificationService
from fruit_scan.services.enrichment import EnrichmentService
from fruit_scan.services.observability import LoggingPipelineObserver, PipelineObserver

T = TypeVar("T")


@dataclass
class PipelineController:
    """State machine owning the captured photo and the pipeline results.

    Remote failures are recorded as ``Failed`` states instead of being raised.
    Calling an action in the wrong state, or while another call is in flight,
    raises ``PreconditionError`` and leaves the state untouched.
    """

    classification: ClassificationService
    enrichment: EnrichmentService
    observer: PipelineObserver = field(default_factory=LoggingPipelineObserver)
    reclassify_on_enrich: bool = False
    _state: PipelineState = field(default_factory=Idle, init=False)
    _artifact: ImageArtifact | None = field(default=None, init=False)
    _generation: int = field(default=0, init=False)
    _busy: bool = field(default=False, init=False)

    @property
    def state(self) -> PipelineState:
        """Current pipeline state."""
        return self._state

    def snapshot(self) -> PipelineSnapshot:
        """Return a read-only view for the presentation layer."""
        return PipelineSnapshot(
            state=self._state,
            has_artifact=self._artifact is not None,
            busy=self._busy,
        )

    async def request_capture(self, source: CaptureSource) -> PipelineSnapshot:
        """Capture a new photo, discarding every earlier result."""
        try:
            artifact = await source.capture()
        except CaptureError as exc:
            self._replace_artifact(None)
            self._set_state(Failed(kind=exc.kind, stage=None, detail=str(exc)))
            return self.snapshot()
        self._replace_artifact(artifact)
        self._set_state(Idle())
        return self.snapshot()

    async def request_classification(self) -> PipelineSnapshot:
        """Classify the held photo."""
        with self._exclusive():
            if self._artifact is None:
                raise PreconditionError("Capture a photo before classifying")
            await self._classify(self._artifact)
        return self.snapshot()

    async def request_enrichment(self) -> PipelineSnapshot:
        """Look up nutrients for the current label.

        With ``reclassify_on_enrich`` the held photo is classified again
        first and the fresh label is used.
        """
        with self._exclusive():
            if self.reclassify_on_enrich:
                if self._artifact is None:
                    raise PreconditionError(
                        "Capture a photo before requesting nutrition"
                    )
                label = await self._classify(self._artifact)
            else:
                label = self._enrichable_label()
            if label is not None:
                await self._enrich(label)
        return self.snapshot()

    async def retry(self) -> PipelineSnapshot:
        """Repeat the action that produced the current failure."""
        state = self._state
        if not isinstance(state, Failed) or state.stage is None:
            raise PreconditionError("Nothing to retry")
        if state.stage is Stage.CLASSIFY:
            return await self.request_classification()
        return await self.request_enrichment()

    def close(self) -> None:
        """End the session and delete any photo the pipeline stored."""
        self._replace_artifact(None)
        self._set_state(Idle())

    def _enrichable_label(self) -> Label:
        state = self._state
        if isinstance(state, Classified | Enriched):
            return state.label
        if isinstance(state, Failed) and state.stage is Stage.ENRICH and state.label:
            return state.label
        raise PreconditionError("Classify the photo before requesting nutrition")

    async def _classify(self, artifact: ImageArtifact) -> Label | None:
        generation = self._generation
        self._set_state(AwaitingClassification())
        try:
            label = await self._observed(
                Stage.CLASSIFY, self.classification.classify(artifact)
            )
        except FruitScanError as exc:
            if generation == self._generation:
                self._set_state(_failed(exc, Stage.CLASSIFY))
            return None
        if generation != self._generation:
            return None
        self._set_state(Classified(label=label))
        return label

    async def _enrich(self, label: Label) -> None:
        generation = self._generation
        self._set_state(AwaitingEnrichment(label=label))
        try:
            nutrients = await self._observed(
                Stage.ENRICH, self.enrichment.enrich(label)
            )
        except FruitScanError as exc:
            if generation == self._generation:
                self._set_state(_failed(exc, Stage.ENRICH, label))
            return
        if generation == self._generation:
            self._set_state(Enriched(label=label, nutrients=nutrients))

    async def _observed(self, stage: Stage, call: Awaitable[T]) -> T:
        self.observer.call_started(stage)
        started = time.perf_counter()
        try:
            result = await call
        except FruitScanError as exc:
            self.observer.call_finished(stage, time.perf_counter() - started, exc)
            raise
        self.observer.call_finished(stage, time.perf_counter() - started, None)
        return result

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if self._busy:
            raise PreconditionError("A request is already in flight")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def _replace_artifact(self, artifact: ImageArtifact | None) -> None:
        previous = self._artifact
        self._artifact = artifact
        self._generation += 1
        if previous is not None and previous != artifact:
            discard_artifact(previous)

    def _set_state(self, state: PipelineState) -> None:
        previous = self._state
        self._state = state
        self.observer.transition(previous, state)


def _failed(exc: FruitScanError, stage: Stage, label: Label | None = None) -> Failed:
    return Failed(
        kind=exc.kind,
        stage=stage,
        label=label,
        status_code=getattr(exc, "status_code", None),
        detail=str(exc),
    )
