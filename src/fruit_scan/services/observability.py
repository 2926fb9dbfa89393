"""Observability port for the pipeline controller."""

import logging
from dataclasses import dataclass
from typing import Protocol

from fruit_scan.domain.errors import FruitScanError
from fruit_scan.domain.pipeline import PipelineState, Stage

_logger = logging.getLogger(__name__)


class PipelineObserver(Protocol):
    """Receives state transitions and remote call outcomes."""

    def transition(self, previous: PipelineState, current: PipelineState) -> None:
        """Called after every state change."""

    def call_started(self, stage: Stage) -> None:
        """Called before a remote call is issued."""

    def call_finished(
        self, stage: Stage, elapsed_seconds: float, error: FruitScanError | None
    ) -> None:
        """Called when a remote call completes or fails."""


@dataclass
class LoggingPipelineObserver(PipelineObserver):
    """Observer that writes pipeline events to the application log."""

    session_id: str = "-"

    def transition(self, previous: PipelineState, current: PipelineState) -> None:
        _logger.info(
            "Pipeline transition: session=%s %s -> %s",
            self.session_id,
            previous.name,
            current.name,
        )

    def call_started(self, stage: Stage) -> None:
        _logger.info(
            "Pipeline call started: session=%s stage=%s", self.session_id, stage
        )

    def call_finished(
        self, stage: Stage, elapsed_seconds: float, error: FruitScanError | None
    ) -> None:
        if error is None:
            _logger.info(
                "Pipeline call succeeded: session=%s stage=%s elapsed=%.3fs",
                self.session_id,
                stage,
                elapsed_seconds,
            )
            return
        _logger.warning(
            "Pipeline call failed: session=%s stage=%s kind=%s elapsed=%.3fs: %s",
            self.session_id,
            stage,
            error.kind,
            elapsed_seconds,
            error,
        )
