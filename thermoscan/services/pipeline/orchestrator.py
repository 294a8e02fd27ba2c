"""
Pipeline orchestrator.

Sequences QualityGate -> AnalysisEngine -> SummaryEnrichment for each
submitted image and owns the display state machine:

    Idle -> Loading -> {Result | Error}, and Result/Error -> Loading on the
    next submission.

Every submission gets a monotonically increasing run sequence number. A new
submission cancels the previous run's token; a cancelled run stops at its next
stage boundary. A run only updates the display if it is still the latest run,
while a run that completes all stages always appends its record to history.
"""

import asyncio
import logging
import time
from typing import List, Optional, Union

from thermoscan.infrastructure.constants.pipeline_constants import (
    GENERIC_ERROR_MESSAGE,
    QUALITY_FAILURE_TEMPLATE,
)
from thermoscan.infrastructure.persistence.image_store import ImageStore
from thermoscan.infrastructure.persistence.result_store import ResultStore
from thermoscan.schemas import (
    AnalysisRecord,
    DisplayState,
    DisplayStatus,
    Enrichment,
    NormalOutcome,
    PatientMetadata,
    SubmittedImage,
    SuspiciousOutcome,
    outcome_hotspots,
)
from thermoscan.services.analysis.analysis_engine import AnalysisEngine
from thermoscan.services.enrichment.summary_enrichment import SummaryEnrichment
from thermoscan.services.pipeline.cancellation import CancellationToken
from thermoscan.services.pipeline.exceptions import RecordNotFoundError, RunCancelledError
from thermoscan.services.quality.quality_gate import QualityGate
from thermoscan.utils.structured_logger import stage_end, stage_error, stage_start
from thermoscan.utils.timezone_utils import utc_now

logger = logging.getLogger(__name__)

STAGE_QUALITY = "quality_check"
STAGE_ANALYSIS = "analysis"
STAGE_ENRICHMENT = "enrichment"


class PipelineOrchestrator:
    def __init__(
        self,
        quality_gate: QualityGate,
        analysis_engine: AnalysisEngine,
        summary_enrichment: SummaryEnrichment,
        result_store: ResultStore,
        image_store: ImageStore,
    ):
        self._quality_gate = quality_gate
        self._analysis_engine = analysis_engine
        self._summary_enrichment = summary_enrichment
        self._results = result_store
        self._images = image_store

        self._state = DisplayState()
        self._latest_sequence = 0
        self._active_token: Optional[CancellationToken] = None
        self._last_record_stamp = 0

        self._results.load()

    @property
    def state(self) -> DisplayState:
        return self._state

    @property
    def history(self) -> List[AnalysisRecord]:
        return self._results.records

    async def submit(
        self, image: SubmittedImage, metadata: Optional[PatientMetadata] = None
    ) -> DisplayState:
        """
        Run the full pipeline for a newly submitted image.

        Returns the display state after this run settles. If a newer run was
        submitted meanwhile, the returned state belongs to that newer run.
        """
        self._latest_sequence += 1
        sequence = self._latest_sequence

        if self._active_token is not None:
            self._active_token.cancel()
        token = CancellationToken(sequence)
        self._active_token = token

        self._release_error_image()
        self._state = DisplayState(status=DisplayStatus.LOADING, run_sequence=sequence)
        logger.info(f"Run {sequence}: submitted {image.size} byte image {image.filename or ''}")

        # Blob writes can be large; keep them off the event loop
        image_ref = await asyncio.get_event_loop().run_in_executor(
            None, self._images.save, image.content
        )
        if token.cancelled:
            logger.info(f"Run {sequence} superseded while saving its image")
            self._images.delete(image_ref)
            return self._state
        if self._state.status == DisplayStatus.LOADING and self._state.run_sequence == sequence:
            self._state = self._state.model_copy(update={"current_image_ref": image_ref})

        try:
            verdict = await self._run_stage(
                STAGE_QUALITY, sequence, self._quality_gate.evaluate(image)
            )
            if not verdict.passed:
                message = QUALITY_FAILURE_TEMPLATE.format(reasons=", ".join(verdict.reasons))
                self._finish_without_record(sequence, image_ref, message)
                return self._state

            token.raise_if_cancelled(STAGE_ANALYSIS)
            outcome = await self._run_stage(
                STAGE_ANALYSIS, sequence, self._analysis_engine.analyze(image, metadata)
            )

            token.raise_if_cancelled(STAGE_ENRICHMENT)
            enrichment = await self._run_stage(
                STAGE_ENRICHMENT, sequence, self._summary_enrichment.enrich(outcome)
            )

            record = self._build_record(image_ref, outcome, enrichment)
            self._results.append(record)
        except RunCancelledError as e:
            logger.info(f"{e}; superseded by run {self._latest_sequence}")
            self._images.delete(image_ref)
            return self._state
        except Exception:
            logger.exception(f"Run {sequence}: analysis failed")
            self._finish_without_record(sequence, image_ref, GENERIC_ERROR_MESSAGE)
            return self._state
        finally:
            if self._active_token is token:
                self._active_token = None

        if self._is_current(sequence):
            self._state = DisplayState(
                status=DisplayStatus.RESULT,
                current_image_ref=image_ref,
                current_record=record,
                run_sequence=sequence,
            )
        else:
            logger.info(f"Run {sequence}: result {record.id} stored but not displayed")

        return self._state

    def get_record(self, record_id: str) -> AnalysisRecord:
        record = self._results.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    def select(self, record_id: str) -> DisplayState:
        """Display a stored record without re-running analysis."""
        record = self.get_record(record_id)

        self._release_error_image()
        self._state = DisplayState(
            status=DisplayStatus.RESULT,
            current_image_ref=record.source_image_ref,
            current_record=record,
            run_sequence=self._latest_sequence,
        )
        return self._state

    def delete(self, record_id: str) -> DisplayState:
        """Remove a record from history; reverts to Idle if it was displayed."""
        record = self.get_record(record_id)

        self._results.remove(record_id)
        self._images.delete(record.source_image_ref)

        current = self._state.current_record
        if current is not None and current.id == record_id:
            self._state = DisplayState(run_sequence=self._latest_sequence)

        return self._state

    def load_image(self, image_ref: str) -> Optional[bytes]:
        return self._images.load(image_ref)

    async def _run_stage(self, stage: str, sequence: int, awaitable):
        start_time = stage_start(stage, sequence)
        try:
            result = await awaitable
        except Exception as e:
            stage_error(stage, sequence, start_time, str(e))
            raise
        stage_end(stage, sequence, start_time)
        return result

    def _is_current(self, sequence: int) -> bool:
        return sequence == self._latest_sequence

    def _finish_without_record(self, sequence: int, image_ref: str, message: str) -> None:
        if self._is_current(sequence):
            self._state = DisplayState(
                status=DisplayStatus.ERROR,
                current_image_ref=image_ref,
                error=message,
                run_sequence=sequence,
            )
        else:
            logger.info(f"Run {sequence}: discarding stale error: {message}")
            self._images.delete(image_ref)

    def _release_error_image(self) -> None:
        """Delete the image shown by an Error state; no record references it."""
        if self._state.status == DisplayStatus.ERROR and self._state.current_image_ref:
            self._images.delete(self._state.current_image_ref)

    def _next_record_id(self) -> str:
        # Zero-padded nanosecond stamp: lexical order equals creation order
        stamp = max(time.time_ns(), self._last_record_stamp + 1)
        self._last_record_stamp = stamp
        return f"{stamp:020d}"

    def _build_record(
        self,
        image_ref: str,
        outcome: Union[NormalOutcome, SuspiciousOutcome],
        enrichment: Optional[Enrichment],
    ) -> AnalysisRecord:
        return AnalysisRecord(
            id=self._next_record_id(),
            created_at=utc_now(),
            source_image_ref=image_ref,
            classification=outcome.classification,
            confidence=outcome.confidence,
            hotspots=outcome_hotspots(outcome),
            patient_metadata=outcome.patient_metadata,
            enrichment=enrichment,
        )
