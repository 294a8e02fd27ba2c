"""
Simulated thermogram analysis model.

The outcome is drawn from fixed design probabilities, not derived from the
image: Suspicious with probability 0.6, otherwise Normal. Suspicious outcomes
carry one to three hotspots biased toward the image center. The stage models
heavy compute with a 4-6 second delay and never fails.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, List, Optional, Union

from thermoscan.infrastructure.constants.pipeline_constants import (
    ANALYSIS_MAX_DELAY_SECONDS,
    ANALYSIS_MIN_DELAY_SECONDS,
    HOTSPOT_COUNT_RANGE,
    HOTSPOT_INTENSITY_RANGE,
    HOTSPOT_POSITION_RANGE,
    HOTSPOT_RADIUS_RANGE,
    NORMAL_CONFIDENCE_RANGE,
    SUSPICIOUS_CONFIDENCE_RANGE,
    SUSPICIOUS_PROBABILITY,
)
from thermoscan.schemas import (
    Hotspot,
    NormalOutcome,
    PatientMetadata,
    SubmittedImage,
    SuspiciousOutcome,
)

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class AnalysisEngine:
    """Produces a classification, a confidence score and spatial hotspots."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        min_delay_seconds: float = ANALYSIS_MIN_DELAY_SECONDS,
        max_delay_seconds: float = ANALYSIS_MAX_DELAY_SECONDS,
        sleep: SleepFn = asyncio.sleep,
    ):
        self._rng = rng or random.Random()
        self._min_delay_seconds = min_delay_seconds
        self._max_delay_seconds = max_delay_seconds
        self._sleep = sleep

    async def analyze(
        self,
        image: SubmittedImage,
        metadata: Optional[PatientMetadata] = None,
    ) -> Union[NormalOutcome, SuspiciousOutcome]:
        delay = self._rng.uniform(self._min_delay_seconds, self._max_delay_seconds)
        await self._sleep(delay)

        is_suspicious = self._rng.random() < SUSPICIOUS_PROBABILITY

        if is_suspicious:
            outcome = SuspiciousOutcome(
                confidence=self._rng.uniform(*SUSPICIOUS_CONFIDENCE_RANGE),
                hotspots=self._generate_hotspots(),
                patient_metadata=metadata,
            )
        else:
            outcome = NormalOutcome(
                confidence=self._rng.uniform(*NORMAL_CONFIDENCE_RANGE),
                patient_metadata=metadata,
            )

        logger.info(
            f"Analysis of {image.size} byte image finished after {delay:.2f}s: "
            f"{outcome.classification} ({outcome.confidence:.3f})"
        )
        return outcome

    def _generate_hotspots(self) -> List[Hotspot]:
        count = self._rng.randint(*HOTSPOT_COUNT_RANGE)
        return [
            Hotspot(
                # Centered, avoiding edges
                x=self._rng.uniform(*HOTSPOT_POSITION_RANGE),
                y=self._rng.uniform(*HOTSPOT_POSITION_RANGE),
                radius=self._rng.uniform(*HOTSPOT_RADIUS_RANGE),
                intensity=self._rng.uniform(*HOTSPOT_INTENSITY_RANGE),
            )
            for _ in range(count)
        ]
