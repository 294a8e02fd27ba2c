"""
Pre-analysis quality gate.

Simulates a lightweight image-quality model. The checks are statistical
stand-ins: a size-based low-signal check plus two independent low-probability
rejections. The gate always resolves to a verdict and never raises.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional

from thermoscan.infrastructure.constants.pipeline_constants import (
    BLURRY_PROBABILITY,
    LOW_SIGNAL_BYTE_THRESHOLD,
    ORIENTATION_PROBABILITY,
    QUALITY_CHECK_DELAY_SECONDS,
    REASON_BLURRY,
    REASON_LOW_SIGNAL,
    REASON_ORIENTATION,
)
from thermoscan.schemas import QualityStatus, QualityVerdict, SubmittedImage

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class QualityGate:
    """Classifies a submitted image as acceptable or not before analysis runs."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        delay_seconds: float = QUALITY_CHECK_DELAY_SECONDS,
        sleep: SleepFn = asyncio.sleep,
    ):
        self._rng = rng or random.Random()
        self._delay_seconds = delay_seconds
        self._sleep = sleep

    async def evaluate(self, image: SubmittedImage) -> QualityVerdict:
        """
        Evaluate the quality of an uploaded thermogram.

        Args:
            image: The submitted image; only its byte size is inspected

        Returns:
            A verdict whose reasons are empty exactly when it passes
        """
        # Simulated model latency
        await self._sleep(self._delay_seconds)

        reasons = []

        if image.size < LOW_SIGNAL_BYTE_THRESHOLD:
            reasons.append(REASON_LOW_SIGNAL)

        if self._rng.random() < BLURRY_PROBABILITY:
            reasons.append(REASON_BLURRY)

        if self._rng.random() < ORIENTATION_PROBABILITY:
            reasons.append(REASON_ORIENTATION)

        if reasons:
            logger.info(f"Quality check failed for {image.size} byte image: {reasons}")
            return QualityVerdict(status=QualityStatus.FAIL, reasons=reasons)

        return QualityVerdict(status=QualityStatus.PASS, reasons=[])
