"""
Pydantic models for the thermogram analysis pipeline.

This module defines the data structures shared by the pipeline stages, the
result store and the FastAPI endpoints:
- Stage outputs (quality verdicts, analysis outcomes, enrichment)
- The persisted analysis record and history log
- The display state exposed by the orchestrator

Analysis outcomes are a tagged union on ``classification``: a Normal outcome
has no hotspot field at all and a Suspicious outcome always carries at least
one hotspot.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, model_validator


class Hotspot(BaseModel):
    """
    Candidate anomaly location in image-relative coordinates.

    ``x`` and ``y`` are percentages of the image width and height, ``radius``
    is a percentage of the image width.
    """

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., ge=0.0, le=100.0, description="Percentage from left")
    y: float = Field(..., ge=0.0, le=100.0, description="Percentage from top")
    radius: float = Field(..., gt=0.0, le=100.0, description="Percentage of image width")
    intensity: float = Field(..., ge=0.0, le=1.0, description="Visibility weight")


class QualityStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"


class QualityVerdict(BaseModel):
    """Result of the pre-analysis quality gate."""

    model_config = ConfigDict(frozen=True)

    status: QualityStatus
    reasons: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _reasons_match_status(self) -> "QualityVerdict":
        if (self.status == QualityStatus.FAIL) != bool(self.reasons):
            raise ValueError("reasons must be non-empty exactly when status is fail")
        return self

    @property
    def passed(self) -> bool:
        return self.status == QualityStatus.PASS


class Classification(str, Enum):
    NORMAL = "Normal"
    SUSPICIOUS = "Suspicious"


class PatientMetadata(BaseModel):
    """Optional patient context supplied with an upload."""

    age: Optional[int] = Field(None, ge=0, le=150)
    sex: Optional[Literal["Female", "Male", "Other"]] = None
    symptoms: Optional[str] = None


class NormalOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    classification: Literal["Normal"] = "Normal"
    confidence: float = Field(..., ge=0.0, le=1.0)
    patient_metadata: Optional[PatientMetadata] = None


class SuspiciousOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    classification: Literal["Suspicious"] = "Suspicious"
    confidence: float = Field(..., ge=0.0, le=1.0)
    hotspots: List[Hotspot] = Field(..., min_length=1)
    patient_metadata: Optional[PatientMetadata] = None


AnalysisOutcome = Annotated[
    Union[NormalOutcome, SuspiciousOutcome], Field(discriminator="classification")
]


def outcome_hotspots(outcome: Union[NormalOutcome, SuspiciousOutcome]) -> List[Hotspot]:
    """Hotspots of an outcome; empty for Normal outcomes."""
    if isinstance(outcome, SuspiciousOutcome):
        return list(outcome.hotspots)
    return []


class Enrichment(BaseModel):
    """Natural-language summary returned by the text-generation collaborator."""

    model_config = ConfigDict(frozen=True)

    summary: StrictStr
    recommendation: StrictStr


class AnalysisRecord(BaseModel):
    """Persisted unit of the history log. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime
    source_image_ref: str
    classification: Classification
    confidence: float = Field(..., ge=0.0, le=1.0)
    hotspots: List[Hotspot] = Field(default_factory=list)
    patient_metadata: Optional[PatientMetadata] = None
    enrichment: Optional[Enrichment] = None


class DisplayStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    RESULT = "result"
    ERROR = "error"


class DisplayState(BaseModel):
    """What the application currently shows."""

    model_config = ConfigDict(frozen=True)

    status: DisplayStatus = DisplayStatus.IDLE
    current_image_ref: Optional[str] = None
    current_record: Optional[AnalysisRecord] = None
    error: Optional[str] = None
    run_sequence: int = 0


class HealthCheckResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    enrichment_available: bool
    disclaimer: str
    timestamp: datetime


@dataclass(frozen=True)
class SubmittedImage:
    """Raw upload handed to the pipeline by the image input collaborator."""

    content: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)
