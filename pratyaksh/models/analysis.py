"""
analysis.py — Pydantic models for the authenticity report.

The same ScoreReport model validates the upstream model's JSON and is
serialised back to the front-end, so field aliases follow the JSON contract
spelled out in the analysis prompt (camelCase, `keyIndicators`,
`top5Factors`, `finalAssessment`). Python code uses the snake_case names.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_TOP_FACTORS = 5


class ConfidenceLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class IndicatorStatus(str, Enum):
    NATURAL = "Natural"
    SUSPICIOUS = "Suspicious"


class KeyIndicator(BaseModel):
    """One named signal the model inspected."""

    name: str
    status: IndicatorStatus
    reason: str


class TopFactor(BaseModel):
    """A media-specific factor behind the score (Technical, Visual, Audio, Metadata, Pattern)."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    confidence_score: int = Field(..., ge=0, le=100, strict=True, alias="confidence")
    category: str

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _round_confidence(cls, v):
        return round(v) if isinstance(v, float) else v


class ScoreReport(BaseModel):
    """Structured authenticity assessment, whether from upstream or fallback."""

    model_config = ConfigDict(populate_by_name=True)

    authenticity_score: int = Field(..., ge=0, le=100, strict=True, alias="authenticityScore")
    confidence_level: ConfidenceLevel = Field(..., alias="confidenceLevel")
    indicators: list[KeyIndicator] = Field(..., alias="keyIndicators")
    top_factors: list[TopFactor] = Field(default_factory=list, alias="top5Factors")
    summary: str = Field(..., min_length=1, alias="finalAssessment")

    @field_validator("authenticity_score", mode="before")
    @classmethod
    def _round_score(cls, v):
        # Models occasionally answer 87.5; the contract is an integer percentage.
        return round(v) if isinstance(v, float) else v

    @field_validator("top_factors", mode="before")
    @classmethod
    def _cap_factors(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            return v[:MAX_TOP_FACTORS]
        return v


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    FALLBACK = "fallback"


class AnalysisOutcome(BaseModel):
    """
    Result of one dispatch.

    kind=success carries the id of the credential whose response was used;
    kind=fallback means no credential produced a valid report.
    """

    kind: OutcomeKind
    payload: ScoreReport
    credential_id: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.kind is OutcomeKind.FALLBACK


# ── API request / response models ──────────────────────────────────────────────

class AnalyzeRequest(BaseModel):
    """Start a background analysis of a previously uploaded file."""

    file_id: str = Field(..., min_length=1, description="ID returned by POST /api/v1/upload")


class AnalyzeStartedResponse(BaseModel):
    success: bool = True
    analysis_id: str
    status: Literal["started"] = "started"
    message: str = "Analysis started successfully"


class DirectAnalyzeRequest(BaseModel):
    """Base64-encoded media analysed synchronously."""

    media_b64: str = Field(..., min_length=1, description="Base64-encoded media data")
    filename: str = Field(default="upload.bin", description="Original filename (used for MIME hint)")
    media_type: Optional[str] = Field(default=None, description="MIME type; derived from filename if omitted")


class AnalysisResultResponse(BaseModel):
    """Finished analysis, serialised with the report's wire aliases."""

    success: bool = True
    source: OutcomeKind
    credential_id: Optional[str] = None
    result: ScoreReport

    @classmethod
    def from_outcome(cls, outcome: AnalysisOutcome) -> "AnalysisResultResponse":
        return cls(source=outcome.kind, credential_id=outcome.credential_id, result=outcome.payload)


class ProgressResponse(BaseModel):
    stage: int        # 0 = not started / failed, 6 = complete
    message: str
    completed: bool
    failed: bool = False
