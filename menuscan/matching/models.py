from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..catalog.models import CatalogItem, CatalogItemOut
from ..personalization.models import UserPreferenceVector


class DetectedLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    position: int = Field(..., ge=0)


class MatchCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    item: CatalogItem
    confidence: float = Field(..., ge=0.0, le=1.0)
    detected_text: str
    position: int = Field(..., ge=0)


class RankedMatch(MatchCandidate):
    personalized_score: int = Field(..., ge=0, le=100)


class UnmatchedEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    detected_text: str
    position: int = Field(..., ge=0)


class ScanResult(BaseModel):
    matches: list[RankedMatch] = Field(default_factory=list)
    unmatched: list[UnmatchedEntry] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.matches and not self.unmatched


# ── API shapes ───────────────────────────────────────────────────────────


class ScanAnalyzeRequest(BaseModel):
    lines: list[str] = Field(..., min_length=1, description="Recognized text lines in menu order")
    preferences: UserPreferenceVector | None = None
    user_id: str | None = Field(default=None, description="Look up stored preferences when none are sent")
    threshold: float | None = Field(default=None, ge=0.0, le=1.0)


class ScanMatchOut(BaseModel):
    item: CatalogItemOut
    confidence: float
    detected_text: str
    position: int
    personalized_score: int
    label: str
    color: str


class ScanAnalyzeResponse(BaseModel):
    status: str
    matches: list[ScanMatchOut]
    unmatched: list[UnmatchedEntry]
    total_lines: int
