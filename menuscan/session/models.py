from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Union

from ..matching.models import ScanResult


class ScanPhase(str, Enum):
    idle = "idle"
    capturing = "capturing"
    analyzing = "analyzing"
    results = "results"
    failed = "failed"


class FailureReason(str, Enum):
    CAPTURE_ERROR = "capture_error"
    NO_TEXT_DETECTED = "no_text_detected"
    NO_MATCHES = "no_matches"
    RECOGNITION_ERROR = "recognition_error"
    CATALOG_ERROR = "catalog_error"


# reason -> (title, message) shown to the user
FAILURE_MESSAGES: dict[FailureReason, tuple[str, str]] = {
    FailureReason.CAPTURE_ERROR: (
        "Camera Unavailable",
        "Could not take a photo. Check camera access and try again.",
    ),
    FailureReason.NO_TEXT_DETECTED: (
        "No Text Detected",
        "Point camera at menu text and try again.",
    ),
    FailureReason.NO_MATCHES: (
        "No Matches",
        "Nothing on this menu matched the catalog. Try another angle.",
    ),
    FailureReason.RECOGNITION_ERROR: (
        "Scan Failed",
        "Failed to scan menu. Please try again.",
    ),
    FailureReason.CATALOG_ERROR: (
        "Scan Failed",
        "Failed to scan menu. Please try again.",
    ),
}


@dataclass(frozen=True)
class Idle:
    phase: ClassVar[ScanPhase] = ScanPhase.idle
    attempt: int = 0


@dataclass(frozen=True)
class Capturing:
    phase: ClassVar[ScanPhase] = ScanPhase.capturing
    attempt: int


@dataclass(frozen=True)
class Analyzing:
    phase: ClassVar[ScanPhase] = ScanPhase.analyzing
    attempt: int
    image_ref: Any


@dataclass(frozen=True)
class Results:
    phase: ClassVar[ScanPhase] = ScanPhase.results
    attempt: int
    result: ScanResult


@dataclass(frozen=True)
class Failed:
    phase: ClassVar[ScanPhase] = ScanPhase.failed
    attempt: int
    reason: FailureReason
    detail: str | None = None

    @property
    def title(self) -> str:
        return FAILURE_MESSAGES[self.reason][0]

    @property
    def message(self) -> str:
        return FAILURE_MESSAGES[self.reason][1]


ScanState = Union[Idle, Capturing, Analyzing, Results, Failed]
