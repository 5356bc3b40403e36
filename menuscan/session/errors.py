from __future__ import annotations

from .models import FailureReason


class ScanError(Exception):
    reason: FailureReason = FailureReason.RECOGNITION_ERROR


class CaptureError(ScanError):
    """Camera unavailable, permission denied or the capture itself failed."""

    reason = FailureReason.CAPTURE_ERROR


class RecognitionError(ScanError):
    """The text-recognition service could not process the image."""

    reason = FailureReason.RECOGNITION_ERROR


class CatalogError(ScanError):
    reason = FailureReason.CATALOG_ERROR


class NoTextDetected(ScanError):
    reason = FailureReason.NO_TEXT_DETECTED


class NoMatches(ScanError):
    reason = FailureReason.NO_MATCHES
