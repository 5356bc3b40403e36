"""
Scan session state machine.

    Idle / Results / Failed --scan--> Capturing --image--> Analyzing
    Analyzing --pipeline ok--> Results
    Capturing / Analyzing --error--> Failed(reason)
    any --dismiss--> Idle

Only one attempt is in flight at a time: ``scan()`` is a no-op while
capturing or analyzing. Every attempt is numbered; ``dismiss()`` moves the
counter on and cancels the running task, so anything that still arrives for
the old attempt is dropped instead of landing in Results. The captured image
lives only on the Analyzing state and is gone once the attempt ends.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from ..analytics.store import record_event
from ..catalog.config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from ..catalog.index import CatalogIndex
from ..catalog.index_cache import get_index
from ..matching.config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from ..matching.pipeline import analyze_lines
from ..personalization.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from ..personalization.models import UserPreferenceVector
from .config import DEFAULT_SCAN_CONFIG, ScanConfig
from .errors import (
    CaptureError,
    CatalogError,
    NoMatches,
    NoTextDetected,
    RecognitionError,
    ScanError,
)
from .interfaces import Camera, CatalogProvider, PreferenceProvider, TextRecognizer
from .models import (
    Analyzing,
    Capturing,
    Failed,
    FailureReason,
    Idle,
    Results,
    ScanPhase,
    ScanState,
)

logger = logging.getLogger(__name__)

_BUSY_PHASES = (ScanPhase.capturing, ScanPhase.analyzing)


class ScanSessionController:
    def __init__(
        self,
        camera: Camera,
        recognizer: TextRecognizer,
        catalog_provider: CatalogProvider,
        preference_provider: PreferenceProvider | None = None,
        user_id: str | None = None,
        config: ScanConfig = DEFAULT_SCAN_CONFIG,
        matching_config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
        scoring_config: ScoringConfig = DEFAULT_SCORING_CONFIG,
        catalog_config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
    ) -> None:
        self._camera = camera
        self._recognizer = recognizer
        self._catalog_provider = catalog_provider
        self._preference_provider = preference_provider
        self._user_id = user_id
        self._config = config
        self._matching_config = matching_config
        self._scoring_config = scoring_config
        self._catalog_config = catalog_config

        self._state: ScanState = Idle()
        self._attempt = 0
        self._task: asyncio.Task | None = None

    # ── State ─────────────────────────────────────────────────────────────

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def phase(self) -> ScanPhase:
        return self._state.phase

    @property
    def attempt(self) -> int:
        return self._attempt

    @property
    def is_busy(self) -> bool:
        return self._state.phase in _BUSY_PHASES

    def _is_current(self, attempt: int) -> bool:
        return attempt == self._attempt

    def _set_state(self, state: ScanState) -> None:
        logger.info(
            "Scan attempt %d: %s -> %s",
            state.attempt, self._state.phase.value, state.phase.value,
        )
        self._state = state

    # ── Actions ───────────────────────────────────────────────────────────

    async def scan(self) -> ScanState:
        """Run one capture/analyze attempt and return the state it ends in."""
        if self.is_busy:
            logger.info(
                "Scan ignored: attempt %d is still %s",
                self._attempt, self._state.phase.value,
            )
            return self._state

        self._attempt += 1
        attempt = self._attempt
        self._set_state(Capturing(attempt=attempt))

        task = asyncio.ensure_future(self._run(attempt))
        self._task = task
        try:
            await task
        except asyncio.CancelledError:
            if self._is_current(attempt):
                # The caller itself was cancelled; treat it as a teardown.
                self.dismiss()
                raise
        finally:
            if self._task is task:
                self._task = None
        return self._state

    async def retry(self) -> ScanState:
        if self._state.phase is not ScanPhase.failed:
            logger.info("Retry ignored in phase %s", self._state.phase.value)
            return self._state
        return await self.scan()

    def dismiss(self) -> None:
        """Abandon the current attempt and clear all transient state."""
        self._attempt += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        self._set_state(Idle(attempt=self._attempt))

    # ── Pipeline ──────────────────────────────────────────────────────────

    async def _run(self, attempt: int) -> None:
        analyze_started: float | None = None
        lines = 0
        try:
            image_ref = await self._capture()
            if not self._is_current(attempt):
                return
            self._set_state(Analyzing(attempt=attempt, image_ref=image_ref))

            analyze_started = time.perf_counter()
            texts = await self._recognize(image_ref)
            if not self._is_current(attempt):
                logger.info("Discarding recognition result for stale attempt %d", attempt)
                return
            lines = len(texts)
            if not texts:
                raise NoTextDetected("recognizer returned no lines")

            index = self._load_index()
            prefs = self._load_preferences()
            result = analyze_lines(
                texts,
                index,
                prefs,
                matching_config=self._matching_config,
                scoring_config=self._scoring_config,
            )
            if result.is_empty and self._config.empty_results_as_failure:
                raise NoMatches(f"{lines} lines, none usable")

            self._finish(Results(attempt=attempt, result=result), analyze_started, lines)

        except ScanError as exc:
            if self._is_current(attempt):
                failed = Failed(attempt=attempt, reason=exc.reason, detail=str(exc) or None)
                self._finish(failed, analyze_started, lines)
        except Exception:
            logger.exception("Unexpected error during scan attempt %d", attempt)
            if self._is_current(attempt):
                failed = Failed(attempt=attempt, reason=FailureReason.RECOGNITION_ERROR)
                self._finish(failed, analyze_started, lines)

    async def _capture(self) -> Any:
        try:
            return await self._camera.capture()
        except CaptureError:
            raise
        except Exception as exc:
            logger.warning("Camera capture failed", exc_info=True)
            raise CaptureError(str(exc)) from exc

    async def _recognize(self, image_ref: Any) -> list[str]:
        try:
            texts = await self._recognizer.recognize(image_ref)
        except RecognitionError:
            raise
        except Exception as exc:
            logger.warning("Text recognition failed", exc_info=True)
            raise RecognitionError(str(exc)) from exc
        return [t for t in (texts or []) if t is not None and t.strip()]

    def _load_index(self) -> CatalogIndex:
        try:
            items = self._catalog_provider.get_all_catalog_items()
        except Exception as exc:
            logger.warning("Catalog fetch failed", exc_info=True)
            raise CatalogError(str(exc)) from exc
        return get_index(items, self._catalog_config.field_weights)

    def _load_preferences(self) -> UserPreferenceVector | None:
        if self._preference_provider is None or self._user_id is None:
            return None
        try:
            return self._preference_provider.get_preference_vector(self._user_id)
        except Exception:
            logger.warning(
                "Preference lookup failed for user %s, scoring neutrally",
                self._user_id, exc_info=True,
            )
            return None

    def _finish(self, state: Results | Failed, analyze_started: float | None, lines: int) -> None:
        self._set_state(state)
        if not self._config.analytics_enabled:
            return

        elapsed_ms = (
            round((time.perf_counter() - analyze_started) * 1000, 1)
            if analyze_started is not None else None
        )
        event: dict[str, Any] = {
            "attempt": state.attempt,
            "user_id": self._user_id,
            "lines": lines,
            "analyze_time_ms": elapsed_ms,
        }
        if isinstance(state, Results):
            event.update({
                "outcome": "results",
                "matches": len(state.result.matches),
                "unmatched": len(state.result.unmatched),
                "matched_items": [m.item.name for m in state.result.matches],
            })
        else:
            event["outcome"] = state.reason.value
        record_event("scan", event)
