from __future__ import annotations

import time

from fastapi import Depends, FastAPI, HTTPException

from .analytics.aggregator import compute_scan_analytics
from .analytics.store import get_events, record_event
from .catalog.config import DEFAULT_CATALOG_CONFIG
from .catalog.data_store import CatalogProvider, CsvCatalogProvider
from .catalog.index_cache import get_index, get_index_cache_stats
from .catalog.models import CatalogItemOut
from .matching.config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .matching.models import (
    ScanAnalyzeRequest,
    ScanAnalyzeResponse,
    ScanMatchOut,
)
from .matching.pipeline import analyze_lines
from .personalization.models import BaselineProfile, ReviewSignal, UserPreferenceVector
from .personalization.preferences import InMemoryPreferenceProvider
from .personalization.scorer import tier_for

app = FastAPI(title="Menu Scan Matching API", version="1.0.0")

_catalog_provider = CsvCatalogProvider()
_preference_provider = InMemoryPreferenceProvider()


def get_catalog_provider() -> CatalogProvider:
    return _catalog_provider


def get_preference_provider() -> InMemoryPreferenceProvider:
    return _preference_provider


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/catalog/metadata")
def catalog_metadata(provider: CatalogProvider = Depends(get_catalog_provider)) -> dict:
    items = provider.get_all_catalog_items()
    return {
        "total_items": len(items),
        "species": sorted({i.species for i in items if i.species}),
        "origins": sorted({i.origin for i in items if i.origin}),
    }


# ── Scan endpoints ───────────────────────────────────────────────────────


@app.post("/scan/analyze", response_model=ScanAnalyzeResponse)
def scan_analyze(
    body: ScanAnalyzeRequest,
    provider: CatalogProvider = Depends(get_catalog_provider),
    preferences: InMemoryPreferenceProvider = Depends(get_preference_provider),
) -> ScanAnalyzeResponse:
    start_time = time.perf_counter()
    items = provider.get_all_catalog_items()

    # Explicit preferences win over the stored profile
    prefs = body.preferences
    if prefs is None and body.user_id is not None:
        preferences.set_catalog(items)
        prefs = preferences.get_preference_vector(body.user_id)

    matching_config = DEFAULT_MATCHING_CONFIG
    if body.threshold is not None:
        matching_config = MatchingConfig(
            threshold=body.threshold,
            max_matches=DEFAULT_MATCHING_CONFIG.max_matches,
            max_unmatched=DEFAULT_MATCHING_CONFIG.max_unmatched,
        )

    index = get_index(items, DEFAULT_CATALOG_CONFIG.field_weights)
    result = analyze_lines(body.lines, index, prefs, matching_config=matching_config)

    matches: list[ScanMatchOut] = []
    for m in result.matches:
        tier = tier_for(m.personalized_score)
        matches.append(ScanMatchOut(
            item=CatalogItemOut(
                id=m.item.id,
                name=m.item.name,
                species=m.item.species,
                origin=m.item.origin,
                standout_notes=m.item.standout_notes,
            ),
            confidence=round(m.confidence, 4),
            detected_text=m.detected_text,
            position=m.position,
            personalized_score=m.personalized_score,
            label=tier.label,
            color=tier.color,
        ))

    status = "no_matches" if result.is_empty else "results"
    elapsed_ms = round((time.perf_counter() - start_time) * 1000, 1)
    record_event("scan", {
        "source": "api",
        "user_id": body.user_id,
        "personalized": prefs is not None,
        "lines": len(body.lines),
        "outcome": status,
        "matches": len(result.matches),
        "unmatched": len(result.unmatched),
        "matched_items": [m.item.name for m in result.matches],
        "analyze_time_ms": elapsed_ms,
    })

    return ScanAnalyzeResponse(
        status=status,
        matches=matches,
        unmatched=result.unmatched,
        total_lines=len(body.lines),
    )


# ── User preference endpoints ────────────────────────────────────────────


@app.put("/users/{user_id}/baseline", response_model=BaselineProfile)
def set_baseline(
    user_id: str,
    body: BaselineProfile,
    preferences: InMemoryPreferenceProvider = Depends(get_preference_provider),
) -> BaselineProfile:
    preferences.set_baseline(user_id, body)
    return body


@app.post("/users/{user_id}/reviews", response_model=UserPreferenceVector | None)
def add_review(
    user_id: str,
    body: ReviewSignal,
    provider: CatalogProvider = Depends(get_catalog_provider),
    preferences: InMemoryPreferenceProvider = Depends(get_preference_provider),
) -> UserPreferenceVector | None:
    items = provider.get_all_catalog_items()
    if body.item_id not in {i.id for i in items}:
        raise HTTPException(status_code=404, detail=f"Unknown catalog item {body.item_id}")

    preferences.set_catalog(items)
    preferences.add_review(user_id, body)
    record_event("review", {"user_id": user_id, "item_id": body.item_id, "rating": body.rating.value})
    return preferences.get_preference_vector(user_id)


@app.post("/users/{user_id}/favorites/{item_id}", status_code=204)
def add_favorite(
    user_id: str,
    item_id: str,
    preferences: InMemoryPreferenceProvider = Depends(get_preference_provider),
) -> None:
    preferences.add_favorite(user_id, item_id)


@app.get("/users/{user_id}/preferences", response_model=UserPreferenceVector)
def get_preferences(
    user_id: str,
    provider: CatalogProvider = Depends(get_catalog_provider),
    preferences: InMemoryPreferenceProvider = Depends(get_preference_provider),
) -> UserPreferenceVector:
    preferences.set_catalog(provider.get_all_catalog_items())
    prefs = preferences.get_preference_vector(user_id)
    if prefs is None:
        raise HTTPException(status_code=404, detail="No preference history for this user")
    return prefs


# ── Operational endpoints ────────────────────────────────────────────────


@app.get("/analytics")
def analytics() -> dict:
    return compute_scan_analytics(get_events())


@app.get("/cache/stats")
def cache_stats() -> dict:
    return get_index_cache_stats()
