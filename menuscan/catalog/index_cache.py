from __future__ import annotations

import hashlib
import json
from typing import Sequence

from .index import CatalogIndex
from .models import CatalogItem

_cache: dict[str, CatalogIndex] = {}
_hits: int = 0
_misses: int = 0
_MAX_ENTRIES = 4


def _make_key(items: Sequence[CatalogItem], field_weights: dict[str, float] | None) -> str:
    snapshot = [[i.id, i.name, i.species, i.origin] for i in items]
    normalized = json.dumps(
        {"items": snapshot, "weights": field_weights}, sort_keys=True, default=str,
    )
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


def get_index(
    items: Sequence[CatalogItem],
    field_weights: dict[str, float] | None = None,
) -> CatalogIndex:
    """Return the index for this snapshot, building it on first sight."""
    global _hits, _misses
    key = _make_key(items, field_weights)
    index = _cache.get(key)
    if index is not None:
        _hits += 1
        return index

    _misses += 1
    index = CatalogIndex(items, field_weights=field_weights)
    if len(_cache) >= _MAX_ENTRIES:
        # Oldest snapshot goes first; dicts keep insertion order.
        del _cache[next(iter(_cache))]
    _cache[key] = index
    return index


def get_index_cache_stats() -> dict:
    total = _hits + _misses
    return {
        "size": len(_cache),
        "hits": _hits,
        "misses": _misses,
        "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
    }


def clear_index_cache() -> None:
    global _hits, _misses
    _cache.clear()
    _hits = 0
    _misses = 0
