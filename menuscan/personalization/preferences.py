"""
Preference vectors from a user's history.

Priority:
1. A complete baseline profile the user entered.
2. A weighted average over positive reviews (LIKE_IT / LOVE_IT). Items the
   user favourited weigh ``favorite_weight``. Each attribute comes from the
   review when the user rated it, else the item's community average, else
   the item's catalog value.
3. ``None`` when neither is available; scoring then falls back to neutral.
"""
from __future__ import annotations

import logging
from typing import Iterable, Mapping

from ..catalog.models import ATTRIBUTE_NAMES, CatalogItem
from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .models import (
    POSITIVE_RATINGS,
    BaselineProfile,
    PreferenceSource,
    ReviewRating,
    ReviewSignal,
    UserPreferenceVector,
)

logger = logging.getLogger(__name__)


def _vector_from_values(values: Mapping[str, float], source: PreferenceSource) -> UserPreferenceVector:
    return UserPreferenceVector(
        **{f"avg_{name}": values[name] for name in ATTRIBUTE_NAMES},
        source=source,
    )


def _review_value(review: ReviewSignal, item: CatalogItem | None, name: str) -> float | None:
    value = getattr(review, name)
    if value is not None:
        return value
    if item is None:
        return None
    avg = getattr(item, f"avg_{name}")
    return avg if avg is not None else getattr(item, name)


def derive_preference_vector(
    baseline: BaselineProfile | None,
    reviews: Iterable[ReviewSignal],
    catalog: Mapping[str, CatalogItem],
    favorite_ids: Iterable[str] = (),
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> UserPreferenceVector | None:
    if baseline is not None and baseline.is_complete:
        return _vector_from_values(baseline.model_dump(), PreferenceSource.baseline)

    favorites = set(favorite_ids)
    totals = {name: 0.0 for name in ATTRIBUTE_NAMES}
    weights = {name: 0.0 for name in ATTRIBUTE_NAMES}

    for review in reviews:
        if review.rating not in POSITIVE_RATINGS:
            continue
        item = catalog.get(review.item_id)
        weight = config.favorite_weight if review.item_id in favorites else 1.0
        for name in ATTRIBUTE_NAMES:
            value = _review_value(review, item, name)
            if value is None:
                continue
            totals[name] += value * weight
            weights[name] += weight

    if any(w == 0.0 for w in weights.values()):
        return None

    averages = {name: totals[name] / weights[name] for name in ATTRIBUTE_NAMES}
    return _vector_from_values(averages, PreferenceSource.reviews)


def update_baseline(
    current: BaselineProfile | None,
    review: ReviewSignal,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> BaselineProfile | None:
    """
    Shift a baseline toward the attributes of a positively rated item.

    LOVE_IT pulls harder than LIKE_IT. Only attributes present on both the
    baseline and the review move. A user without any baseline gets one
    seeded from a review that rates all five attributes; any other review
    leaves them without one.
    """
    if review.rating not in POSITIVE_RATINGS:
        return current

    if current is None or current.is_empty:
        if not review.has_all_attributes:
            return current
        return BaselineProfile(**{name: getattr(review, name) for name in ATTRIBUTE_NAMES})

    new_weight = (
        config.love_it_weight if review.rating is ReviewRating.LOVE_IT
        else config.like_it_weight
    )
    updated: dict[str, float | None] = {}
    for name in ATTRIBUTE_NAMES:
        old = getattr(current, name)
        new = getattr(review, name)
        if old is None or new is None:
            updated[name] = old
        else:
            updated[name] = old * (1.0 - new_weight) + new * new_weight
    return BaselineProfile(**updated)


class InMemoryPreferenceProvider:
    """Preference provider over review history held in memory."""

    def __init__(
        self,
        catalog: Mapping[str, CatalogItem] | None = None,
        config: ScoringConfig = DEFAULT_SCORING_CONFIG,
    ) -> None:
        self._catalog: dict[str, CatalogItem] = dict(catalog or {})
        self._config = config
        self._baselines: dict[str, BaselineProfile] = {}
        self._reviews: dict[str, list[ReviewSignal]] = {}
        self._favorites: dict[str, set[str]] = {}

    def set_catalog(self, items: Iterable[CatalogItem]) -> None:
        self._catalog = {item.id: item for item in items}

    def set_baseline(self, user_id: str, baseline: BaselineProfile) -> None:
        self._baselines[user_id] = baseline

    def add_review(self, user_id: str, review: ReviewSignal) -> None:
        self._reviews.setdefault(user_id, []).append(review)
        baseline = update_baseline(self._baselines.get(user_id), review, self._config)
        if baseline is not None:
            self._baselines[user_id] = baseline

    def add_favorite(self, user_id: str, item_id: str) -> None:
        self._favorites.setdefault(user_id, set()).add(item_id)

    def get_preference_vector(self, user_id: str) -> UserPreferenceVector | None:
        prefs = derive_preference_vector(
            self._baselines.get(user_id),
            self._reviews.get(user_id, []),
            self._catalog,
            self._favorites.get(user_id, set()),
            self._config,
        )
        if prefs is None:
            logger.debug("No preference history for user %s", user_id)
        return prefs
