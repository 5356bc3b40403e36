"""
"Match for you" scoring.

Each of the five tasting attributes contributes ``1 - |item - pref| / 10``;
the mean of the five, as a percentage rounded half-up, is the score. Items
use their community averages when they have them and their catalog values
otherwise. Without a preference vector every item scores the neutral value.
"""
from __future__ import annotations

import math

import numpy as np

from ..catalog.models import CatalogItem
from .config import DEFAULT_SCORING_CONFIG, MatchTier, ScoringConfig
from .models import UserPreferenceVector

ATTRIBUTE_SCALE = 10.0


def score(
    item: CatalogItem,
    prefs: UserPreferenceVector | None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> int:
    if prefs is None:
        return config.neutral_score

    item_vec = np.asarray(item.effective_attributes(), dtype=float)
    pref_vec = np.asarray(prefs.as_tuple(), dtype=float)
    similarities = 1.0 - np.abs(item_vec - pref_vec) / ATTRIBUTE_SCALE

    # Trim float noise so 50.5 rounds up instead of landing on 50.4999...
    percent = round(float(similarities.mean()) * 100.0, 6)
    return int(min(100, max(0, math.floor(percent + 0.5))))


def tier_for(
    value: int, config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> MatchTier:
    tiers = sorted(config.tiers, key=lambda t: t.min_score, reverse=True)
    for tier in tiers:
        if value >= tier.min_score:
            return tier
    return tiers[-1]


def match_label(value: int, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> str:
    return tier_for(value, config).label


def match_color(value: int, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> str:
    return tier_for(value, config).color
