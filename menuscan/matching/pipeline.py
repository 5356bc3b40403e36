from __future__ import annotations

import logging
from typing import Iterable

from ..personalization.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from ..personalization.models import UserPreferenceVector
from ..personalization.scorer import score
from .config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .matcher import SearchIndex, detect_lines, match
from .models import RankedMatch, ScanResult
from .ranking import rank_results

logger = logging.getLogger(__name__)


def analyze_lines(
    texts: Iterable[str],
    index: SearchIndex,
    prefs: UserPreferenceVector | None = None,
    matching_config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
    scoring_config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> ScanResult:
    """Run matcher, ranker and scorer over one scan's recognized lines."""
    lines = detect_lines(texts)
    candidates = match(lines, index, matching_config.threshold)
    ranked, unmatched = rank_results(
        lines,
        candidates,
        max_matches=matching_config.max_matches,
        max_unmatched=matching_config.max_unmatched,
    )

    matches = [
        RankedMatch(
            item=c.item,
            confidence=c.confidence,
            detected_text=c.detected_text,
            position=c.position,
            personalized_score=score(c.item, prefs, scoring_config),
        )
        for c in ranked
    ]

    logger.debug(
        "Analyzed %d lines: %d candidates, %d matches, %d unmatched",
        len(lines), len(candidates), len(matches), len(unmatched),
    )
    return ScanResult(matches=matches, unmatched=unmatched)
