from __future__ import annotations

from typing import Sequence

from .config import DEFAULT_MATCHING_CONFIG
from .matcher import is_menu_noise
from .models import DetectedLine, MatchCandidate, UnmatchedEntry


def _rank_key(candidate: MatchCandidate) -> tuple[float, int]:
    # Higher confidence first, then the earliest line on the menu
    return (-candidate.confidence, candidate.position)


def dedupe_and_rank(
    candidates: Sequence[MatchCandidate],
    limit: int = DEFAULT_MATCHING_CONFIG.max_matches,
) -> list[MatchCandidate]:
    """Keep one candidate per catalog item, sort them and cap the list."""
    best: dict[str, MatchCandidate] = {}
    for candidate in candidates:
        current = best.get(candidate.item.id)
        if current is None or _rank_key(candidate) < _rank_key(current):
            best[candidate.item.id] = candidate

    ranked = sorted(best.values(), key=_rank_key)
    return ranked[:max(0, limit)]


def collect_unmatched(
    lines: Sequence[DetectedLine],
    candidates: Sequence[MatchCandidate],
    limit: int = DEFAULT_MATCHING_CONFIG.max_unmatched,
) -> list[UnmatchedEntry]:
    """Lines that produced no candidate, in menu order, noise excluded."""
    matched_positions = {c.position for c in candidates}
    unmatched = [
        UnmatchedEntry(detected_text=line.text, position=line.position)
        for line in sorted(lines, key=lambda ln: ln.position)
        if line.position not in matched_positions and not is_menu_noise(line.text)
    ]
    return unmatched[:max(0, limit)]


def rank_results(
    lines: Sequence[DetectedLine],
    candidates: Sequence[MatchCandidate],
    max_matches: int = DEFAULT_MATCHING_CONFIG.max_matches,
    max_unmatched: int = DEFAULT_MATCHING_CONFIG.max_unmatched,
) -> tuple[list[MatchCandidate], list[UnmatchedEntry]]:
    return (
        dedupe_and_rank(candidates, max_matches),
        collect_unmatched(lines, candidates, max_unmatched),
    )
