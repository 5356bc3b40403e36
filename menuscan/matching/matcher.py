"""
Line-to-catalog matching.

Each recognized line is cleaned of menu furniture (prices, dot leaders,
bullets) and queried against the catalog index on its own. Every item whose
similarity clears the threshold becomes a candidate; ambiguity is kept here
and resolved later by the ranker.
"""
from __future__ import annotations

import re
from typing import Iterable, Protocol, Sequence

from ..catalog.models import CatalogItem
from .config import DEFAULT_MATCHING_CONFIG
from .models import DetectedLine, MatchCandidate

_PRICE_RE = re.compile(
    r"(?:[$€£]\s*)?\d+(?:[.,]\d{1,2})?\s*(?:/\s*(?:ea|each|pc|doz))?",
    re.IGNORECASE,
)
_MARKET_PRICE_RE = re.compile(r"\bm\.?\s?p\.?(?=\s|$)", re.IGNORECASE)
_LEADER_RE = re.compile(r"\.{2,}|_{2,}|[•·|*]+")
_LEADING_BULLET_RE = re.compile(r"^\s*[-–—]+\s*")
_SPACE_RE = re.compile(r"\s+")
_WORD_RE = re.compile(r"[a-z]+")

MIN_LETTERS = 3

# Words that make up menu boilerplate rather than item names
NOISE_WORDS: frozenset[str] = frozenset({
    "a", "add", "and", "bar", "doz", "dozen", "ea", "each", "half", "market",
    "menu", "mp", "of", "on", "or", "oyster", "oysters", "pc", "pcs", "per",
    "piece", "pieces", "price", "prices", "raw", "shell", "the", "with",
})


class SearchIndex(Protocol):
    def search(self, query: str) -> list[tuple[CatalogItem, float]]: ...


def detect_lines(texts: Iterable[str]) -> list[DetectedLine]:
    """Wrap OCR output in positioned lines, keeping recognition order."""
    return [DetectedLine(text=text, position=pos) for pos, text in enumerate(texts)]


def clean_line(text: str) -> str:
    """Strip prices and layout characters, leaving the item wording."""
    cleaned = _MARKET_PRICE_RE.sub(" ", text)
    cleaned = _PRICE_RE.sub(" ", cleaned)
    cleaned = _LEADER_RE.sub(" ", cleaned)
    cleaned = _LEADING_BULLET_RE.sub("", cleaned)
    return _SPACE_RE.sub(" ", cleaned).strip(" -–—,:;")


def is_menu_noise(text: str) -> bool:
    """True for lines that cannot name an item: prices, headers, stray marks."""
    words = _WORD_RE.findall(clean_line(text).lower())
    if sum(len(w) for w in words) < MIN_LETTERS:
        return True
    return all(w in NOISE_WORDS for w in words)


def match(
    lines: Sequence[DetectedLine],
    index: SearchIndex,
    threshold: float = DEFAULT_MATCHING_CONFIG.threshold,
) -> list[MatchCandidate]:
    """
    Return every candidate whose similarity is at least ``threshold``.

    A line may produce several candidates or none. Lines without candidates
    are not reported here; see ``ranking.collect_unmatched``.
    """
    candidates: list[MatchCandidate] = []
    for line in lines:
        if is_menu_noise(line.text):
            continue
        for item, similarity in index.search(clean_line(line.text)):
            if similarity < threshold:
                continue
            candidates.append(MatchCandidate(
                item=item,
                confidence=similarity,
                detected_text=line.text,
                position=line.position,
            ))
    return candidates
