"""
Approximate-match index over a catalog snapshot.

The index is a flat list of searchable field values (name, species, origin)
with a back-reference to the owning item. A query is scored against every
value with ``rapidfuzz``'s weighted ratio, which folds case and punctuation
and tolerates partial tokens and small misspellings. Each item keeps the best
weighted score over its fields.

Weighted ratio on its own rates any shared word highly once the query is
much longer than the field ("Creek Salad" vs "Island Creek"). Every content
word left unpaired on either side therefore scales the score down by
``UNPAIRED_TOKEN_FACTOR``.
"""
from __future__ import annotations

import logging
from typing import Iterable

from rapidfuzz import fuzz, process, utils

from .config import DEFAULT_CATALOG_CONFIG
from .models import CatalogItem

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 3
TOKEN_PAIR_MIN_RATIO = 80.0
UNPAIRED_TOKEN_FACTOR = 0.9

# Words that say nothing about which item a line names
FILLER_TOKENS: frozenset[str] = frozenset({
    "and", "dozen", "each", "fresh", "from", "half", "local", "market", "oyster",
    "oysters", "per", "price", "raw", "shell", "the", "wild", "with",
})


def content_tokens(text: str) -> list[str]:
    return [
        token for token in utils.default_process(text).split()
        if len(token) >= MIN_TOKEN_LENGTH and token not in FILLER_TOKENS
    ]


def _unpaired(tokens: list[str], others: list[str]) -> int:
    return sum(
        1 for token in tokens
        if not any(fuzz.ratio(token, other) >= TOKEN_PAIR_MIN_RATIO for other in others)
    )


class CatalogIndex:
    def __init__(
        self,
        items: Iterable[CatalogItem],
        field_weights: dict[str, float] | None = None,
    ) -> None:
        weights = field_weights or DEFAULT_CATALOG_CONFIG.field_weights
        self._items: list[CatalogItem] = list(items)
        self._choices: list[str] = []
        self._choice_tokens: list[list[str]] = []
        self._owners: list[tuple[int, float]] = []

        for pos, item in enumerate(self._items):
            for field_name, weight in weights.items():
                value = getattr(item, field_name, None)
                if not value or not utils.default_process(value):
                    continue
                self._choices.append(value)
                self._choice_tokens.append(content_tokens(value))
                self._owners.append((pos, weight))

        logger.debug(
            "Indexed %d catalog items (%d searchable values)",
            len(self._items), len(self._choices),
        )

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> list[CatalogItem]:
        return list(self._items)

    def search(self, query: str) -> list[tuple[CatalogItem, float]]:
        """
        Return ``(item, similarity)`` pairs ordered by similarity, best first.

        Similarity is in ``[0, 1]`` where 1 is an exact match. No threshold is
        applied here; items with no resemblance at all are left out.
        """
        if not query or not utils.default_process(query) or not self._choices:
            return []

        hits = process.extract(
            query,
            self._choices,
            scorer=fuzz.WRatio,
            processor=utils.default_process,
            limit=None,
        )
        query_tokens = content_tokens(query)

        best: dict[int, float] = {}
        for _value, raw_score, choice_idx in hits:
            if raw_score <= 0:
                continue
            pos, weight = self._owners[choice_idx]
            choice_tokens = self._choice_tokens[choice_idx]
            unpaired = (
                _unpaired(query_tokens, choice_tokens)
                + _unpaired(choice_tokens, query_tokens)
            )
            adjusted = raw_score / 100.0 * weight * UNPAIRED_TOKEN_FACTOR ** unpaired
            similarity = min(1.0, max(0.0, adjusted))
            if similarity > best.get(pos, 0.0):
                best[pos] = similarity

        ranked = sorted(best.items(), key=lambda kv: (-kv[1], kv[0]))
        return [(self._items[pos], similarity) for pos, similarity in ranked]
