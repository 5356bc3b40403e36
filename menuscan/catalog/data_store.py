from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, Sequence

import pandas as pd

from .config import DEFAULT_CATALOG_CONFIG
from .models import CatalogItem

logger = logging.getLogger(__name__)

_TEXT_COLUMNS = ["name", "species", "origin"]


class CatalogProvider(Protocol):
    def get_all_catalog_items(self) -> list[CatalogItem]: ...


class StaticCatalogProvider:
    """Serves an injected catalog snapshot."""

    def __init__(self, items: Sequence[CatalogItem]) -> None:
        self._items = list(items)

    def get_all_catalog_items(self) -> list[CatalogItem]:
        return list(self._items)


def load_catalog_csv(path: Path) -> list[CatalogItem]:
    df = pd.read_csv(path, dtype={"id": str})

    for col in _TEXT_COLUMNS:
        if col in df.columns:
            df[col] = df[col].fillna("").astype(str).str.strip()
    if "total_reviews" in df.columns:
        df["total_reviews"] = df["total_reviews"].fillna(0).astype(int)

    # Missing averages stay missing rather than becoming NaN floats
    df = df.astype(object).where(pd.notna(df), None)

    return [CatalogItem(**row) for row in df.to_dict(orient="records")]


class CsvCatalogProvider:
    """Reads the catalog from a CSV export, loading it on first call."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or DEFAULT_CATALOG_CONFIG.catalog_path
        self._items: list[CatalogItem] | None = None

    def get_all_catalog_items(self) -> list[CatalogItem]:
        if self._items is None:
            self._items = load_catalog_csv(self.path)
            logger.info("Loaded %d catalog items from %s", len(self._items), self.path)
        return list(self._items)

    def reload(self) -> list[CatalogItem]:
        self._items = None
        return self.get_all_catalog_items()
