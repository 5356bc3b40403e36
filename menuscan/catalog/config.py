from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _default_field_weights() -> dict[str, float]:
    # Species and origin only support a match; a name hit should outrank them.
    return {"name": 1.0, "species": 0.9, "origin": 0.9}


@dataclass(frozen=True)
class CatalogConfig:
    catalog_path: Path = Path(
        os.getenv(
            "MENUSCAN_CATALOG_PATH",
            str(Path(__file__).resolve().parent.parent / "data" / "catalog.csv"),
        )
    )
    field_weights: dict[str, float] = field(default_factory=_default_field_weights)


DEFAULT_CATALOG_CONFIG = CatalogConfig()
