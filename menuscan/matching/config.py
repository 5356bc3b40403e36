from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class MatchingConfig:
    threshold: float = float(os.getenv("MENUSCAN_MATCH_THRESHOLD", "0.7"))
    max_matches: int = 20
    max_unmatched: int = 20


DEFAULT_MATCHING_CONFIG = MatchingConfig()
