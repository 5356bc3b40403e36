from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class AnalyticsConfig:
    # Oldest events are dropped once the store holds this many
    max_events: int = int(os.getenv("MENUSCAN_ANALYTICS_MAX_EVENTS", "10000"))

    def __post_init__(self) -> None:
        if self.max_events < 1:
            raise ValueError("max_events must be at least 1")


DEFAULT_ANALYTICS_CONFIG = AnalyticsConfig()
