from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ScanConfig:
    # An analysis that yields neither matches nor unmatched lines ends in
    # Failed(NO_MATCHES) instead of an empty Results screen.
    empty_results_as_failure: bool = _env_flag("MENUSCAN_EMPTY_RESULTS_AS_FAILURE", "1")
    analytics_enabled: bool = True


DEFAULT_SCAN_CONFIG = ScanConfig()
