from __future__ import annotations

from collections import Counter
from typing import Any


def compute_scan_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    scans = [e for e in events if e["type"] == "scan"]
    total = len(scans)

    # Outcomes: "results" or a failure reason code
    outcome_counter: Counter[str] = Counter()
    for s in scans:
        outcome_counter[s.get("outcome", "unknown")] += 1
    succeeded = outcome_counter.get("results", 0)

    # Average analyze time over attempts that reached analysis
    times = [s["analyze_time_ms"] for s in scans if s.get("analyze_time_ms") is not None]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Result sizes for successful scans
    results = [s for s in scans if s.get("outcome") == "results"]
    avg_matches = (
        round(sum(s.get("matches", 0) for s in results) / len(results), 1)
        if results else 0.0
    )
    avg_unmatched = (
        round(sum(s.get("unmatched", 0) for s in results) / len(results), 1)
        if results else 0.0
    )

    # Most matched items
    item_counter: Counter[str] = Counter()
    for s in results:
        for name in s.get("matched_items", []) or []:
            item_counter[name] += 1
    top_items = [{"name": n, "count": c} for n, c in item_counter.most_common(10)]

    return {
        "total_scans": total,
        "outcomes": dict(outcome_counter),
        "success_rate": round(succeeded / total * 100, 1) if total else 0.0,
        "avg_analyze_time_ms": avg_time,
        "avg_matches": avg_matches,
        "avg_unmatched": avg_unmatched,
        "top_matched_items": top_items,
    }
