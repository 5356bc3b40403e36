"""
Scan session orchestration.

Responsibilities:
- Drive one scan attempt through capture, recognition and analysis.
- Keep the session in exactly one phase at a time (idle, capturing,
  analyzing, results, failed).
- Map camera, recognition and catalog failures to user-facing reasons.
- Reject overlapping scans and discard results from abandoned attempts.
"""
