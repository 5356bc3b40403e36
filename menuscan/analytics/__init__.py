"""
Scan analytics.

Responsibilities:
- Record one event per finished scan attempt.
- Summarise outcomes, timings and the most frequently matched items.
"""
