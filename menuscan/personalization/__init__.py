"""
Personalization for scanned matches.

Responsibilities:
- Score each matched item 0-100 against the user's flavor preferences.
- Map scores onto display tiers (label and color).
- Derive a preference vector from a baseline profile or positive reviews.
"""
