"""
Catalog layer for menu scanning.

Responsibilities:
- Hold the known item corpus as immutable catalog records.
- Load catalog snapshots from an injected list or a CSV export.
- Build a fuzzy search index over name, species and origin.
- Cache built indexes per snapshot so unchanged catalogs are not re-indexed.
"""
