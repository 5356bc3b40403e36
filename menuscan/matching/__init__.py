"""
Matching pipeline for scanned menus.

Responsibilities:
- Turn recognized text lines into positioned detected lines.
- Query the catalog index per line and keep candidates above the threshold.
- Collapse duplicate candidates per catalog item, order and cap them.
- Track the lines that did not resemble any catalog item.
"""
