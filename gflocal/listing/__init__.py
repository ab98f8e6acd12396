"""
Listing layer behind the directory table.

Responsibilities:
- Search and filter the in-memory restaurant list.
- Offer the city list for the filter dropdown.
- Export the current selection as CSV or GeoJSON.
"""
