"""
Data ingestion and normalization module.

Decodes raw upstream market records and order book levels into the canonical,
immutable data contracts consumed by ranking, statistics and refresh.
"""
