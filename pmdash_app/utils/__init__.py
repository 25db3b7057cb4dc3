"""
Utility functions module.

Time Semantics:
- Refresh timestamps (last success) are wall-clock UTC
- Order book timestamps prefer the feed's own timestamp when supplied
"""

from .time import format_timestamp, utc_now

__all__ = ["format_timestamp", "utc_now"]
