"""
Data quality error classifications for upstream payload processing.

These exceptions describe problems with individual upstream fields. They are
recovered locally by the parsers and normalizers, which substitute documented
defaults, and never cross into statistics or consumers.
"""

from typing import Any, Optional


class DataQualityError(Exception):
    """Base class for data quality issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MalformedDataError(DataQualityError):
    """Data exists but is in incorrect format."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class ParseError(MalformedDataError):
    """An upstream field could not be decoded (invalid JSON, non-numeric value)."""
    pass
