"""
Error classification system for market data processing.

This module provides a structured exception hierarchy separating recoverable
data quality problems in upstream payloads from transport-level failures.
"""

from .data_quality import (
    DataQualityError,
    MalformedDataError,
    ParseError,
)
from .upstream import (
    NotFoundError,
    UpstreamError,
    UpstreamUnavailableError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MalformedDataError",
    "ParseError",
    # Upstream Failures
    "UpstreamError",
    "UpstreamUnavailableError",
    "NotFoundError",
]
