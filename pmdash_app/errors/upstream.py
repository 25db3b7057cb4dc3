"""
Upstream failure classifications.

These exceptions represent failures of the external data source. They are
surfaced to the refresh scheduler as a failed tick; the previously fetched
snapshot stays available to consumers.
"""

from typing import Any, Optional


class UpstreamError(Exception):
    """Base class for failures reported by or about the upstream source."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class UpstreamUnavailableError(UpstreamError):
    """Fetch failed, returned a non-success status or timed out."""

    def __init__(self, message: str, url: Optional[str] = None,
                 status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.url = url
        self.status_code = status_code


class NotFoundError(UpstreamError):
    """Requested slug or asset id has no corresponding record."""

    def __init__(self, message: str, resource: Optional[str] = None,
                 key: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.resource = resource
        self.key = key
        self.recoverable = False
