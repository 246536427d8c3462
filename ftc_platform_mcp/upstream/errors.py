"""Error types specific to the platform REST API layer.

Purpose:
- Provide typed exceptions thrown by `PlatformApiClient`.
- Expose HTTP-oriented context (e.g., status code, error body) for diagnosis.

Usage:
- Catch `UpstreamApiError` for any failure talking to the platform API and
  inspect `status_code` or `details`.
"""

from __future__ import annotations

from typing import Any, Optional


class UpstreamApiError(Exception):
    """Base error for platform API failures.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional payload from the server (e.g., response body or the API's `details` field).
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class UpstreamPayloadError(UpstreamApiError):
    """Raised when the platform API answers with an unusable body.

    Covers non-JSON bodies, an explicit ``success: false`` flag and
    successful envelopes that carry no ``data``.
    """
