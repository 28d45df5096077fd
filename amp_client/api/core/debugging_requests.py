"""
Debugging Requests
==================

Utilities for inspecting the HTTP response headers the Amphitheatre API
returns for each request.

Headers (non-exhaustive):

    # Rate limiting information
    - x-ratelimit-limit       requests allowed in the current window
    - x-ratelimit-remaining   requests left in the current window
    - x-ratelimit-after       when the window resets ("never" when unlimited)

    # Request tracing
    - x-request-id

amp-client exposes:

- RateLimitInfo: structured view of rate limit headers
- RequestMeta: structured metadata for a single API call
- extract_request_meta(): parse headers from a response
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class RateLimitInfo:
    """Structured representation of rate limiting headers for a request."""

    limit: Optional[int] = None
    remaining: Optional[int] = None
    after: Optional[str] = None

    @property
    def exhausted(self) -> bool:
        return self.remaining is not None and self.remaining <= 0


@dataclass(frozen=True)
class RequestMeta:
    """
    Metadata extracted from an API response's HTTP headers.

    Attributes:
        request_id:
            The server-generated x-request-id header.
        rate_limit:
            Parsed RateLimitInfo; fields are None when headers are absent.
    """

    request_id: Optional[str]
    rate_limit: RateLimitInfo


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def extract_request_meta(headers: Mapping[str, str]) -> RequestMeta:
    """
    Extract RequestMeta from response headers.

    Missing or malformed headers become None rather than raising.
    """
    lower = {k.lower(): v for k, v in headers.items()}

    rate_limit = RateLimitInfo(
        limit=_parse_int(lower.get("x-ratelimit-limit")),
        remaining=_parse_int(lower.get("x-ratelimit-remaining")),
        after=lower.get("x-ratelimit-after"),
    )

    return RequestMeta(
        request_id=lower.get("x-request-id"),
        rate_limit=rate_limit,
    )


__all__ = [
    "RateLimitInfo",
    "RequestMeta",
    "extract_request_meta",
]
