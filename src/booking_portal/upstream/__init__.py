"""Upstream field-service API access: HTTP client and cursor pagination."""

from booking_portal.upstream.client import UpstreamClient, odata_eq, odata_escape
from booking_portal.upstream.fetcher import FetchError, FetchErrorKind, FetchResult, PaginatedFetcher

__all__ = [
    "FetchError",
    "FetchErrorKind",
    "FetchResult",
    "PaginatedFetcher",
    "UpstreamClient",
    "odata_eq",
    "odata_escape",
]
