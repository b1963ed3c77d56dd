"""Upstream job normalization into canonical bookings."""

from booking_portal.normalization.fallbacks import first_match, is_blank, is_sentinel_or_absent
from booking_portal.normalization.jobs import JobNormalizer, map_vehicle

__all__ = [
    "JobNormalizer",
    "first_match",
    "is_blank",
    "is_sentinel_or_absent",
    "map_vehicle",
]
