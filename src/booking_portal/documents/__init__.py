"""Quote and invoice composition from canonical bookings."""

from booking_portal.documents.composer import (
    INCLUSIVE_TAX_RATE,
    DocumentComposer,
    parse_amount,
    split_inclusive_total,
)

__all__ = [
    "INCLUSIVE_TAX_RATE",
    "DocumentComposer",
    "parse_amount",
    "split_inclusive_total",
]
