"""Data models for raw upstream records, bookings and documents."""

from booking_portal.models.booking import BookingDetail, CanonicalBooking, Vehicle
from booking_portal.models.document import (
    CanonicalDocument,
    DocumentCustomer,
    DocumentKind,
    Invoice,
    LineItem,
    Quote,
)
from booking_portal.models.profile import CustomerProfile
from booking_portal.models.raw import RawRecord

__all__ = [
    "BookingDetail",
    "CanonicalBooking",
    "CanonicalDocument",
    "CustomerProfile",
    "DocumentCustomer",
    "DocumentKind",
    "Invoice",
    "LineItem",
    "Quote",
    "RawRecord",
    "Vehicle",
]
