"""Normalize raw upstream job records into canonical bookings."""

import math
from collections.abc import Mapping
from typing import Any, Optional

from booking_portal.errors import NormalizationError
from booking_portal.models.booking import BookingDetail, CanonicalBooking, Vehicle
from booking_portal.models.raw import RawRecord

from .fallbacks import (
    Extractor,
    as_date,
    date_field,
    field,
    first_line,
    first_text,
    is_blank,
    nested,
)


def _uuid_prefix(record: Mapping[str, Any]) -> Optional[str]:
    uuid = record.get("uuid")
    return None if is_blank(uuid) else str(uuid)[:8]


# Ordered candidate extractors per canonical field; first hit wins.
JOB_NUMBER_CHAIN: tuple[Extractor, ...] = (
    field("generated_job_id"),
    field("job_number"),
    _uuid_prefix,
)
NAME_CHAIN: tuple[Extractor, ...] = (
    first_line(field("job_description")),
    field("name"),
)
STATUS_CHAIN: tuple[Extractor, ...] = (
    field("status"),
    field("status_name"),
)
SCHEDULED_START_CHAIN: tuple[Extractor, ...] = (
    date_field("work_order_date"),
    date_field("date"),
    date_field("scheduled_start"),
    date_field("start_date"),
    date_field("created_at"),
)
SCHEDULED_END_CHAIN: tuple[Extractor, ...] = (
    date_field("completion_date"),
    date_field("scheduled_end"),
    date_field("end_date"),
)
DESCRIPTION_CHAIN: tuple[Extractor, ...] = (
    field("job_description"),
    field("description"),
    field("notes"),
)
ADDRESS_CHAIN: tuple[Extractor, ...] = (
    field("job_address"),
    field("address"),
    field("site_address"),
)
CONTACT_CHAIN: tuple[Extractor, ...] = (
    field("contact_uuid"),
    nested("contact", "uuid"),
)
REGO_CHAIN: tuple[Extractor, ...] = (
    field("registration"),
    field("rego"),
)

UNKNOWN_STATUS = "Unknown"


def map_vehicle(value: Any) -> Optional[Vehicle]:
    """Remap an upstream vehicle sub-object; None when there is none."""
    if not isinstance(value, Mapping):
        return None
    return Vehicle(
        make=first_text(value, (field("make"),), ""),
        model=first_text(value, (field("model"),), ""),
        year=first_text(value, (field("year"),), ""),
        rego=first_text(value, REGO_CHAIN, ""),
        vin=first_text(value, (field("vin"),), ""),
    )


def _payment_amount(value: Any) -> float:
    if is_blank(value):
        return 0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0
    return amount if math.isfinite(amount) else 0


class JobNormalizer:
    """
    Converts raw job records into CanonicalBooking / BookingDetail.
    Stateless: the same record always yields the same booking.
    """

    def normalize(self, raw: RawRecord) -> CanonicalBooking:
        """Booking list view of one raw job."""
        return CanonicalBooking(**self._base_fields(raw.data))

    def normalize_detail(self, raw: RawRecord) -> BookingDetail:
        """Single-booking view: list fields plus billing, payment and raw dates."""
        d = raw.data
        return BookingDetail(
            **self._base_fields(d),
            work_done_description=first_text(d, (field("work_done_description"),), ""),
            billing_address=first_text(d, (field("billing_address"),), ""),
            total_invoice_amount=first_text(d, (field("total_invoice_amount"),), "0"),
            payment_amount=_payment_amount(d.get("payment_amount")),
            payment_method=first_text(d, (field("payment_method"),), ""),
            payment_date=as_date(d.get("payment_date")),
            quote_date=as_date(d.get("quote_date")),
            work_order_date=as_date(d.get("work_order_date")),
            date=as_date(d.get("date")),
        )

    def _base_fields(self, d: Mapping[str, Any]) -> dict[str, Any]:
        uuid = d.get("uuid")
        if is_blank(uuid):
            raise NormalizationError("Upstream job record has no uuid")

        job_number = first_text(d, JOB_NUMBER_CHAIN)
        return {
            "uuid": str(uuid),
            "job_number": job_number,
            "name": first_text(d, NAME_CHAIN) or f"Job {job_number}",
            "status": first_text(d, STATUS_CHAIN, UNKNOWN_STATUS),
            "scheduled_start": first_text(d, SCHEDULED_START_CHAIN),
            "scheduled_end": first_text(d, SCHEDULED_END_CHAIN),
            "description": first_text(d, DESCRIPTION_CHAIN, ""),
            "address": first_text(d, ADDRESS_CHAIN, ""),
            "contact_uuid": first_text(d, CONTACT_CHAIN),
            "vehicle": map_vehicle(d.get("vehicle")),
        }
