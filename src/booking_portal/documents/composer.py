"""Compose quote and invoice documents from a booking and a customer profile."""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

from booking_portal.errors import ValidationError
from booking_portal.models.booking import BookingDetail, Vehicle
from booking_portal.models.document import DocumentCustomer, DocumentKind, Invoice, LineItem, Quote
from booking_portal.models.profile import CustomerProfile
from booking_portal.models.raw import RawRecord
from booking_portal.normalization.fallbacks import date_part, is_blank
from booking_portal.normalization.jobs import JobNormalizer

logger = logging.getLogger(__name__)

# Upstream invoice totals include GST at a single fixed rate.
INCLUSIVE_TAX_RATE = 0.10

QUOTE_VALID_DAYS = 30
INVOICE_DUE_DAYS = 14

QUOTE_PREFIX = "QUOTE"
INVOICE_PREFIX = "INV"

DEFAULT_QUOTE_NOTE = "This quote is valid for 30 days."
DEFAULT_INVOICE_NOTE = "Thank you for your business."
DEFAULT_LINE_DESCRIPTION = "Service"
DEFAULT_CUSTOMER_NAME = "Customer"


def parse_amount(value: Any) -> float:
    """Parse an upstream money string; 0 when absent, unparseable or non-finite."""
    if is_blank(value):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        logger.warning("Unparseable amount %r; using 0", value)
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def split_inclusive_total(total: float, tax_rate: float = INCLUSIVE_TAX_RATE) -> tuple[float, float]:
    """Back the tax out of a tax-inclusive total. Returns (subtotal, tax)."""
    subtotal = total / (1 + tax_rate)
    return subtotal, total - subtotal


def _first_line(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""


class DocumentComposer:
    """
    Derives a Quote or Invoice from a booking detail plus the customer's profile.
    Produces exactly one synthetic line item carrying the derived subtotal.
    """

    def __init__(self, tax_rate: float = INCLUSIVE_TAX_RATE, normalizer: Optional[JobNormalizer] = None):
        if tax_rate < 0:
            raise ValueError("tax_rate must be >= 0")
        self.tax_rate = tax_rate
        self._normalizer = normalizer or JobNormalizer()

    def compose(
        self,
        kind: Union[DocumentKind, str],
        job: Union[RawRecord, BookingDetail],
        customer: Optional[CustomerProfile],
        *,
        now: Optional[datetime] = None,
    ) -> Union[Quote, Invoice]:
        """
        Build the document. job may be a raw record (normalized here) or a BookingDetail.
        now: composition time for validity/due dates (default: current UTC time)
        """
        kind = self.parse_kind(kind)
        booking = job if isinstance(job, BookingDetail) else self._normalizer.normalize_detail(job)
        customer = customer or CustomerProfile()
        now = now or datetime.now(timezone.utc)

        total = parse_amount(booking.total_invoice_amount)
        subtotal, tax = split_inclusive_total(total, self.tax_rate)

        common: dict[str, Any] = {
            "document_number": self._document_number(kind, booking),
            "date": self._document_date(booking, now),
            "customer": DocumentCustomer(
                name=customer.name or DEFAULT_CUSTOMER_NAME,
                address=booking.billing_address or booking.address,
                phone=customer.phone,
                email=customer.email,
            ),
            "vehicle": booking.vehicle or Vehicle.placeholder(),
            "line_items": [
                LineItem(
                    description=(
                        booking.work_done_description
                        or _first_line(booking.description)
                        or DEFAULT_LINE_DESCRIPTION
                    ),
                    quantity=1,
                    unit_price=subtotal,
                    total=subtotal,
                )
            ],
            "subtotal": subtotal,
            "tax": tax,
            "total": total,
            "work_order_date": date_part(booking.work_order_date),
        }

        if kind == DocumentKind.QUOTE:
            return Quote(
                **common,
                valid_until=(now + timedelta(days=QUOTE_VALID_DAYS)).date().isoformat(),
                notes=booking.description or DEFAULT_QUOTE_NOTE,
            )
        return Invoice(
            **common,
            due_date=(now + timedelta(days=INVOICE_DUE_DAYS)).date().isoformat(),
            payment_status="Paid" if booking.payment_amount > 0 else "Pending",
            payment_method=booking.payment_method,
            payment_date=date_part(booking.payment_date),
            notes=booking.work_done_description or booking.description or DEFAULT_INVOICE_NOTE,
        )

    @staticmethod
    def parse_kind(kind: Union[DocumentKind, str]) -> DocumentKind:
        """Coerce 'quote' / 'invoice' to DocumentKind; anything else is a ValidationError."""
        if isinstance(kind, DocumentKind):
            return kind
        try:
            return DocumentKind((kind or "").strip().lower())
        except ValueError:
            raise ValidationError('Invalid document type. Use "quote" or "invoice"') from None

    @staticmethod
    def _document_number(kind: DocumentKind, booking: BookingDetail) -> str:
        prefix = QUOTE_PREFIX if kind == DocumentKind.QUOTE else INVOICE_PREFIX
        number = booking.job_number
        if number == booking.uuid[:8]:
            number = number.upper()
        return f"{prefix}-{number}"

    @staticmethod
    def _document_date(booking: BookingDetail, now: datetime) -> str:
        for candidate in (booking.work_order_date, booking.quote_date, booking.date):
            day = date_part(candidate)
            if day:
                return day
        return now.date().isoformat()
