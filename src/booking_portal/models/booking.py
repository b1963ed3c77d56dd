"""Canonical booking models produced by the job normalizer."""

from typing import Optional

from pydantic import BaseModel, Field


class Vehicle(BaseModel):
    """Vehicle attached to a job. Missing fields are empty strings."""

    make: str = ""
    model: str = ""
    year: str = ""
    rego: str = ""
    vin: str = ""

    @classmethod
    def placeholder(cls) -> "Vehicle":
        """Explicit 'N/A' vehicle used on documents when the job has none."""
        return cls(make="N/A", model="N/A", year="N/A", rego="N/A", vin="N/A")


class CanonicalBooking(BaseModel):
    """Stable booking shape served to the client, independent of upstream schema."""

    uuid: str = Field(..., min_length=1, description="Upstream job uuid")
    job_number: str
    name: str
    status: str = "Unknown"
    scheduled_start: Optional[str] = None
    scheduled_end: Optional[str] = None
    description: str = ""
    address: str = ""
    contact_uuid: Optional[str] = None
    vehicle: Optional[Vehicle] = None


class BookingDetail(CanonicalBooking):
    """Single-booking view with billing and payment fields."""

    work_done_description: str = ""
    billing_address: str = ""
    total_invoice_amount: str = "0"
    payment_amount: float = 0
    payment_method: str = ""
    payment_date: Optional[str] = None
    quote_date: Optional[str] = None
    work_order_date: Optional[str] = None
    date: Optional[str] = None
