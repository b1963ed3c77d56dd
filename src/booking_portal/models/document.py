"""Quote and invoice document models."""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from booking_portal.models.booking import Vehicle


class DocumentKind(str, Enum):
    """Document types a booking can be rendered as."""

    QUOTE = "quote"
    INVOICE = "invoice"


class _CamelModel(BaseModel):
    """Serializes with camelCase keys (model_dump(by_alias=True)) for the client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentCustomer(_CamelModel):
    name: str = "Customer"
    address: str = ""
    phone: str = ""
    email: str = ""


class LineItem(_CamelModel):
    description: str
    quantity: int = 1
    unit_price: float
    total: float


class _DocumentBase(_CamelModel):
    document_number: str
    date: str
    customer: DocumentCustomer
    vehicle: Vehicle
    line_items: list[LineItem] = Field(default_factory=list)
    subtotal: float
    tax: float
    total: float
    work_order_date: Optional[str] = None
    notes: str = ""


class Quote(_DocumentBase):
    type: Literal["quote"] = "quote"
    valid_until: str


class Invoice(_DocumentBase):
    type: Literal["invoice"] = "invoice"
    due_date: str
    payment_status: str = "Pending"
    payment_method: str = ""
    payment_date: Optional[str] = None


CanonicalDocument = Annotated[Union[Quote, Invoice], Field(discriminator="type")]
