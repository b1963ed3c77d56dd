"""Customer profile supplied by the user store."""

from pydantic import BaseModel


class CustomerProfile(BaseModel):
    """Read-only customer contact details used on documents."""

    name: str = ""
    phone: str = ""
    email: str = ""
