"""HTTP API for the booking portal."""

from booking_portal.api.app import create_app

__all__ = ["create_app"]
