"""Request-scoped dependencies: caller identity and upstream deadline."""

import time
from typing import Optional

from fastapi import HTTPException, Request

from booking_portal.pipeline import BookingPipeline
from booking_portal.store.message_store import MessageStore
from booking_portal.store.user_store import PortalUser


def get_pipeline(request: Request) -> BookingPipeline:
    return request.app.state.pipeline


def get_message_store(request: Request) -> MessageStore:
    return request.app.state.message_store


def get_current_user(request: Request) -> PortalUser:
    """
    Resolve the caller from "Authorization: Bearer <token>".
    Token issuance and verification belong to the user store; this only looks the token up.
    """
    header = request.headers.get("authorization") or ""
    _, _, token = header.partition(" ")
    token = token.strip()
    if not token:
        raise HTTPException(status_code=401, detail="Access token required")
    user = request.app.state.user_store.get_by_token(token)
    if user is None:
        raise HTTPException(status_code=403, detail="Invalid or expired token")
    return user


def get_deadline(request: Request) -> Optional[float]:
    """Monotonic deadline for upstream calls made while serving this request."""
    settings = request.app.state.settings
    if settings is None or settings.request_deadline is None:
        return None
    return time.monotonic() + settings.request_deadline
