"""Portal routes under /api."""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from booking_portal.errors import ValidationError
from booking_portal.pipeline import BookingPipeline
from booking_portal.store.message_store import MessageStore
from booking_portal.store.user_store import PortalUser

from .dependencies import get_current_user, get_deadline, get_message_store, get_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Bookings"])


class MessageIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    user_id: Optional[str] = Field(default=None, alias="userId")


@router.get("/health")
def health() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/jobs")
def list_jobs(
    _user: PortalUser = Depends(get_current_user),
    pipeline: BookingPipeline = Depends(get_pipeline),
    deadline: Optional[float] = Depends(get_deadline),
) -> dict:
    jobs = pipeline.list_jobs(deadline=deadline)
    return {"success": True, "jobs": jobs}


@router.get("/bookings")
def list_bookings(
    user: PortalUser = Depends(get_current_user),
    pipeline: BookingPipeline = Depends(get_pipeline),
    deadline: Optional[float] = Depends(get_deadline),
) -> dict:
    logger.info("Listing bookings for user %s", user.id)
    result = pipeline.list_bookings(user.email, deadline=deadline)
    payload: dict = {
        "success": True,
        "bookings": [b.model_dump(mode="json") for b in result.bookings],
    }
    if result.placeholder:
        payload["placeholder"] = True
    elif result.reason:
        payload["message"] = result.reason
    return payload


@router.get("/bookings/{booking_id}")
def get_booking(
    booking_id: str,
    _user: PortalUser = Depends(get_current_user),
    pipeline: BookingPipeline = Depends(get_pipeline),
    deadline: Optional[float] = Depends(get_deadline),
) -> dict:
    booking = pipeline.get_booking(booking_id, deadline=deadline)
    return {"success": True, "booking": booking.model_dump(mode="json")}


@router.get("/bookings/{booking_id}/documents/{document_type}")
def get_document(
    booking_id: str,
    document_type: str,
    user: PortalUser = Depends(get_current_user),
    pipeline: BookingPipeline = Depends(get_pipeline),
    deadline: Optional[float] = Depends(get_deadline),
) -> dict:
    document = pipeline.get_document(booking_id, document_type, user.profile(), deadline=deadline)
    return {"success": True, "document": document.model_dump(mode="json", by_alias=True)}


@router.get("/bookings/{booking_id}/messages")
def list_messages(
    booking_id: str,
    _user: PortalUser = Depends(get_current_user),
    store: MessageStore = Depends(get_message_store),
) -> dict:
    messages = store.list_for_booking(booking_id)
    return {"success": True, "messages": [m.to_json() for m in messages]}


@router.post("/bookings/{booking_id}/messages")
def post_message(
    booking_id: str,
    body: MessageIn,
    user: PortalUser = Depends(get_current_user),
    store: MessageStore = Depends(get_message_store),
) -> dict:
    if not body.message.strip():
        raise ValidationError("Message is required")
    message = store.add(booking_id, body.user_id or user.id, body.message)
    return {"success": True, "message": message.to_json()}
