"""Booking pipeline orchestration: fetch → resolve → normalize → compose."""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional, Union

from booking_portal.config import Settings
from booking_portal.contacts import ContactResolver, ResolveErrorKind
from booking_portal.documents.composer import DocumentComposer
from booking_portal.errors import NotFound, PortalError, UpstreamUnreachable, ValidationError
from booking_portal.models.booking import BookingDetail, CanonicalBooking, Vehicle
from booking_portal.models.document import DocumentKind, Invoice, Quote
from booking_portal.models.profile import CustomerProfile
from booking_portal.models.raw import RawRecord
from booking_portal.normalization.jobs import JobNormalizer
from booking_portal.upstream.client import UpstreamClient, odata_eq
from booking_portal.upstream.constants import ACTIVE_JOBS_FILTER, FILTER_PARAM, JOB_ENDPOINT
from booking_portal.upstream.fetcher import FetchResult, PaginatedFetcher

logger = logging.getLogger(__name__)


class FailurePolicy(str, Enum):
    """What an endpoint does when the upstream cannot be reached."""

    DEGRADE_TO_PLACEHOLDER = "degrade_to_placeholder"
    PROPAGATE_FAILURE = "propagate_failure"


@dataclass
class BookingList:
    """Bookings for one customer. placeholder=True marks demo data served on upstream failure."""

    bookings: list[CanonicalBooking] = field(default_factory=list)
    placeholder: bool = False
    reason: Optional[str] = None


def placeholder_bookings(now: Optional[datetime] = None) -> list[CanonicalBooking]:
    """Fixed demo booking set returned when the upstream is unavailable."""
    now = now or datetime.now(timezone.utc)
    return [
        CanonicalBooking(
            uuid="booking-1",
            job_number="RW-2024-001",
            name="Roadworthy Inspection - Toyota Camry",
            status="Scheduled",
            scheduled_start=(now + timedelta(days=2)).isoformat(),
            vehicle=Vehicle(make="Toyota", model="Camry", year="2020", rego="ABC123", vin="JT1234567890"),
        )
    ]


class BookingPipeline:
    """
    Serves the portal's booking operations from the upstream API.
    The booking list degrades to placeholder data by default; the jobs passthrough,
    booking detail and documents always propagate upstream failures.
    """

    def __init__(
        self,
        fetcher: PaginatedFetcher,
        *,
        resolver: Optional[ContactResolver] = None,
        normalizer: Optional[JobNormalizer] = None,
        composer: Optional[DocumentComposer] = None,
        bookings_failure_policy: FailurePolicy = FailurePolicy.DEGRADE_TO_PLACEHOLDER,
    ):
        self._fetcher = fetcher
        self._resolver = resolver or ContactResolver(fetcher)
        self._normalizer = normalizer or JobNormalizer()
        self._composer = composer or DocumentComposer(normalizer=self._normalizer)
        self.bookings_failure_policy = bookings_failure_policy

    @classmethod
    def from_settings(cls, settings: Settings) -> "BookingPipeline":
        return cls(PaginatedFetcher(UpstreamClient.from_settings(settings)))

    def list_jobs(
        self,
        *,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> list[dict[str, Any]]:
        """Active upstream jobs, unmodified. Upstream failure propagates."""
        result = self._fetch_active_jobs(deadline=deadline, cancel_event=cancel_event)
        if result.error is not None:
            raise result.error.to_exception()
        return [r.data for r in result.records]

    def list_bookings(
        self,
        customer_email: str,
        *,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> BookingList:
        """
        Bookings linked to customer_email: resolve contact → job uuids,
        fetch active jobs, keep the linked ones and normalize them.
        """
        email = (customer_email or "").strip()
        if not email:
            return BookingList(reason="Customer email not configured")

        resolved = self._resolver.resolve_job_ids(email, deadline=deadline, cancel_event=cancel_event)
        if resolved.error is not None:
            if resolved.error.kind == ResolveErrorKind.EMPTY:
                return BookingList(reason=resolved.error.message)
            return self._bookings_upstream_failure(resolved.error.to_exception())

        if not resolved.job_ids:
            logger.info("Contacts for %s carry no job uuids", email)
            return BookingList()

        jobs = self._fetch_active_jobs(deadline=deadline, cancel_event=cancel_event)
        if jobs.error is not None:
            return self._bookings_upstream_failure(jobs.error.to_exception())

        # The same job can arrive on more than one page; keep its first occurrence.
        linked: list[RawRecord] = []
        seen: set[str] = set()
        for record in jobs.records:
            uuid = str(record.data.get("uuid") or "")
            if uuid in resolved.job_ids and uuid not in seen:
                seen.add(uuid)
                linked.append(record)
        logger.info(
            "Matched %d of %d active jobs to %d linked job id(s)",
            len(linked),
            len(jobs.records),
            len(resolved.job_ids),
        )
        return BookingList(bookings=[self._normalizer.normalize(r) for r in linked])

    def get_booking(
        self,
        booking_id: str,
        *,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> BookingDetail:
        """Detail view of one job by uuid. Raises NotFound or the upstream error."""
        raw = self._fetch_job(booking_id, "Booking not found", deadline=deadline, cancel_event=cancel_event)
        return self._normalizer.normalize_detail(raw)

    def get_document(
        self,
        booking_id: str,
        kind: Union[DocumentKind, str],
        customer: Optional[CustomerProfile],
        *,
        now: Optional[datetime] = None,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Union[Quote, Invoice]:
        """Quote or invoice for one job. The document type is validated before any upstream call."""
        doc_kind = self._composer.parse_kind(kind)
        raw = self._fetch_job(booking_id, "Job not found", deadline=deadline, cancel_event=cancel_event)
        return self._composer.compose(doc_kind, raw, customer, now=now)

    def _fetch_active_jobs(
        self,
        *,
        deadline: Optional[float],
        cancel_event: Optional[threading.Event],
    ) -> FetchResult:
        return self._fetcher.fetch_all(
            JOB_ENDPOINT,
            params={FILTER_PARAM: ACTIVE_JOBS_FILTER},
            deadline=deadline,
            cancel_event=cancel_event,
        )

    def _fetch_job(
        self,
        booking_id: str,
        not_found_message: str,
        *,
        deadline: Optional[float],
        cancel_event: Optional[threading.Event],
    ) -> RawRecord:
        job_id = (booking_id or "").strip()
        if not job_id:
            raise ValidationError("Booking id is required")
        result = self._fetcher.fetch_all(
            JOB_ENDPOINT,
            params={FILTER_PARAM: odata_eq("uuid", job_id)},
            deadline=deadline,
            cancel_event=cancel_event,
        )
        if result.error is not None:
            raise result.error.to_exception()
        if not result.records:
            raise NotFound(not_found_message)
        return result.records[0]

    def _bookings_upstream_failure(self, error: PortalError) -> BookingList:
        if self.bookings_failure_policy == FailurePolicy.PROPAGATE_FAILURE:
            raise error
        if not isinstance(error, UpstreamUnreachable):
            raise error
        logger.warning("Upstream unavailable for booking list (%s); serving placeholder bookings", error)
        return BookingList(bookings=placeholder_bookings(), placeholder=True, reason=str(error))
