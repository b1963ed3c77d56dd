"""Resolve a customer identifier to the upstream jobs linked to them."""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from booking_portal.errors import PortalError, UpstreamEmpty, ValidationError
from booking_portal.upstream.client import odata_eq
from booking_portal.upstream.constants import (
    CONTACT_EMAIL,
    CONTACT_JOB_UUID,
    FILTER_PARAM,
    JOB_CONTACT_ENDPOINT,
)
from booking_portal.upstream.fetcher import FetchError, FetchErrorKind, PaginatedFetcher

logger = logging.getLogger(__name__)


class ResolveErrorKind(str, Enum):
    UNREACHABLE = "unreachable"
    CANCELLED = "cancelled"
    EMPTY = "empty"


@dataclass
class ResolveError:
    """EMPTY means upstream answered with no linked contacts; the others mean it could not be asked."""

    kind: ResolveErrorKind
    message: str
    fetch_error: Optional[FetchError] = None

    def to_exception(self) -> PortalError:
        if self.fetch_error is not None:
            return self.fetch_error.to_exception()
        return UpstreamEmpty(self.message)


@dataclass
class ResolveResult:
    job_ids: frozenset[str] = frozenset()
    contacts_seen: int = 0
    error: Optional[ResolveError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ContactResolver:
    """
    Two-step join, first half: query the job-contact resource filtered by the
    customer identifier and collect the job uuids of the matching contacts.
    """

    def __init__(
        self,
        fetcher: PaginatedFetcher,
        *,
        endpoint: str = JOB_CONTACT_ENDPOINT,
        filter_field: str = CONTACT_EMAIL,
        job_id_field: str = CONTACT_JOB_UUID,
    ):
        self._fetcher = fetcher
        self._endpoint = endpoint
        self._filter_field = filter_field
        self._job_id_field = job_id_field

    def resolve_job_ids(
        self,
        customer_identifier: str,
        *,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ResolveResult:
        """Return the deduplicated job ids for customer_identifier, or a typed error."""
        identifier = (customer_identifier or "").strip()
        if not identifier:
            raise ValidationError("Customer identifier is required")

        fetched = self._fetcher.fetch_all(
            self._endpoint,
            params={FILTER_PARAM: odata_eq(self._filter_field, identifier)},
            deadline=deadline,
            cancel_event=cancel_event,
        )
        if fetched.error is not None:
            kind = (
                ResolveErrorKind.CANCELLED
                if fetched.error.kind == FetchErrorKind.CANCELLED
                else ResolveErrorKind.UNREACHABLE
            )
            return ResolveResult(
                error=ResolveError(kind=kind, message=fetched.error.message, fetch_error=fetched.error),
            )

        if not fetched.records:
            logger.info("No job contacts linked to %s", identifier)
            return ResolveResult(
                error=ResolveError(
                    kind=ResolveErrorKind.EMPTY,
                    message=f"No job contacts found for {identifier}",
                ),
            )

        job_ids: set[str] = set()
        for contact in fetched.records:
            value = contact.data.get(self._job_id_field)
            if value is None or not str(value).strip():
                continue
            job_ids.add(str(value).strip())

        logger.info(
            "Resolved %d job id(s) from %d contact(s) for %s",
            len(job_ids),
            len(fetched.records),
            identifier,
        )
        return ResolveResult(job_ids=frozenset(job_ids), contacts_seen=len(fetched.records))
