"""Cursor pagination over upstream list endpoints."""

import logging
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

import httpx

from booking_portal.errors import UpstreamCancelled, UpstreamUnreachable
from booking_portal.models.raw import RawRecord

from .client import UpstreamClient
from .constants import CURSOR_PARAM, DEFAULT_COLLECTION_KEYS
from .envelopes import split_page

logger = logging.getLogger(__name__)


class FetchErrorKind(str, Enum):
    UNREACHABLE = "unreachable"
    CANCELLED = "cancelled"


@dataclass
class FetchError:
    """Why pagination stopped early. partial is True when records were already collected."""

    kind: FetchErrorKind
    message: str
    partial: bool
    attempts: int
    status_code: Optional[int] = None
    last_exception: Optional[BaseException] = None

    def to_exception(self) -> UpstreamUnreachable:
        if self.kind == FetchErrorKind.CANCELLED:
            return UpstreamCancelled(self.message)
        return UpstreamUnreachable(self.message)


@dataclass
class FetchResult:
    """
    Records accumulated across pages. On failure, records holds whatever
    arrived before the error; the caller decides whether to use it.
    """

    records: list[RawRecord] = field(default_factory=list)
    pages: int = 0
    attempts: int = 0
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PaginatedFetcher:
    """
    Walks an upstream list endpoint page by page, following next-page cursors.
    Pages are requested strictly in sequence; each cursor comes from the prior page.
    Errors are returned on the FetchResult, never raised. No retries are attempted.

    A deadline aborts the in-flight request through its timeout. cancel_event is
    only checked before and after each page: setting it mid-request stops the walk
    once that response arrives, keeping the records it carried. If that was the
    last page, the walk completes normally.
    """

    def __init__(
        self,
        client: UpstreamClient,
        *,
        collection_keys: Sequence[str] = DEFAULT_COLLECTION_KEYS,
        max_pages: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = client
        self._clock = clock
        self._collection_keys = tuple(collection_keys)
        self._max_pages = max_pages

    def fetch_all(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        params: Optional[dict[str, str]] = None,
        *,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> FetchResult:
        """
        Fetch every page of endpoint and return the records in arrival order.
        deadline: time.monotonic() value after which the in-flight request is aborted
        cancel_event: set by the caller to stop before the next page
        """
        result = FetchResult()
        cursor: Optional[str] = None

        while True:
            if cancel_event is not None and cancel_event.is_set():
                return self._fail(result, FetchErrorKind.CANCELLED, f"Cancelled before page {result.pages + 1}")

            timeout = self._timeout_for(deadline)
            if timeout is not None and timeout <= 0:
                return self._fail(result, FetchErrorKind.CANCELLED, f"Deadline passed before page {result.pages + 1}")

            page_params = dict(params or {})
            if cursor:
                page_params[CURSOR_PARAM] = cursor

            result.attempts += 1
            try:
                resp = self._client.request(method, endpoint, params=page_params, json=body, timeout=timeout)
                payload = resp.json() if resp.content else None
            except httpx.TimeoutException as e:
                kind = FetchErrorKind.CANCELLED if self._deadline_passed(deadline) else FetchErrorKind.UNREACHABLE
                return self._fail(result, kind, f"Timed out fetching {endpoint}", exc=e)
            except httpx.HTTPStatusError as e:
                return self._fail(
                    result,
                    FetchErrorKind.UNREACHABLE,
                    f"HTTP {e.response.status_code} from {endpoint}",
                    status_code=e.response.status_code,
                    exc=e,
                )
            except httpx.RequestError as e:
                return self._fail(result, FetchErrorKind.UNREACHABLE, f"Request to {endpoint} failed: {e}", exc=e)
            except ValueError as e:
                return self._fail(result, FetchErrorKind.UNREACHABLE, f"Invalid JSON from {endpoint}", exc=e)

            records, cursor = split_page(payload, resp.headers, self._collection_keys)
            result.pages += 1
            result.records.extend(RawRecord(data=r) for r in records)
            logger.debug("Page %d of %s: %d records, next cursor %s", result.pages, endpoint, len(records), cursor)

            if not cursor:
                break
            if cancel_event is not None and cancel_event.is_set():
                return self._fail(result, FetchErrorKind.CANCELLED, f"Cancelled after page {result.pages}")
            if self._max_pages is not None and result.pages >= self._max_pages:
                logger.warning("Stopping %s at max_pages=%d with cursor outstanding", endpoint, self._max_pages)
                break

        logger.info("Fetched %d records from %s in %d page(s)", len(result.records), endpoint, result.pages)
        return result

    def _timeout_for(self, deadline: Optional[float]) -> Optional[float]:
        """Per-request timeout capped at the time left before deadline."""
        if deadline is None:
            return None
        return min(self._client.timeout, deadline - self._clock())

    def _deadline_passed(self, deadline: Optional[float]) -> bool:
        return deadline is not None and self._clock() >= deadline

    def _fail(
        self,
        result: FetchResult,
        kind: FetchErrorKind,
        message: str,
        *,
        status_code: Optional[int] = None,
        exc: Optional[BaseException] = None,
    ) -> FetchResult:
        result.error = FetchError(
            kind=kind,
            message=message,
            partial=bool(result.records),
            attempts=result.attempts,
            status_code=status_code,
            last_exception=exc,
        )
        logger.warning(
            "Upstream fetch %s after %d attempt(s), %d record(s) collected: %s",
            kind.value,
            result.attempts,
            len(result.records),
            message,
        )
        return result
