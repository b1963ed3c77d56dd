"""Pytest fixtures for booking-portal tests."""

from collections import defaultdict
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from booking_portal.models.profile import CustomerProfile
from booking_portal.models.raw import RawRecord
from booking_portal.upstream.client import UpstreamClient
from booking_portal.upstream.fetcher import PaginatedFetcher

BASE_URL = "https://upstream.test/api_1.0"
BASE_PATH = "/api_1.0"

Scripted = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class ScriptedUpstream:
    """
    MockTransport handler that serves queued responses per endpoint path, in order.
    A queued callable is invoked with the request (to raise or inspect).
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._queues: dict[str, list[Scripted]] = defaultdict(list)

    def queue(self, path: str, *responses: Scripted) -> "ScriptedUpstream":
        self._queues[path].extend(responses)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix(BASE_PATH)
        queue = self._queues.get(path)
        if not queue:
            return httpx.Response(404, json={"message": f"unscripted {path}"})
        item = queue.pop(0)
        return item(request) if callable(item) else item

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.removeprefix(BASE_PATH) == path]

    def client(self) -> UpstreamClient:
        http = httpx.Client(
            base_url=BASE_URL,
            transport=httpx.MockTransport(self),
            headers={"X-API-Key": "test-key"},
        )
        return UpstreamClient(BASE_URL, "test-key", timeout=5.0, client=http)

    def fetcher(self, **kwargs: Any) -> PaginatedFetcher:
        return PaginatedFetcher(self.client(), **kwargs)


def bare_page(records: list[dict], cursor: Optional[str] = None) -> httpx.Response:
    """Shape 1: JSON array, cursor in the x-next-cursor header."""
    headers = {"x-next-cursor": cursor} if cursor else {}
    return httpx.Response(200, json=records, headers=headers)


def collection_page(records: list[dict], cursor: Optional[str] = None, key: str = "jobs") -> httpx.Response:
    """Shape 2: object with a named collection and sibling next_cursor."""
    body: dict[str, Any] = {key: records}
    if cursor:
        body["next_cursor"] = cursor
    return httpx.Response(200, json=body)


def single_page(record: dict, cursor: Optional[str] = None) -> httpx.Response:
    """Shape 3: a single record object."""
    body = dict(record)
    if cursor:
        body["next_cursor"] = cursor
    return httpx.Response(200, json=body)


@pytest.fixture
def upstream() -> ScriptedUpstream:
    """Fresh scripted upstream per test."""
    return ScriptedUpstream()


@pytest.fixture
def sample_job() -> dict[str, Any]:
    """Upstream job record with the fields the portal reads."""
    return {
        "uuid": "3f2a9c1e-77b0-4d1e-9b7a-2f9e0c1d5a44",
        "active": 1,
        "generated_job_id": "1042",
        "status": "Work Order",
        "job_description": "Roadworthy inspection\nCheck brakes and tyres",
        "work_done_description": "Replaced front brake pads",
        "job_address": "12 Example St, Brisbane QLD 4000",
        "billing_address": "PO Box 1, Brisbane QLD 4001",
        "date": "2024-05-01 00:00:00",
        "work_order_date": "2024-05-03 09:30:00",
        "quote_date": "0000-00-00 00:00:00",
        "completion_date": "0000-00-00 00:00:00",
        "payment_date": "2024-05-05 14:00:00",
        "total_invoice_amount": "220.00",
        "payment_amount": "220.00",
        "payment_method": "Card",
        "contact_uuid": "c0ffee00-0000-4000-8000-000000000001",
        "vehicle": {
            "make": "Toyota",
            "model": "Camry",
            "year": 2020,
            "registration": "ABC123",
            "vin": "JT1234567890",
        },
    }


@pytest.fixture
def raw_job(sample_job: dict[str, Any]) -> RawRecord:
    return RawRecord(data=sample_job)


@pytest.fixture
def customer() -> CustomerProfile:
    return CustomerProfile(name="John Smith", phone="+61756117044", email="johnsmith@example.com")
