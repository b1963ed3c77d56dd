"""Tests for BookingPipeline."""

from typing import Any

import httpx
import pytest

from booking_portal.errors import NotFound, UpstreamCancelled, UpstreamUnreachable, ValidationError
from booking_portal.models.document import Invoice, Quote
from booking_portal.models.profile import CustomerProfile
from booking_portal.pipeline import BookingPipeline, FailurePolicy, placeholder_bookings

from conftest import ScriptedUpstream, bare_page, collection_page

JOBS = "/job.json"
CONTACTS = "/jobcontact.json"
EMAIL = "johnsmith@example.com"


@pytest.fixture
def pipeline(upstream: ScriptedUpstream) -> BookingPipeline:
    return BookingPipeline(upstream.fetcher())


def _job(uuid: str, **extra: Any) -> dict[str, Any]:
    return {"uuid": uuid, "active": 1, **extra}


class TestListJobs:
    """Tests for the raw jobs passthrough."""

    def test_returns_raw_records(self, upstream: ScriptedUpstream, pipeline: BookingPipeline) -> None:
        upstream.queue(JOBS, collection_page([_job("a", custom="x")], cursor="c2"), collection_page([_job("b")]))

        jobs = pipeline.list_jobs()

        assert [j["uuid"] for j in jobs] == ["a", "b"]
        assert jobs[0]["custom"] == "x"
        assert upstream.requests_to(JOBS)[0].url.params["$filter"] == "active eq 1"

    def test_failure_propagates(self, upstream: ScriptedUpstream, pipeline: BookingPipeline) -> None:
        upstream.queue(JOBS, httpx.Response(500))
        with pytest.raises(UpstreamUnreachable):
            pipeline.list_jobs()


class TestListBookings:
    """Tests for the customer booking list."""

    def test_joins_contacts_to_active_jobs(self, upstream: ScriptedUpstream, pipeline: BookingPipeline) -> None:
        upstream.queue(CONTACTS, bare_page([{"job_uuid": "job-1"}, {"job_uuid": "job-3"}]))
        upstream.queue(
            JOBS,
            bare_page(
                [
                    _job("job-1", generated_job_id="101", job_description="Service"),
                    _job("job-2", generated_job_id="102"),
                    _job("job-3", generated_job_id="103"),
                ]
            ),
        )

        result = pipeline.list_bookings(EMAIL)

        assert not result.placeholder
        assert [b.uuid for b in result.bookings] == ["job-1", "job-3"]
        assert result.bookings[0].name == "Service"
        assert upstream.requests_to(CONTACTS)[0].url.params["$filter"] == f"email eq '{EMAIL}'"

    def test_job_repeated_across_pages_listed_once(
        self, upstream: ScriptedUpstream, pipeline: BookingPipeline
    ) -> None:
        upstream.queue(CONTACTS, bare_page([{"job_uuid": "j1"}, {"job_uuid": "j2"}]))
        upstream.queue(
            JOBS,
            bare_page([_job("j1", status="Quote"), _job("j2")], cursor="c2"),
            bare_page([_job("j1", status="Work Order")]),
        )

        result = pipeline.list_bookings(EMAIL)

        assert [b.uuid for b in result.bookings] == ["j1", "j2"]
        assert result.bookings[0].status == "Quote"

    def test_blank_email_skips_upstream(self, upstream: ScriptedUpstream, pipeline: BookingPipeline) -> None:
        result = pipeline.list_bookings("  ")
        assert result.bookings == []
        assert result.reason == "Customer email not configured"
        assert upstream.requests == []

    def test_no_contacts_is_empty_not_placeholder(self, upstream: ScriptedUpstream, pipeline: BookingPipeline) -> None:
        upstream.queue(CONTACTS, bare_page([]))

        result = pipeline.list_bookings(EMAIL)

        assert result.bookings == []
        assert not result.placeholder
        assert "No job contacts" in result.reason
        assert upstream.requests_to(JOBS) == []

    def test_contacts_without_job_ids_skip_job_fetch(
        self, upstream: ScriptedUpstream, pipeline: BookingPipeline
    ) -> None:
        upstream.queue(CONTACTS, bare_page([{"uuid": "c1"}]))
        result = pipeline.list_bookings(EMAIL)
        assert result.bookings == []
        assert upstream.requests_to(JOBS) == []

    def test_contact_failure_degrades(self, upstream: ScriptedUpstream, pipeline: BookingPipeline) -> None:
        upstream.queue(CONTACTS, httpx.Response(503))

        result = pipeline.list_bookings(EMAIL)

        assert result.placeholder
        assert result.bookings[0].uuid == "booking-1"
        assert result.bookings[0].job_number == "RW-2024-001"
        assert "503" in result.reason

    def test_job_failure_degrades(self, upstream: ScriptedUpstream, pipeline: BookingPipeline) -> None:
        upstream.queue(CONTACTS, bare_page([{"job_uuid": "job-1"}]))
        upstream.queue(JOBS, httpx.Response(500))
        result = pipeline.list_bookings(EMAIL)
        assert result.placeholder

    def test_propagate_policy_raises(self, upstream: ScriptedUpstream) -> None:
        pipeline = BookingPipeline(
            upstream.fetcher(),
            bookings_failure_policy=FailurePolicy.PROPAGATE_FAILURE,
        )
        upstream.queue(CONTACTS, httpx.Response(503))
        with pytest.raises(UpstreamUnreachable):
            pipeline.list_bookings(EMAIL)

    def test_cancelled_degrades(self, upstream: ScriptedUpstream) -> None:
        pipeline = BookingPipeline(upstream.fetcher(clock=lambda: 100.0))
        result = pipeline.list_bookings(EMAIL, deadline=50.0)
        assert result.placeholder
        assert upstream.requests == []

    def test_cancelled_propagates_under_strict_policy(self, upstream: ScriptedUpstream) -> None:
        pipeline = BookingPipeline(
            upstream.fetcher(clock=lambda: 100.0),
            bookings_failure_policy=FailurePolicy.PROPAGATE_FAILURE,
        )
        with pytest.raises(UpstreamCancelled):
            pipeline.list_bookings(EMAIL, deadline=50.0)


class TestGetBooking:
    """Tests for single booking lookup."""

    def test_detail(self, upstream: ScriptedUpstream, pipeline: BookingPipeline, sample_job: dict) -> None:
        upstream.queue(JOBS, bare_page([sample_job]))

        detail = pipeline.get_booking(sample_job["uuid"])

        assert detail.uuid == sample_job["uuid"]
        assert detail.billing_address == "PO Box 1, Brisbane QLD 4001"
        params = upstream.requests_to(JOBS)[0].url.params
        assert params["$filter"] == f"uuid eq '{sample_job['uuid']}'"

    def test_not_found(self, upstream: ScriptedUpstream, pipeline: BookingPipeline) -> None:
        upstream.queue(JOBS, bare_page([]))
        with pytest.raises(NotFound, match="Booking not found"):
            pipeline.get_booking("missing")

    def test_upstream_failure_propagates(self, upstream: ScriptedUpstream, pipeline: BookingPipeline) -> None:
        upstream.queue(JOBS, httpx.Response(502))
        with pytest.raises(UpstreamUnreachable):
            pipeline.get_booking("job-1")

    def test_blank_id(self, pipeline: BookingPipeline) -> None:
        with pytest.raises(ValidationError):
            pipeline.get_booking(" ")


class TestGetDocument:
    """Tests for quote and invoice retrieval."""

    def test_invoice(
        self,
        upstream: ScriptedUpstream,
        pipeline: BookingPipeline,
        sample_job: dict,
        customer: CustomerProfile,
    ) -> None:
        upstream.queue(JOBS, bare_page([sample_job]))
        doc = pipeline.get_document(sample_job["uuid"], "invoice", customer)
        assert isinstance(doc, Invoice)
        assert doc.document_number == "INV-1042"
        assert doc.customer.name == "John Smith"

    def test_quote(self, upstream: ScriptedUpstream, pipeline: BookingPipeline, sample_job: dict) -> None:
        upstream.queue(JOBS, bare_page([sample_job]))
        doc = pipeline.get_document(sample_job["uuid"], "quote", None)
        assert isinstance(doc, Quote)

    def test_invalid_kind_makes_no_upstream_call(
        self, upstream: ScriptedUpstream, pipeline: BookingPipeline
    ) -> None:
        with pytest.raises(ValidationError, match="Invalid document type"):
            pipeline.get_document("job-1", "receipt", None)
        assert upstream.requests == []

    def test_job_not_found(self, upstream: ScriptedUpstream, pipeline: BookingPipeline) -> None:
        upstream.queue(JOBS, bare_page([]))
        with pytest.raises(NotFound, match="Job not found"):
            pipeline.get_document("missing", "quote", None)


class TestPlaceholderBookings:
    def test_shape(self) -> None:
        bookings = placeholder_bookings()
        assert len(bookings) == 1
        assert bookings[0].vehicle.make == "Toyota"
        assert bookings[0].scheduled_start is not None
