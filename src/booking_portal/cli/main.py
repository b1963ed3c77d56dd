"""Main CLI entry point."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any


def main(argv: list[str] | None = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = argparse.ArgumentParser(prog="booking-portal", description="Customer booking portal")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind host (default: BOOKING_PORTAL_HOST or 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (default: PORT or 3001)")

    # jobs
    jobs_parser = subparsers.add_parser("jobs", help="Print active upstream jobs as JSON")
    jobs_parser.add_argument("--output", type=Path, default=None, help="Write JSON to file (default: stdout)")

    # bookings
    bookings_parser = subparsers.add_parser("bookings", help="Print normalized bookings for a customer")
    bookings_parser.add_argument("--email", required=True, help="Customer email linked on upstream job contacts")
    bookings_parser.add_argument("--output", type=Path, default=None, help="Write JSON to file (default: stdout)")

    # booking
    booking_parser = subparsers.add_parser("booking", help="Print one booking's detail")
    booking_parser.add_argument("booking_id", help="Upstream job uuid")
    booking_parser.add_argument("--output", type=Path, default=None, help="Write JSON to file (default: stdout)")

    # document
    document_parser = subparsers.add_parser("document", help="Print a quote or invoice for a booking")
    document_parser.add_argument("booking_id", help="Upstream job uuid")
    document_parser.add_argument("--type", dest="document_type", required=True, choices=["quote", "invoice"])
    document_parser.add_argument("--name", default="", help="Customer name on the document")
    document_parser.add_argument("--phone", default="", help="Customer phone on the document")
    document_parser.add_argument("--email", default="", help="Customer email on the document")
    document_parser.add_argument("--output", type=Path, default=None, help="Write JSON to file (default: stdout)")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from booking_portal.config import Settings
    from booking_portal.errors import PortalError

    settings = Settings.from_env()
    try:
        if args.command == "serve":
            _run_serve(args, settings)
        elif args.command == "jobs":
            _run_jobs(args, settings)
        elif args.command == "bookings":
            _run_bookings(args, settings)
        elif args.command == "booking":
            _run_booking(args, settings)
        elif args.command == "document":
            _run_document(args, settings)
        else:
            parser.print_help()
    except PortalError as e:
        raise SystemExit(f"{type(e).__name__}: {e}")


def _emit(data: Any, output: Path | None) -> None:
    text = json.dumps(data, indent=2, default=str)
    if output:
        output.write_text(text, encoding="utf-8")
        print(f"Wrote {output}", file=sys.stderr)
    else:
        print(text)


def _run_serve(args: argparse.Namespace, settings) -> None:
    """Run serve command."""
    import uvicorn

    from booking_portal.api.app import create_app_from_settings

    app = create_app_from_settings(settings)
    uvicorn.run(app, host=args.host or settings.host, port=args.port or settings.port)


def _run_jobs(args: argparse.Namespace, settings) -> None:
    """Run jobs command."""
    from booking_portal.pipeline import BookingPipeline

    jobs = BookingPipeline.from_settings(settings).list_jobs()
    _emit(jobs, args.output)


def _run_bookings(args: argparse.Namespace, settings) -> None:
    """Run bookings command. Placeholder results are flagged on stderr."""
    from booking_portal.pipeline import BookingPipeline

    result = BookingPipeline.from_settings(settings).list_bookings(args.email)
    if result.placeholder:
        print(f"Upstream unavailable, showing placeholder bookings: {result.reason}", file=sys.stderr)
    elif result.reason:
        print(result.reason, file=sys.stderr)
    _emit([b.model_dump(mode="json") for b in result.bookings], args.output)


def _run_booking(args: argparse.Namespace, settings) -> None:
    """Run booking command."""
    from booking_portal.pipeline import BookingPipeline

    booking = BookingPipeline.from_settings(settings).get_booking(args.booking_id)
    _emit(booking.model_dump(mode="json"), args.output)


def _run_document(args: argparse.Namespace, settings) -> None:
    """Run document command."""
    from booking_portal.models.profile import CustomerProfile
    from booking_portal.pipeline import BookingPipeline

    customer = CustomerProfile(name=args.name, phone=args.phone, email=args.email)
    document = BookingPipeline.from_settings(settings).get_document(
        args.booking_id,
        args.document_type,
        customer,
    )
    _emit(document.model_dump(mode="json", by_alias=True), args.output)


if __name__ == "__main__":
    main()
