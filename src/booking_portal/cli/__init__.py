"""Command-line interface for the booking portal."""
