"""Error kinds raised by the booking pipeline and mapped to responses by the API."""


class PortalError(Exception):
    """Base class for errors surfaced to portal callers."""


class UpstreamUnreachable(PortalError):
    """Upstream transport failure or non-2xx response."""


class UpstreamCancelled(UpstreamUnreachable):
    """Upstream pagination aborted by the caller's deadline or cancel signal."""


class UpstreamEmpty(PortalError):
    """Upstream answered a well-formed query with zero results."""


class NotFound(PortalError):
    """Requested identifier not present after a successful upstream query."""


class ValidationError(PortalError):
    """Malformed caller input, e.g. an unknown document type."""


class NormalizationError(PortalError):
    """Raw upstream record is missing its mandatory uuid."""
