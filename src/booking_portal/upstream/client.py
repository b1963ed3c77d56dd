"""Thin HTTP client for the upstream field-service REST API."""

from typing import Any, Optional

import httpx

from booking_portal.config import Settings


def odata_escape(value: str) -> str:
    # OData strings are single-quoted; escape single quotes by doubling them.
    return value.replace("'", "''")


def odata_eq(field: str, value: str) -> str:
    """Build an OData equality clause, e.g. email eq 'jo@example.com'."""
    return f"{field} eq '{odata_escape(value)}'"


class UpstreamClient:
    """
    Issues authenticated requests against the upstream base URL.
    Raises httpx errors; callers decide how to report them.
    """

    DEFAULT_HEADERS = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": "booking-portal/0.1",
    }

    def __init__(
        self,
        api_base: str,
        api_key: str,
        *,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            api_base: Upstream base URL, e.g. https://api.servicem8.com/api_1.0
            api_key: Static key sent as X-API-Key
            timeout: Default per-request timeout in seconds
            client: Optional preconfigured httpx client (must carry base_url)
        """
        self.timeout = timeout
        self._client = client or httpx.Client(
            base_url=api_base.rstrip("/"),
            timeout=timeout,
            follow_redirects=True,
            headers={**self.DEFAULT_HEADERS, "X-API-Key": api_key},
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "UpstreamClient":
        return cls(settings.api_base, settings.api_key, timeout=settings.timeout)

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[dict[str, str]] = None,
        json: Any = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send one request and raise for non-2xx status."""
        kwargs: dict[str, Any] = {"params": params}
        if json is not None:
            kwargs["json"] = json
        if timeout is not None:
            kwargs["timeout"] = timeout
        resp = self._client.request(method.upper(), endpoint, **kwargs)
        resp.raise_for_status()
        return resp

    def close(self) -> None:
        self._client.close()
