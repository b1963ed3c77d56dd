"""Parsers for the upstream's paginated response envelopes.

The upstream returns pages in one of three shapes:
1. a bare JSON array of records (cursor, if any, in the x-next-cursor header)
2. an object with a named collection (e.g. "jobs") and a sibling next_cursor
3. a single record object standing for a one-item page
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from .constants import CURSOR_FIELD, CURSOR_HEADER, DEFAULT_COLLECTION_KEYS

logger = logging.getLogger(__name__)


def _clean_cursor(value: Any) -> Optional[str]:
    if value is None:
        return None
    cursor = str(value).strip()
    return cursor or None


def extract_cursor(payload: Any, headers: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Return the next-page cursor from the body, else the response header."""
    if isinstance(payload, Mapping):
        cursor = _clean_cursor(payload.get(CURSOR_FIELD))
        if cursor:
            return cursor
    if headers is not None:
        return _clean_cursor(headers.get(CURSOR_HEADER))
    return None


def _records_from_sequence(items: Sequence[Any]) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    for item in items:
        if isinstance(item, Mapping):
            records.append(dict(item))
        else:
            logger.warning("Skipping non-object item in upstream page: %r", item)
    return records


def extract_records(
    payload: Any,
    collection_keys: Sequence[str] = DEFAULT_COLLECTION_KEYS,
) -> list[dict[str, Any]]:
    """Flatten one page body into records, preserving arrival order."""
    if payload is None:
        return []
    if isinstance(payload, list):
        return _records_from_sequence(payload)
    if isinstance(payload, Mapping):
        for key in collection_keys:
            items = payload.get(key)
            if isinstance(items, list):
                return _records_from_sequence(items)
        record = {k: v for k, v in payload.items() if k != CURSOR_FIELD}
        return [record] if record else []
    logger.warning("Unexpected upstream page body type: %s", type(payload).__name__)
    return []


def split_page(
    payload: Any,
    headers: Optional[Mapping[str, str]] = None,
    collection_keys: Sequence[str] = DEFAULT_COLLECTION_KEYS,
) -> tuple[list[dict[str, Any]], Optional[str]]:
    """Return (records, next_cursor) for one page."""
    return extract_records(payload, collection_keys), extract_cursor(payload, headers)
