"""Candidate field extractors and first-match-wins fallback chains."""

from collections.abc import Mapping, Sequence
from typing import Any, Callable, Optional

from booking_portal.upstream.constants import ZERO_DATE

Extractor = Callable[[Mapping[str, Any]], Optional[Any]]
Chain = Sequence[Extractor]


def is_blank(value: Any) -> bool:
    """None, whitespace-only strings and empty containers count as absent."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (Mapping, list, tuple)):
        return len(value) == 0
    return False


def is_sentinel_or_absent(value: Any) -> bool:
    """Absent, or the upstream's all-zero "not set" date."""
    if is_blank(value):
        return True
    return isinstance(value, str) and value.strip() == ZERO_DATE


def field(name: str) -> Extractor:
    """Value of record[name] when present and non-blank."""

    def extract(record: Mapping[str, Any]) -> Optional[Any]:
        value = record.get(name)
        return None if is_blank(value) else value

    extract.__name__ = f"field_{name}"
    return extract


def date_field(name: str) -> Extractor:
    """Like field(), but the zero date is treated as absent."""

    def extract(record: Mapping[str, Any]) -> Optional[Any]:
        value = record.get(name)
        return None if is_sentinel_or_absent(value) else value

    extract.__name__ = f"date_{name}"
    return extract


def nested(parent: str, name: str) -> Extractor:
    """Value of record[parent][name] when parent is a mapping."""

    def extract(record: Mapping[str, Any]) -> Optional[Any]:
        sub = record.get(parent)
        if not isinstance(sub, Mapping):
            return None
        value = sub.get(name)
        return None if is_blank(value) else value

    extract.__name__ = f"nested_{parent}_{name}"
    return extract


def first_line(extractor: Extractor) -> Extractor:
    """First non-blank line of a multi-line text value."""

    def extract(record: Mapping[str, Any]) -> Optional[Any]:
        value = extractor(record)
        if value is None:
            return None
        for line in str(value).splitlines():
            if line.strip():
                return line.strip()
        return None

    extract.__name__ = f"first_line_{getattr(extractor, '__name__', 'value')}"
    return extract


def first_match(record: Mapping[str, Any], chain: Chain, default: Any = None) -> Any:
    """Apply extractors in order; the first non-None result wins."""
    for extractor in chain:
        value = extractor(record)
        if value is not None:
            return value
    return default


def first_text(record: Mapping[str, Any], chain: Chain, default: Optional[str] = None) -> Optional[str]:
    """first_match coerced to str (upstream sometimes sends numbers)."""
    value = first_match(record, chain)
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def as_date(value: Any) -> Optional[str]:
    """Sentinel-filtered date string, or None."""
    if is_sentinel_or_absent(value):
        return None
    return str(value)


def date_part(value: Any) -> Optional[str]:
    """Calendar date of an upstream 'YYYY-MM-DD HH:MM:SS' value (no time component)."""
    text = as_date(value)
    if text is None:
        return None
    return text.strip().split(" ")[0].split("T")[0]
