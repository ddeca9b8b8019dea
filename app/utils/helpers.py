"""Helper utilities."""

from datetime import datetime, timezone
from typing import Iterable, List, Optional


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_blank(value: Optional[str]) -> bool:
    """True when a free-text field is missing or whitespace only."""
    return value is None or not value.strip()


def join_name(first_name: str, middle_name: Optional[str], last_name: str) -> str:
    """Join name parts, skipping an empty middle name."""
    parts = [first_name, middle_name, last_name]
    return " ".join(part for part in parts if part)


def format_percentage(count: int, total: int) -> str:
    """Format count/total as a two-decimal percentage string."""
    if total <= 0:
        return "0.00%"
    return f"{count / total * 100:.2f}%"


def unique_ids(ids: Iterable) -> List:
    """Drop duplicate ids while keeping request order."""
    seen = set()
    result = []
    for item in ids:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
