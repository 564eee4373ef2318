"""Calendar helpers shared by event and connection deduplication."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Final

# Accepted ``DateReceived`` layouts besides ISO-8601.
FALLBACK_DATE_FORMATS: Final[tuple[str, ...]] = (
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%Y/%m/%d",
    "%d %B %Y",
    "%B %d, %Y",
)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def to_local_naive(value: datetime) -> datetime:
    """Express ``value`` as a naive wall-clock datetime in the local timezone."""

    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def same_calendar_day(left: datetime | None, right: datetime | None) -> bool:
    """Return whether both timestamps fall on the same local calendar day.

    A missing timestamp never matches anything, including another missing one.
    """

    if left is None or right is None:
        return False
    return to_local_naive(left).date() == to_local_naive(right).date()


def parse_date_received(value: str) -> datetime:
    """Parse a row date into a local naive datetime or raise ``ValueError``."""

    normalized = value.strip()
    if not normalized:
        raise ValueError("Empty date")
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    try:
        return to_local_naive(datetime.fromisoformat(normalized))
    except ValueError:
        pass
    for layout in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(normalized, layout)  # noqa: DTZ007
        except ValueError:
            continue
    raise ValueError(f"Unparseable date: {value!r}")
