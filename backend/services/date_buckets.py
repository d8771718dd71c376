"""Calendar helpers for analytics bucketing.

Buckets are gapless and ordered: every month (or year) between ``start`` and
``end`` inclusive gets exactly one bucket, whether or not it holds activity.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from zoneinfo import ZoneInfo

from app.config import get_settings

MIN_YEAR = 1900
MAX_YEAR = 2100


class Granularity(str, Enum):
    """Bucket size for timelines."""

    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class DateBucket:
    """One month or year of the analytics window."""

    key: str
    label: str
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def today_local() -> date:
    """Current date in the configured portal time zone."""
    return datetime.now(ZoneInfo(get_settings().timezone)).date()


def month_start(day: date) -> date:
    return day.replace(day=1)


def month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def add_months(day: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    last_day = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(day.day, last_day))


def months_in_window(start: date, end: date) -> int:
    """Number of calendar months touched by ``[start, end]`` (at least 1)."""
    months = (end.year - start.year) * 12 + (end.month - start.month) + 1
    return max(1, months)


def build_buckets(start: date, end: date, granularity: Granularity) -> list[DateBucket]:
    """Build the ordered bucket sequence covering ``[start, end]``.

    Month keys look like ``2025-01`` with label ``01/2025``; year keys and
    labels are the four-digit year. An inverted window yields no buckets.
    """
    buckets: list[DateBucket] = []
    if start > end:
        return buckets

    if granularity == Granularity.YEAR:
        for year in range(start.year, end.year + 1):
            buckets.append(
                DateBucket(
                    key=f"{year:04d}",
                    label=f"{year:04d}",
                    start=date(year, 1, 1),
                    end=date(year, 12, 31),
                )
            )
        return buckets

    cursor = month_start(start)
    last = month_start(end)
    while cursor <= last:
        buckets.append(
            DateBucket(
                key=f"{cursor.year:04d}-{cursor.month:02d}",
                label=f"{cursor.month:02d}/{cursor.year:04d}",
                start=cursor,
                end=month_end(cursor),
            )
        )
        cursor = add_months(cursor, 1)
    return buckets


def bucket_index(buckets: list[DateBucket]) -> dict[str, int]:
    """Map bucket keys to their position for O(1) event placement."""
    return {bucket.key: i for i, bucket in enumerate(buckets)}


def bucket_key(day: date, granularity: Granularity) -> str:
    if granularity == Granularity.YEAR:
        return f"{day.year:04d}"
    return f"{day.year:04d}-{day.month:02d}"
