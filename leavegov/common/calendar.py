"""Working-day arithmetic shared by routing and balance calculations."""

from __future__ import annotations

from datetime import date, timedelta
from typing import AbstractSet, Optional

# Saturday (5) and Sunday (6)
WEEKEND_DAYS = frozenset({5, 6})


def working_days_between(
    start: date,
    end: date,
    holidays: Optional[AbstractSet[date]] = None,
) -> int:
    """Count Monday–Friday dates in the inclusive range ``[start, end]``.

    ``holidays`` is an optional set of dates to exclude as well; callers pass
    ``settings.holiday_dates`` which is empty unless a calendar is configured.
    An inverted range counts as zero days.
    """
    if start > end:
        return 0

    holidays = holidays or frozenset()
    total_days = (end - start).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * 5

    current = start + timedelta(days=full_weeks * 7)
    for _ in range(remainder):
        if current.weekday() not in WEEKEND_DAYS:
            count += 1
        current += timedelta(days=1)

    if holidays:
        count -= sum(
            1 for h in holidays
            if start <= h <= end and h.weekday() not in WEEKEND_DAYS
        )
    return count
