"""Leave balance arithmetic — accrual at creation and consumption at read time.

Used and pending days are always derived by replaying the current year's
leave requests; they are never stored, so they cannot drift from the
requests they summarise.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import AbstractSet, Iterable, Mapping, Optional

from leavegov.common.calendar import working_days_between
from leavegov.common.constants import (
    DAYS_PER_YEAR_OF_SERVICE,
    DEFAULT_ENTITLEMENTS,
    Entitlement,
    LeaveStatus,
    LeaveType,
)
from leavegov.balances.schemas import CategoryBalanceOut


@dataclass
class Usage:
    used: int = 0
    pending: int = 0


def years_of_service(employment_date: date, now: datetime) -> float:
    """Elapsed service in 365.25-day years (not calendar-aware)."""
    start = datetime.combine(employment_date, time.min, tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (now - start).total_seconds() / (DAYS_PER_YEAR_OF_SERVICE * 86400)


def initial_category_balances(
    service_years: float,
    entitlements: Mapping[LeaveType, Entitlement] = DEFAULT_ENTITLEMENTS,
) -> list[dict]:
    """Accrued balances for a fresh entitlement record, one dict per category."""
    rows: list[dict] = []
    for position, (leave_type, ent) in enumerate(entitlements.items()):
        total_earned = max(0, math.floor(service_years * ent.days_per_year))
        carried_forward = min(
            ent.max_carry_forward,
            max(0, total_earned - ent.days_per_year),
        )
        rows.append(
            {
                "leave_type": leave_type.value,
                "position": position,
                "description": ent.description,
                "total_earned": total_earned,
                "carried_forward": carried_forward,
                "adjusted": 0,
                "available": total_earned + carried_forward,
            }
        )
    return rows


def tally_usage(
    requests: Iterable,
    holidays: Optional[AbstractSet[date]] = None,
) -> dict[str, Usage]:
    """Sum working days per leave type: approved → used, pending → pending."""
    usage: dict[str, Usage] = {}
    for req in requests:
        status = getattr(req.status, "value", req.status)
        if status not in (LeaveStatus.approved.value, LeaveStatus.pending.value):
            continue
        leave_type = getattr(req.leave_type, "value", req.leave_type)
        days = working_days_between(req.start_date, req.end_date, holidays)
        stats = usage.setdefault(leave_type, Usage())
        if status == LeaveStatus.approved.value:
            stats.used += days
        else:
            stats.pending += days
    return usage


def compute_current_balances(
    categories: Iterable,
    current_year_requests: Iterable,
    holidays: Optional[AbstractSet[date]] = None,
) -> dict[str, CategoryBalanceOut]:
    """Overlay derived used/pending onto stored category balances.

    ``available`` is not clamped; a negative value surfaces overcommitment.
    """
    usage = tally_usage(current_year_requests, holidays)
    balances: dict[str, CategoryBalanceOut] = {}
    for cat in categories:
        stats = usage.get(cat.leave_type, Usage())
        balances[cat.leave_type] = CategoryBalanceOut(
            leave_type=cat.leave_type,
            description=cat.description,
            total_earned=cat.total_earned,
            carried_forward=cat.carried_forward,
            adjusted=cat.adjusted,
            used=stats.used,
            pending=stats.pending,
            available=cat.available - stats.used - stats.pending,
        )
    return balances
