"""Approval level planning — which roles must sign off on a leave request.

Default chain (working days exclude weekends and configured holidays):

    level 1  immediate_supervisor   always
    level 2  department_manager     days > 5  or maternity/paternity
    level 3  hr_manager             days > 10 or maternity/paternity
    level 4  senior_management      days > 20

A per-employee override replaces the chain wholesale.
"""

from __future__ import annotations

from datetime import date
from typing import AbstractSet, Any, Optional, Protocol, Sequence

from leavegov.common.calendar import working_days_between
from leavegov.common.constants import (
    APPROVER_RULES,
    DEPARTMENT_MANAGER_THRESHOLD,
    HR_MANAGER_THRESHOLD,
    PARENTAL_LEAVE_TYPES,
    SENIOR_MANAGEMENT_THRESHOLD,
    ApprovalRole,
)
from leavegov.common.exceptions import ValidationException
from leavegov.routing.schemas import ApprovalLevel


class LeaveWindow(Protocol):
    leave_type: Any
    start_date: date
    end_date: date


_PARENTAL_VALUES = frozenset(t.value for t in PARENTAL_LEAVE_TYPES)


def _level(number: int, role: ApprovalRole) -> ApprovalLevel:
    return ApprovalLevel(
        level=number,
        role=role,
        required=True,
        description=APPROVER_RULES[role].description,
    )


def plan_levels(
    leave_request: Optional[LeaveWindow] = None,
    override_levels: Optional[Sequence[ApprovalLevel]] = None,
    holidays: Optional[AbstractSet[date]] = None,
) -> list[ApprovalLevel]:
    """Return the ordered approval levels for a (possibly absent) request."""
    if override_levels:
        return list(override_levels)

    if leave_request is None:
        return [_level(1, ApprovalRole.immediate_supervisor)]

    days = working_days_between(
        leave_request.start_date, leave_request.end_date, holidays,
    )
    leave_type = getattr(leave_request.leave_type, "value", leave_request.leave_type)
    is_parental = leave_type in _PARENTAL_VALUES

    levels = [_level(1, ApprovalRole.immediate_supervisor)]
    if days > DEPARTMENT_MANAGER_THRESHOLD or is_parental:
        levels.append(_level(2, ApprovalRole.department_manager))
    if days > HR_MANAGER_THRESHOLD or is_parental:
        levels.append(_level(3, ApprovalRole.hr_manager))
    if days > SENIOR_MANAGEMENT_THRESHOLD:
        levels.append(_level(4, ApprovalRole.senior_management))
    return levels


def validate_override_levels(levels: Sequence[ApprovalLevel]) -> list[ApprovalLevel]:
    """Structural check for override chains; returns them sorted by level.

    Levels must be non-empty, unique, and contiguous starting at 1.
    """
    if not levels:
        raise ValidationException({"levels": ["At least one approval level is required."]})

    numbers = [lvl.level for lvl in levels]
    errors: list[str] = []
    if len(set(numbers)) != len(numbers):
        errors.append("Approval levels must not repeat.")
    if sorted(set(numbers)) != list(range(1, len(set(numbers)) + 1)):
        errors.append("Approval levels must be contiguous and start at 1.")
    if errors:
        raise ValidationException({"levels": errors})

    return sorted(levels, key=lambda lvl: lvl.level)
