"""Enums and constants for the leave governance engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass


# ── Leave ───────────────────────────────────────────────────────────

class LeaveType(str, enum.Enum):
    annual = "annual"
    sick = "sick"
    personal = "personal"
    maternity = "maternity"
    paternity = "paternity"
    bereavement = "bereavement"


class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# Leave types that always escalate to department + HR approval
PARENTAL_LEAVE_TYPES = frozenset({LeaveType.maternity, LeaveType.paternity})

# Inbox status filter value meaning "any status"
ALL_STATUSES = "all"


class DateRange(str, enum.Enum):
    """Submission-date windows for the approval inbox."""

    today = "today"
    week = "week"
    month = "month"
    all = "all"


@dataclass(frozen=True)
class Entitlement:
    days_per_year: int
    max_carry_forward: int
    description: str


DEFAULT_ENTITLEMENTS: dict[LeaveType, Entitlement] = {
    LeaveType.annual: Entitlement(20, 5, "Annual Leave"),
    LeaveType.sick: Entitlement(10, 0, "Sick Leave"),
    LeaveType.personal: Entitlement(5, 0, "Personal Leave"),
    LeaveType.maternity: Entitlement(90, 0, "Maternity Leave"),
    LeaveType.paternity: Entitlement(14, 0, "Paternity Leave"),
    LeaveType.bereavement: Entitlement(3, 0, "Bereavement Leave"),
}

DAYS_PER_YEAR_OF_SERVICE = 365.25


# ── Approval routing ────────────────────────────────────────────────

class ApprovalRole(str, enum.Enum):
    immediate_supervisor = "immediate_supervisor"
    department_manager = "department_manager"
    hr_manager = "hr_manager"
    senior_management = "senior_management"


@dataclass(frozen=True)
class ApproverRule:
    """Directory query used to find candidate approvers for a role.

    ``department`` semantics: ``"own"`` → the employee's department,
    ``None`` → any department, anything else → that fixed department.
    """

    department: str | None
    designations: tuple[str, ...]
    limit: int
    description: str


HR_DEPARTMENT = "HR"
OWN_DEPARTMENT = "own"

APPROVER_RULES: dict[ApprovalRole, ApproverRule] = {
    ApprovalRole.immediate_supervisor: ApproverRule(
        OWN_DEPARTMENT,
        ("Supervisor", "Team Lead", "Manager"),
        5,
        "Immediate Supervisor Approval",
    ),
    ApprovalRole.department_manager: ApproverRule(
        OWN_DEPARTMENT,
        ("Department Manager", "Manager", "Director"),
        3,
        "Department Manager Approval",
    ),
    ApprovalRole.hr_manager: ApproverRule(
        HR_DEPARTMENT,
        ("HR Manager", "HR Director", "Manager"),
        3,
        "HR Manager Approval",
    ),
    ApprovalRole.senior_management: ApproverRule(
        None,
        ("Director", "VP", "CEO", "CTO", "CFO"),
        5,
        "Senior Management Approval",
    ),
}

# Working-day thresholds above which a role joins the chain
DEPARTMENT_MANAGER_THRESHOLD = 5
HR_MANAGER_THRESHOLD = 10
SENIOR_MANAGEMENT_THRESHOLD = 20


# ── Audit ───────────────────────────────────────────────────────────

class AuditAction(str, enum.Enum):
    update_approval_routing = "UPDATE_APPROVAL_ROUTING"
    clear_approval_routing = "CLEAR_APPROVAL_ROUTING"
    leave_balance_create = "LEAVE_BALANCE_CREATE"
    leave_balance_adjust = "LEAVE_BALANCE_ADJUST"
    leave_balance_reset = "LEAVE_BALANCE_RESET"
    leave_balance_recalculate = "LEAVE_BALANCE_RECALCULATE"
    leave_balance_history = "LEAVE_BALANCE_HISTORY"


ENTITY_APPROVAL_ROUTING = "approval_routing"
ENTITY_LEAVE_BALANCE = "leave_balance"

# Pseudo leave type used for entries that span every category
ALL_LEAVE_TYPES = "all"

RECENT_ACTIVITY_DAYS = 30
