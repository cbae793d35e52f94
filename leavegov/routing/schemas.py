"""Approval routing Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Update / *Request  → request bodies (write)
  - *Out                → response bodies (read)
  - *Brief              → compact embedded representations
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from leavegov.common.constants import ApprovalRole, LeaveStatus, LeaveType
from leavegov.common.pagination import PaginatedResponse


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class EmployeeBrief(BaseModel):
    """Minimal employee info embedded in routing responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    department: Optional[str] = None
    designation: Optional[str] = None


class LeaveRequestBrief(BaseModel):
    """Snapshot of the leave request a plan was computed for."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: LeaveType
    start_date: date
    end_date: date
    status: LeaveStatus
    reason: Optional[str] = None
    submitted_at: datetime
    working_days: int = 0


# ═════════════════════════════════════════════════════════════════════
# Approval levels
# ═════════════════════════════════════════════════════════════════════


class ApprovalLevel(BaseModel):
    """One step in an approval chain."""

    model_config = ConfigDict(from_attributes=True)

    level: int = Field(..., ge=1)
    role: ApprovalRole
    required: bool = True
    description: Optional[str] = None
    approvers: list[uuid.UUID] = Field(
        default_factory=list,
        description="Explicit approver ids (override levels only)",
    )


class LevelApprovers(BaseModel):
    """Candidate approvers resolved for one level."""

    level: int
    role: ApprovalRole
    required: bool = True
    description: Optional[str] = None
    approvers: list[EmployeeBrief] = Field(default_factory=list)


# ═════════════════════════════════════════════════════════════════════
# Routing plan
# ═════════════════════════════════════════════════════════════════════


class RoutingPlan(BaseModel):
    """Ordered approval levels plus candidate approvers for each."""

    employee_id: uuid.UUID
    employee: EmployeeBrief
    leave_request: Optional[LeaveRequestBrief] = None
    levels: list[ApprovalLevel]
    approvers_by_level: dict[int, LevelApprovers]
    override_active: bool = False


class RoutingOverrideUpdate(BaseModel):
    """Payload for upserting an employee's custom routing."""

    employee_id: uuid.UUID
    levels: list[ApprovalLevel] = Field(..., min_length=1)
    updated_by: uuid.UUID


class RoutingOverrideOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: uuid.UUID
    levels: list[ApprovalLevel]
    updated_by: Optional[uuid.UUID] = None
    updated_at: datetime


class RoutingAck(BaseModel):
    success: bool = True
    message: str


# ═════════════════════════════════════════════════════════════════════
# Permission check / approval inbox
# ═════════════════════════════════════════════════════════════════════


class CanApproveRequest(BaseModel):
    employee_id: uuid.UUID
    approver_id: uuid.UUID
    leave_request_id: Optional[uuid.UUID] = None


class CanApproveOut(BaseModel):
    can_approve: bool
    policy: str


class PendingApprovalOut(BaseModel):
    """A leave request awaiting action, with its routing plan."""

    leave_request: LeaveRequestBrief
    employee: EmployeeBrief
    routing: RoutingPlan


class PendingApprovalList(PaginatedResponse[PendingApprovalOut]):
    """One page of the approval inbox."""
