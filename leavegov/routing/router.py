"""Approval routing router — plans, overrides, permission checks, approval inbox."""


import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leavegov.common.constants import DateRange, LeaveType
from leavegov.common.pagination import PaginationParams
from leavegov.database import get_db
from leavegov.routing.schemas import (
    CanApproveOut,
    CanApproveRequest,
    PendingApprovalList,
    RoutingAck,
    RoutingOverrideUpdate,
    RoutingPlan,
)
from leavegov.routing.service import RoutingService

router = APIRouter(prefix="", tags=["approval-routing"])


def get_routing_service(db: AsyncSession = Depends(get_db)) -> RoutingService:
    return RoutingService(db)


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=RoutingPlan)
async def get_routing(
    employee_id: uuid.UUID = Query(..., description="Employee whose leave is being routed"),
    leave_request_id: Optional[uuid.UUID] = Query(None),
    service: RoutingService = Depends(get_routing_service),
):
    """Resolve approval levels and candidate approvers for an employee."""
    return await service.resolve(employee_id, leave_request_id)


# ── PUT / ───────────────────────────────────────────────────────────

@router.put("", response_model=RoutingAck)
async def update_routing(
    body: RoutingOverrideUpdate,
    service: RoutingService = Depends(get_routing_service),
):
    """Upsert a custom approval chain; replaces the default levels."""
    await service.set_override(body.employee_id, body.levels, body.updated_by)
    return RoutingAck(message="Approval routing updated successfully")


# ── DELETE /{employee_id} ───────────────────────────────────────────

@router.delete("/{employee_id}", response_model=RoutingAck)
async def clear_routing(
    employee_id: uuid.UUID,
    updated_by: uuid.UUID = Query(...),
    service: RoutingService = Depends(get_routing_service),
):
    """Remove a custom approval chain; default levels apply again."""
    await service.clear_override(employee_id, updated_by)
    return RoutingAck(message="Approval routing override removed")


# ── POST /can-approve ───────────────────────────────────────────────

@router.post("/can-approve", response_model=CanApproveOut)
async def can_approve(
    body: CanApproveRequest,
    service: RoutingService = Depends(get_routing_service),
):
    """Check whether an approver may act on an employee's leave."""
    allowed = await service.check_permission(
        body.employee_id, body.approver_id, body.leave_request_id,
    )
    return CanApproveOut(can_approve=allowed, policy=service.policy.name)


# ── GET /requests ───────────────────────────────────────────────────

@router.get("/requests", response_model=PendingApprovalList)
async def list_requests(
    approver_id: Optional[uuid.UUID] = Query(None),
    status: Literal["pending", "approved", "rejected", "all"] = Query("pending"),
    leave_type: Optional[LeaveType] = Query(None),
    department: Optional[str] = Query(None),
    date_range: DateRange = Query(DateRange.all, description="Submission window"),
    search: Optional[str] = Query(
        None, max_length=100, description="Employee name, leave type or reason",
    ),
    pagination: PaginationParams = Depends(),
    service: RoutingService = Depends(get_routing_service),
):
    """Leave requests awaiting action, filtered to what the approver may act on."""
    return await service.list_pending_approvals(
        approver_id=approver_id,
        status=status,
        leave_type=leave_type,
        department=department,
        date_range=date_range,
        search=search,
        page=pagination.page,
        page_size=pagination.page_size,
    )
