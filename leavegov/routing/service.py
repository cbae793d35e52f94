"""Routing resolution service — composes the planner and resolver into plans.

Business logic:
  - Routing plans are recomputed on every call; directory membership and
    overrides can change between calls, so nothing is cached.
  - Overrides are validated structurally and fully replace default levels.
  - Permission checks are delegated to the configured ApprovalPolicy.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import AbstractSet, Optional, Sequence, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leavegov.common.audit import create_audit_entry, utcnow
from leavegov.common.calendar import working_days_between
from leavegov.common.constants import (
    ALL_STATUSES,
    ENTITY_APPROVAL_ROUTING,
    AuditAction,
    DateRange,
    LeaveStatus,
    LeaveType,
)
from leavegov.common.exceptions import NotFoundException, UpstreamUnavailableException
from leavegov.common.pagination import PaginationMeta
from leavegov.config import settings
from leavegov.directory.models import Employee
from leavegov.directory.service import EmployeeDirectory
from leavegov.leave.models import LeaveRequest
from leavegov.leave.service import LeaveRequestStore, submitted_since
from leavegov.routing.models import ApprovalRoutingOverride
from leavegov.routing.planner import plan_levels, validate_override_levels
from leavegov.routing.policy import ApprovalPolicy, get_approval_policy
from leavegov.routing.resolver import ApproverResolver
from leavegov.routing.schemas import (
    ApprovalLevel,
    EmployeeBrief,
    LeaveRequestBrief,
    LevelApprovers,
    PendingApprovalList,
    PendingApprovalOut,
    RoutingOverrideOut,
    RoutingPlan,
)

logger = logging.getLogger(__name__)


class RoutingService:
    """Async approval-routing operations for one database session."""

    def __init__(
        self,
        db: AsyncSession,
        *,
        policy: Optional[ApprovalPolicy] = None,
        holidays: Optional[AbstractSet] = None,
    ) -> None:
        self.db = db
        self.directory = EmployeeDirectory(db)
        self.requests = LeaveRequestStore(db)
        self.resolver = ApproverResolver(self.directory)
        self.policy = policy or get_approval_policy()
        self.holidays = settings.holiday_dates if holidays is None else holidays

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    def _leave_request_brief(self, req: LeaveRequest) -> LeaveRequestBrief:
        out = LeaveRequestBrief.model_validate(req)
        out.working_days = working_days_between(req.start_date, req.end_date, self.holidays)
        return out

    async def _get_override(self, employee_id: uuid.UUID) -> Optional[ApprovalRoutingOverride]:
        try:
            return await self.db.get(ApprovalRoutingOverride, employee_id)
        except SQLAlchemyError:
            logger.error("Routing override lookup failed for %s", employee_id, exc_info=True)
            raise UpstreamUnavailableException("Approval routing store")

    async def _build_plan(
        self,
        employee: Employee,
        leave_request: Optional[LeaveRequest],
    ) -> RoutingPlan:
        override = await self._get_override(employee.id)
        override_levels = (
            [ApprovalLevel.model_validate(lvl) for lvl in override.levels]
            if override is not None
            else None
        )

        levels = plan_levels(leave_request, override_levels, self.holidays)

        # A single AsyncSession cannot run queries concurrently, so levels
        # are resolved one after another.
        approvers_by_level: dict[int, LevelApprovers] = {}
        for level in levels:
            candidates = await self.resolver.resolve_approvers(level.role, employee)
            approvers_by_level[level.level] = LevelApprovers(
                level=level.level,
                role=level.role,
                required=level.required,
                description=level.description,
                approvers=[EmployeeBrief.model_validate(c) for c in candidates],
            )

        return RoutingPlan(
            employee_id=employee.id,
            employee=EmployeeBrief.model_validate(employee),
            leave_request=(
                self._leave_request_brief(leave_request) if leave_request is not None else None
            ),
            levels=levels,
            approvers_by_level=approvers_by_level,
            override_active=override_levels is not None,
        )

    # ─────────────────────────────────────────────────────────────────
    # Resolution
    # ─────────────────────────────────────────────────────────────────

    async def resolve(
        self,
        employee_id: uuid.UUID,
        leave_request_id: Optional[uuid.UUID] = None,
    ) -> RoutingPlan:
        """Compute the full routing plan for an employee and optional request."""
        employee = await self.directory.get_by_id(employee_id)

        leave_request = None
        if leave_request_id is not None:
            leave_request = await self.requests.get(leave_request_id)
            if leave_request.employee_id != employee.id:
                raise NotFoundException("LeaveRequest", str(leave_request_id))

        return await self._build_plan(employee, leave_request)

    # ─────────────────────────────────────────────────────────────────
    # Overrides
    # ─────────────────────────────────────────────────────────────────

    async def get_override(self, employee_id: uuid.UUID) -> Optional[RoutingOverrideOut]:
        override = await self._get_override(employee_id)
        if override is None:
            return None
        return RoutingOverrideOut.model_validate(override)

    async def set_override(
        self,
        employee_id: uuid.UUID,
        levels: Sequence[ApprovalLevel],
        updated_by: uuid.UUID,
    ) -> RoutingOverrideOut:
        """Upsert the employee's custom routing; applies from the next resolve."""
        await self.directory.get_by_id(employee_id)
        ordered = validate_override_levels(levels)
        payload = [lvl.model_dump(mode="json") for lvl in ordered]

        override = await self._get_override(employee_id)
        old_values = {"levels": override.levels} if override is not None else None
        if override is None:
            override = ApprovalRoutingOverride(employee_id=employee_id)
            self.db.add(override)
        override.levels = payload
        override.updated_by = updated_by
        override.updated_at = utcnow()

        await create_audit_entry(
            self.db,
            action=AuditAction.update_approval_routing.value,
            entity_type=ENTITY_APPROVAL_ROUTING,
            entity_id=employee_id,
            actor_id=updated_by,
            old_values=old_values,
            new_values={"levels": payload},
        )
        await self.db.flush()
        logger.info(
            "Approval routing override set for %s by %s (%d levels)",
            employee_id, updated_by, len(payload),
        )
        return RoutingOverrideOut.model_validate(override)

    async def clear_override(self, employee_id: uuid.UUID, updated_by: uuid.UUID) -> None:
        override = await self._get_override(employee_id)
        if override is None:
            raise NotFoundException("ApprovalRoutingOverride", str(employee_id))

        await create_audit_entry(
            self.db,
            action=AuditAction.clear_approval_routing.value,
            entity_type=ENTITY_APPROVAL_ROUTING,
            entity_id=employee_id,
            actor_id=updated_by,
            old_values={"levels": override.levels},
        )
        await self.db.delete(override)
        await self.db.flush()
        logger.info("Approval routing override cleared for %s by %s", employee_id, updated_by)

    # ─────────────────────────────────────────────────────────────────
    # Permissions
    # ─────────────────────────────────────────────────────────────────

    def can_approve(self, plan: RoutingPlan, approver: Optional[Employee]) -> bool:
        return self.policy.can_approve(plan, approver)

    async def check_permission(
        self,
        employee_id: uuid.UUID,
        approver_id: uuid.UUID,
        leave_request_id: Optional[uuid.UUID] = None,
    ) -> bool:
        plan = await self.resolve(employee_id, leave_request_id)
        approver = await self.directory.get_by_id(approver_id)
        allowed = self.can_approve(plan, approver)
        if not allowed:
            logger.warning(
                "Approver %s may not act on leave for %s (policy=%s)",
                approver_id, employee_id, self.policy.name,
            )
        return allowed

    async def list_pending_approvals(
        self,
        *,
        approver_id: Optional[uuid.UUID] = None,
        status: Union[LeaveStatus, str, None] = LeaveStatus.pending,
        leave_type: Optional[LeaveType] = None,
        department: Optional[str] = None,
        date_range: DateRange = DateRange.all,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 50,
        now: Optional[datetime] = None,
    ) -> PendingApprovalList:
        """One page of requests matching the filters that ``approver_id`` may act on.

        ``status="all"`` disables the status filter. Without an approver every
        matching request is eligible, so only the requested page gets plans.
        """
        approver = (
            await self.directory.get_by_id(approver_id) if approver_id is not None else None
        )
        status_filter = None if status in (None, ALL_STATUSES) else LeaveStatus(status)
        requests = await self.requests.find(
            status=status_filter,
            leave_type=leave_type,
            department=department,
            submitted_from=submitted_since(date_range, now or utcnow()),
            search=search.strip() if search and search.strip() else None,
        )
        employees = await self.directory.get_many([r.employee_id for r in requests])
        requests = [r for r in requests if r.employee_id in employees]

        offset = (page - 1) * page_size
        if approver is None:
            total = len(requests)
            window = requests[offset:offset + page_size]
            plans = [await self._build_plan(employees[r.employee_id], r) for r in window]
        else:
            eligible: list[RoutingPlan] = []
            for req in requests:
                plan = await self._build_plan(employees[req.employee_id], req)
                if self.can_approve(plan, approver):
                    eligible.append(plan)
            total = len(eligible)
            plans = eligible[offset:offset + page_size]

        return PendingApprovalList(
            data=[
                PendingApprovalOut(
                    leave_request=plan.leave_request,
                    employee=plan.employee,
                    routing=plan,
                )
                for plan in plans
            ],
            meta=PaginationMeta.build(page, page_size, total),
        )
