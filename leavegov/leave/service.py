"""Leave request store adapter — id lookup and range queries."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leavegov.common.constants import DateRange, LeaveStatus, LeaveType
from leavegov.common.exceptions import NotFoundException, UpstreamUnavailableException
from leavegov.directory.models import Employee
from leavegov.leave.models import LeaveRequest

logger = logging.getLogger(__name__)


def submitted_since(date_range: DateRange, now: datetime) -> Optional[datetime]:
    """Lower bound on ``submitted_at`` for an inbox date window.

    ``today`` and ``month`` start at UTC midnight of the current day / first
    of the month; ``week`` is a rolling seven days.
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_range == DateRange.today:
        return midnight
    if date_range == DateRange.week:
        return now - timedelta(days=7)
    if date_range == DateRange.month:
        return midnight.replace(day=1)
    return None


class LeaveRequestStore:
    """Read-only access to leave requests."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, request_id: uuid.UUID) -> LeaveRequest:
        try:
            leave_request = await self.db.get(LeaveRequest, request_id)
        except SQLAlchemyError:
            logger.error("Leave request lookup failed for %s", request_id, exc_info=True)
            raise UpstreamUnavailableException("Leave request store")
        if leave_request is None:
            raise NotFoundException("LeaveRequest", str(request_id))
        return leave_request

    async def find(
        self,
        *,
        employee_id: Optional[uuid.UUID] = None,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
        department: Optional[str] = None,
        start_from: Optional[date] = None,
        start_to: Optional[date] = None,
        submitted_from: Optional[datetime] = None,
        search: Optional[str] = None,
    ) -> Sequence[LeaveRequest]:
        """Range query over requests, newest submission first.

        Every filter is optional; ``start_from``/``start_to`` bound the
        request's start date inclusively. ``search`` matches the employee
        name, the leave type or the reason, case-insensitively.
        """
        query = select(LeaveRequest)
        if employee_id is not None:
            query = query.where(LeaveRequest.employee_id == employee_id)
        if status is not None:
            query = query.where(LeaveRequest.status == status)
        if leave_type is not None:
            query = query.where(LeaveRequest.leave_type == leave_type)
        if department is not None or search:
            query = query.join(Employee, Employee.id == LeaveRequest.employee_id)
        if department is not None:
            query = query.where(Employee.department == department)
        if search:
            term = search.strip().lower()
            conditions = [
                Employee.name.ilike(f"%{term}%"),
                LeaveRequest.reason.ilike(f"%{term}%"),
            ]
            matching_types = [t for t in LeaveType if term in t.value]
            if matching_types:
                conditions.append(LeaveRequest.leave_type.in_(matching_types))
            query = query.where(or_(*conditions))
        if start_from is not None:
            query = query.where(LeaveRequest.start_date >= start_from)
        if start_to is not None:
            query = query.where(LeaveRequest.start_date <= start_to)
        if submitted_from is not None:
            query = query.where(LeaveRequest.submitted_at >= submitted_from)
        query = query.order_by(LeaveRequest.submitted_at.desc())

        try:
            result = await self.db.execute(query)
        except SQLAlchemyError:
            logger.error("Leave request query failed", exc_info=True)
            raise UpstreamUnavailableException("Leave request store")
        return result.scalars().all()

    async def current_year_requests(
        self,
        employee_id: uuid.UUID,
        today: date,
    ) -> Sequence[LeaveRequest]:
        """Requests starting on or after January 1st of ``today``'s year."""
        return await self.find(
            employee_id=employee_id,
            start_from=date(today.year, 1, 1),
        )
