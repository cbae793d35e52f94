"""Read-only employee directory adapter used by routing and balances."""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leavegov.common.exceptions import NotFoundException, UpstreamUnavailableException
from leavegov.directory.models import Employee

logger = logging.getLogger(__name__)


class EmployeeDirectory:
    """Lookups by id and by (department, designation-set)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_id(self, employee_id: uuid.UUID) -> Employee:
        try:
            employee = await self.db.get(Employee, employee_id)
        except SQLAlchemyError:
            logger.error("Employee lookup failed for %s", employee_id, exc_info=True)
            raise UpstreamUnavailableException("Employee directory")
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    async def get_many(self, employee_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, Employee]:
        """Batch lookup; unknown ids are simply absent from the result."""
        if not employee_ids:
            return {}
        try:
            result = await self.db.execute(
                select(Employee).where(Employee.id.in_(list(set(employee_ids))))
            )
        except SQLAlchemyError:
            logger.error("Batch employee lookup failed", exc_info=True)
            raise UpstreamUnavailableException("Employee directory")
        return {emp.id: emp for emp in result.scalars().all()}

    async def find_by_department_and_designations(
        self,
        department: Optional[str],
        designations: Sequence[str],
        limit: int,
        *,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> list[Employee]:
        """Bounded candidate list in store insertion order.

        ``department=None`` searches every department.
        """
        query = select(Employee).where(
            Employee.designation.in_(list(designations)),
            Employee.is_active.is_(True),
        )
        if department is not None:
            query = query.where(Employee.department == department)
        if exclude_id is not None:
            query = query.where(Employee.id != exclude_id)
        query = query.order_by(Employee.created_at, Employee.id).limit(limit)

        try:
            result = await self.db.execute(query)
        except SQLAlchemyError:
            logger.error(
                "Approver search failed (department=%s, designations=%s)",
                department, designations, exc_info=True,
            )
            raise UpstreamUnavailableException("Employee directory")
        return list(result.scalars().all())
