"""Approver resolution — maps an approval role to directory candidates."""

from __future__ import annotations

import logging

from leavegov.common.constants import APPROVER_RULES, OWN_DEPARTMENT, ApprovalRole
from leavegov.directory.models import Employee
from leavegov.directory.service import EmployeeDirectory

logger = logging.getLogger(__name__)


class ApproverResolver:
    def __init__(self, directory: EmployeeDirectory) -> None:
        self.directory = directory

    async def resolve_approvers(self, role, employee: Employee) -> list[Employee]:
        """Bounded candidate list for ``role``; unknown roles yield ``[]``."""
        try:
            rule = APPROVER_RULES[ApprovalRole(role)]
        except ValueError:
            logger.warning("Unknown approval role %r for employee %s", role, employee.id)
            return []

        department = rule.department
        if department == OWN_DEPARTMENT:
            if not employee.department:
                return []
            department = employee.department
        return await self.directory.find_by_department_and_designations(
            department,
            rule.designations,
            rule.limit,
            exclude_id=employee.id,
        )
