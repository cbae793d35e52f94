"""Approval permission strategies.

``RoleMatchedApproval`` is the production check. ``PermissiveApproval``
lets any identified approver act and exists for development environments;
it is only ever selected through ``APPROVAL_POLICY``.
"""

from __future__ import annotations

import abc
from typing import Optional

from leavegov.common.constants import APPROVER_RULES, OWN_DEPARTMENT, ApprovalRole
from leavegov.config import settings
from leavegov.directory.models import Employee
from leavegov.routing.schemas import RoutingPlan


class ApprovalPolicy(abc.ABC):
    name = "base"

    @abc.abstractmethod
    def can_approve(self, plan: RoutingPlan, approver: Optional[Employee]) -> bool:
        """Whether ``approver`` may act on the leave ``plan`` was built for."""


class PermissiveApproval(ApprovalPolicy):
    name = "permissive"

    def can_approve(self, plan: RoutingPlan, approver: Optional[Employee]) -> bool:
        return approver is not None


class RoleMatchedApproval(ApprovalPolicy):
    """Approver must be a candidate for some level, be named explicitly on an
    override level, or hold a designation that satisfies a level's role in
    the department that role is scoped to."""

    name = "role_matched"

    def can_approve(self, plan: RoutingPlan, approver: Optional[Employee]) -> bool:
        if approver is None or approver.id == plan.employee_id:
            return False

        for level in plan.levels:
            resolved = plan.approvers_by_level.get(level.level)
            if resolved and any(a.id == approver.id for a in resolved.approvers):
                return True
            if approver.id in level.approvers:
                return True
            if self._matches_role(level.role, approver, plan.employee.department):
                return True
        return False

    @staticmethod
    def _matches_role(
        role: ApprovalRole,
        approver: Employee,
        employee_department: Optional[str],
    ) -> bool:
        rule = APPROVER_RULES.get(role)
        if rule is None or approver.designation not in rule.designations:
            return False
        if rule.department is None:
            return True
        if rule.department == OWN_DEPARTMENT:
            return bool(employee_department) and approver.department == employee_department
        return approver.department == rule.department


_POLICIES: dict[str, type[ApprovalPolicy]] = {
    PermissiveApproval.name: PermissiveApproval,
    RoleMatchedApproval.name: RoleMatchedApproval,
}


def get_approval_policy(name: Optional[str] = None) -> ApprovalPolicy:
    """Instantiate the policy named by ``name`` or ``settings.APPROVAL_POLICY``."""
    key = (name or settings.APPROVAL_POLICY).lower()
    try:
        return _POLICIES[key]()
    except KeyError:
        raise ValueError(
            f"Unknown APPROVAL_POLICY {key!r}; expected one of {sorted(_POLICIES)}"
        ) from None
