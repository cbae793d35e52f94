"""Balance ledger service — entitlement lifecycle, adjustments, derived balances.

Business logic:
  - Entitlement records are created lazily, once per employee, from the
    default accrual table and the employee's years of service
  - Balances are recomputed on every read from the current year's requests
  - Adjustments are applied with a single conditional UPDATE so concurrent
    corrections cannot both pass the non-negative check
  - Every adjustment is appended to the ledger and mirrored to the audit log
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import AbstractSet, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavegov.balances.calculator import (
    compute_current_balances,
    initial_category_balances,
    tally_usage,
    years_of_service,
)
from leavegov.balances.models import BalanceAdjustment, CategoryBalance, LeaveEntitlement
from leavegov.balances.schemas import AdjustmentOut, BalanceAlertOut, EntitlementOut
from leavegov.common.audit import create_audit_entry, utcnow
from leavegov.common.constants import (
    ALL_LEAVE_TYPES,
    ENTITY_LEAVE_BALANCE,
    AuditAction,
    LeaveType,
)
from leavegov.common.exceptions import (
    ConflictError,
    InsufficientBalanceException,
    NotFoundException,
    UpstreamUnavailableException,
    ValidationException,
)
from leavegov.config import settings
from leavegov.directory.models import Employee
from leavegov.directory.service import EmployeeDirectory
from leavegov.leave.service import LeaveRequestStore

logger = logging.getLogger(__name__)

_PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}


class BalanceLedgerService:
    """Async leave-balance operations for one database session."""

    def __init__(
        self,
        db: AsyncSession,
        *,
        holidays: Optional[AbstractSet] = None,
    ) -> None:
        self.db = db
        self.directory = EmployeeDirectory(db)
        self.requests = LeaveRequestStore(db)
        self.holidays = settings.holiday_dates if holidays is None else holidays

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    async def _load(self, employee_id: uuid.UUID) -> Optional[LeaveEntitlement]:
        """Fetch the entitlement with balances and adjustments, refreshing any
        instance already in the session."""
        try:
            result = await self.db.execute(
                select(LeaveEntitlement)
                .where(LeaveEntitlement.employee_id == employee_id)
                .options(
                    selectinload(LeaveEntitlement.balances),
                    selectinload(LeaveEntitlement.adjustments),
                )
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError:
            logger.error("Entitlement lookup failed for %s", employee_id, exc_info=True)
            raise UpstreamUnavailableException("Leave balance store")
        return result.scalars().first()

    async def _require(self, employee_id: uuid.UUID) -> LeaveEntitlement:
        entitlement = await self._load(employee_id)
        if entitlement is None:
            raise NotFoundException("LeaveEntitlement", str(employee_id))
        return entitlement

    async def _current_year_requests(self, employee_id: uuid.UUID, now: datetime):
        return await self.requests.current_year_requests(employee_id, now.date())

    def _to_out(
        self,
        entitlement: LeaveEntitlement,
        requests,
        now: Optional[datetime] = None,
    ) -> EntitlementOut:
        return EntitlementOut(
            id=entitlement.id,
            employee_id=entitlement.employee_id,
            employment_date=entitlement.employment_date,
            years_of_service=entitlement.years_of_service,
            balances=compute_current_balances(entitlement.balances, requests, self.holidays),
            adjustments=[AdjustmentOut.model_validate(a) for a in entitlement.adjustments],
            created_at=entitlement.created_at,
            updated_at=entitlement.updated_at,
            last_calculated=now,
        )

    # ─────────────────────────────────────────────────────────────────
    # Entitlement lifecycle
    # ─────────────────────────────────────────────────────────────────

    async def get_or_create(self, employee: Employee) -> LeaveEntitlement:
        """Return the employee's entitlement, creating it on first use."""
        existing = await self._load(employee.id)
        if existing is not None:
            return existing

        now = utcnow()
        service_years = years_of_service(employee.employment_date, now)
        entitlement = LeaveEntitlement(
            employee_id=employee.id,
            employment_date=employee.employment_date,
            years_of_service=round(service_years, 2),
            created_at=now,
            updated_at=now,
            balances=[CategoryBalance(**row) for row in initial_category_balances(service_years)],
        )

        try:
            async with self.db.begin_nested():
                self.db.add(entitlement)
        except IntegrityError:
            # Another request created the record first; use theirs.
            winner = await self._load(employee.id)
            if winner is None:
                raise ConflictError("employee_id", employee.id)
            return winner

        await create_audit_entry(
            self.db,
            action=AuditAction.leave_balance_create.value,
            entity_type=ENTITY_LEAVE_BALANCE,
            entity_id=employee.id,
            new_values={"years_of_service": entitlement.years_of_service},
        )
        logger.info(
            "Created leave entitlement for %s (%.2f years of service)",
            employee.id, entitlement.years_of_service,
        )
        return await self._require(employee.id)

    async def get_balances(self, employee_id: uuid.UUID) -> EntitlementOut:
        """Entitlement with used/pending/available recomputed from requests."""
        employee = await self.directory.get_by_id(employee_id)
        entitlement = await self.get_or_create(employee)
        now = utcnow()
        requests = await self._current_year_requests(employee_id, now)
        return self._to_out(entitlement, requests, now)

    async def get_current_balance(self, employee_id: uuid.UUID) -> Optional[EntitlementOut]:
        """Like get_balances but never creates a record."""
        entitlement = await self._load(employee_id)
        if entitlement is None:
            return None
        now = utcnow()
        requests = await self._current_year_requests(employee_id, now)
        return self._to_out(entitlement, requests, now)

    # ─────────────────────────────────────────────────────────────────
    # Adjustments
    # ─────────────────────────────────────────────────────────────────

    async def apply_adjustment(
        self,
        employee_id: uuid.UUID,
        leave_type: LeaveType | str,
        amount: int,
        reason: Optional[str],
        admin_id: Optional[uuid.UUID],
    ) -> EntitlementOut:
        """Apply a signed manual correction to one category.

        Raises InsufficientBalanceException, leaving the ledger unchanged,
        when the category's current available balance plus ``amount`` would
        be negative.
        """
        leave_type = getattr(leave_type, "value", leave_type)
        entitlement = await self._require(employee_id)
        category = next((c for c in entitlement.balances if c.leave_type == leave_type), None)
        if category is None:
            raise ValidationException(
                {"leave_type": [f"Leave type {leave_type} not found in entitlement."]}
            )

        now = utcnow()
        requests = await self._current_year_requests(employee_id, now)
        stats = tally_usage(requests, self.holidays).get(leave_type)
        consumed = (stats.used + stats.pending) if stats else 0

        # Compare-and-set: the guard is evaluated against the row as stored
        # at UPDATE time, not against the value read above.
        try:
            result = await self.db.execute(
                update(CategoryBalance)
                .where(
                    CategoryBalance.id == category.id,
                    CategoryBalance.available + amount - consumed >= 0,
                )
                .values(
                    available=CategoryBalance.available + amount,
                    adjusted=CategoryBalance.adjusted + amount,
                )
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError:
            logger.error("Balance adjustment failed for %s", employee_id, exc_info=True)
            raise UpstreamUnavailableException("Leave balance store")

        if result.rowcount == 0:
            current = await self._load(employee_id)
            fresh = next(c for c in current.balances if c.leave_type == leave_type)
            available = fresh.available - consumed
            logger.warning(
                "Rejected %+d day %s adjustment for %s: available %d",
                amount, leave_type, employee_id, available,
            )
            raise InsufficientBalanceException(leave_type, available, amount)

        self.db.add(
            BalanceAdjustment(
                entitlement_id=entitlement.id,
                leave_type=leave_type,
                amount=amount,
                reason=reason,
                admin_id=admin_id,
                adjusted_at=now,
            )
        )
        entitlement.updated_at = now
        await create_audit_entry(
            self.db,
            action=AuditAction.leave_balance_adjust.value,
            entity_type=ENTITY_LEAVE_BALANCE,
            entity_id=employee_id,
            actor_id=admin_id,
            old_values={"leave_type": leave_type, "available": category.available - consumed},
            new_values={"leave_type": leave_type, "adjustment": amount, "reason": reason},
        )
        logger.info(
            "Applied %+d day %s adjustment for %s by %s",
            amount, leave_type, employee_id, admin_id,
        )

        updated = await self._require(employee_id)
        return self._to_out(updated, requests, now)

    async def reset(self, employee_id: uuid.UUID, admin_id: uuid.UUID) -> EntitlementOut:
        """Recompute accrual from the employment date and discard adjustments.

        The adjustment trail itself is kept; a zero-amount ``all`` marker is
        appended so the reset shows up in history.
        """
        entitlement = await self._require(employee_id)
        now = utcnow()
        service_years = years_of_service(entitlement.employment_date, now)
        fresh = {row["leave_type"]: row for row in initial_category_balances(service_years)}

        for category in entitlement.balances:
            row = fresh.pop(category.leave_type, None)
            if row is None:
                continue
            category.total_earned = row["total_earned"]
            category.carried_forward = row["carried_forward"]
            category.adjusted = 0
            category.available = row["available"]
        for row in fresh.values():
            self.db.add(CategoryBalance(entitlement_id=entitlement.id, **row))

        entitlement.years_of_service = round(service_years, 2)
        entitlement.updated_at = now
        self.db.add(
            BalanceAdjustment(
                entitlement_id=entitlement.id,
                leave_type=ALL_LEAVE_TYPES,
                amount=0,
                reason="Balance reset",
                admin_id=admin_id,
                adjusted_at=now,
            )
        )
        await create_audit_entry(
            self.db,
            action=AuditAction.leave_balance_reset.value,
            entity_type=ENTITY_LEAVE_BALANCE,
            entity_id=employee_id,
            actor_id=admin_id,
            new_values={"years_of_service": entitlement.years_of_service},
        )
        await self.db.flush()
        logger.info("Reset leave balances for %s by %s", employee_id, admin_id)

        updated = await self._require(employee_id)
        requests = await self._current_year_requests(employee_id, now)
        return self._to_out(updated, requests, now)

    async def recalculate(self, employee_id: uuid.UUID, admin_id: uuid.UUID) -> EntitlementOut:
        """Re-accrue every category from the employee's current employment date.

        Unlike ``reset`` the manual adjustments survive: each category's
        stored available becomes ``total_earned + carried_forward + adjusted``.
        """
        employee = await self.directory.get_by_id(employee_id)
        entitlement = await self._require(employee_id)
        now = utcnow()
        service_years = years_of_service(employee.employment_date, now)
        fresh = {row["leave_type"]: row for row in initial_category_balances(service_years)}
        old_values = {"years_of_service": entitlement.years_of_service}

        for category in entitlement.balances:
            row = fresh.pop(category.leave_type, None)
            if row is None:
                continue
            category.total_earned = row["total_earned"]
            category.carried_forward = row["carried_forward"]
            category.available = row["total_earned"] + row["carried_forward"] + category.adjusted
        for row in fresh.values():
            self.db.add(CategoryBalance(entitlement_id=entitlement.id, **row))

        entitlement.employment_date = employee.employment_date
        entitlement.years_of_service = round(service_years, 2)
        entitlement.updated_at = now
        await create_audit_entry(
            self.db,
            action=AuditAction.leave_balance_recalculate.value,
            entity_type=ENTITY_LEAVE_BALANCE,
            entity_id=employee_id,
            actor_id=admin_id,
            old_values=old_values,
            new_values={"years_of_service": entitlement.years_of_service},
        )
        await self.db.flush()
        logger.info(
            "Recalculated leave balances for %s by %s (%.2f years of service)",
            employee_id, admin_id, entitlement.years_of_service,
        )

        updated = await self._require(employee_id)
        requests = await self._current_year_requests(employee_id, now)
        return self._to_out(updated, requests, now)

    # ─────────────────────────────────────────────────────────────────
    # Alerts
    # ─────────────────────────────────────────────────────────────────

    async def balance_alerts(self, employee_id: uuid.UUID) -> list[BalanceAlertOut]:
        """Low-balance, high-usage and pending-request notices, highest priority first.

        Read-only: an employee without an entitlement record has no alerts.
        """
        employee = await self.directory.get_by_id(employee_id)
        balances = await self.get_current_balance(employee_id)
        if balances is None:
            return []
        now = utcnow()

        alerts: list[BalanceAlertOut] = []
        for leave_type, bal in balances.balances.items():
            entitled = bal.total_earned + bal.carried_forward + bal.adjusted
            if entitled > 0 and bal.available <= settings.LOW_BALANCE_THRESHOLD:
                alerts.append(BalanceAlertOut(
                    type="warning",
                    title="Low Leave Balance",
                    message=(
                        f"{employee.name} has only {bal.available} days of "
                        f"{leave_type} leave remaining"
                    ),
                    employee_id=employee_id,
                    leave_type=leave_type,
                    priority="high",
                    created_at=now,
                ))

            denominator = bal.used + bal.available
            if bal.used > 0 and denominator > 0:
                usage_pct = bal.used / denominator * 100
                if usage_pct >= settings.HIGH_USAGE_PERCENT:
                    alerts.append(BalanceAlertOut(
                        type="info",
                        title="High Leave Usage",
                        message=(
                            f"{employee.name} has used {usage_pct:.1f}% of their "
                            f"{leave_type} leave"
                        ),
                        employee_id=employee_id,
                        leave_type=leave_type,
                        priority="medium",
                        created_at=now,
                    ))

            if bal.pending > 0:
                alerts.append(BalanceAlertOut(
                    type="pending",
                    title="Pending Leave Request",
                    message=(
                        f"{employee.name} has {bal.pending} days of {leave_type} "
                        f"leave pending approval"
                    ),
                    employee_id=employee_id,
                    leave_type=leave_type,
                    priority="medium",
                    created_at=now,
                ))

        alerts.sort(key=lambda a: _PRIORITY_ORDER[a.priority], reverse=True)
        return alerts
