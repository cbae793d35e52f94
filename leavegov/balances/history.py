"""Leave balance history — merges the adjustment ledger with audit-log events."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from leavegov.balances.models import BalanceHistoryEntry
from leavegov.balances.schemas import (
    EmployeeSummary,
    HistoryEntry,
    HistoryEntryOut,
    HistoryOut,
    HistorySummary,
)
from leavegov.balances.service import BalanceLedgerService
from leavegov.common.audit import (
    AuditLog,
    as_utc,
    create_audit_entry,
    list_audit_entries,
    utcnow,
)
from leavegov.common.constants import (
    ALL_LEAVE_TYPES,
    ENTITY_LEAVE_BALANCE,
    RECENT_ACTIVITY_DAYS,
    AuditAction,
)
from leavegov.common.exceptions import ValidationException
from leavegov.config import settings
from leavegov.directory.service import EmployeeDirectory

logger = logging.getLogger(__name__)

ADJUSTMENT_ACTION = "adjustment"

_AUDIT_DESCRIPTIONS = {
    AuditAction.leave_balance_create.value: "Leave balance record created",
    AuditAction.leave_balance_recalculate.value: "Leave balance recalculated",
    AuditAction.leave_balance_reset.value: "Leave balance reset to initial state",
}


def describe_audit(log: AuditLog) -> str:
    if log.action in _AUDIT_DESCRIPTIONS:
        return _AUDIT_DESCRIPTIONS[log.action]
    values = log.new_values or {}
    if log.action == AuditAction.leave_balance_adjust.value:
        amount = values.get("adjustment", 0)
        sign = "+" if amount > 0 else ""
        return (
            f"Leave balance adjusted: {sign}{amount} days of "
            f"{values.get('leave_type', ALL_LEAVE_TYPES)} leave"
        )
    return log.action.replace("_", " ").lower()


def describe_adjustment(leave_type: str, amount: int) -> str:
    # Zero-amount "all" rows are the markers written by a reset.
    if leave_type == ALL_LEAVE_TYPES and amount == 0:
        return "Balance reset"
    verb = "Added" if amount > 0 else "Deducted"
    return f"{verb} {abs(amount)} days of {leave_type} leave"


def summarise(entries: list[HistoryEntry], now: datetime) -> HistorySummary:
    """Adjustment totals and trailing-30-day activity over merged entries."""
    summary = HistorySummary()
    cutoff = now - timedelta(days=RECENT_ACTIVITY_DAYS)
    for entry in entries:
        if entry.type == "adjustment":
            amount = (entry.details or {}).get("adjustment", 0)
            summary.total_adjustments += 1
            if amount > 0:
                summary.total_added += amount
            else:
                summary.total_deducted += abs(amount)
            summary.adjustments_by_type[entry.leave_type] = (
                summary.adjustments_by_type.get(entry.leave_type, 0) + 1
            )
        if as_utc(entry.date) > cutoff:
            summary.recent_activity += 1
    return summary


class HistoryReader:
    """Unified, time-ordered balance history for one employee."""

    def __init__(self, db: AsyncSession, ledger: Optional[BalanceLedgerService] = None) -> None:
        self.db = db
        self.directory = EmployeeDirectory(db)
        self.ledger = ledger or BalanceLedgerService(db)

    async def get_history(
        self,
        employee_id: uuid.UUID,
        *,
        leave_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        action: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> HistoryOut:
        limit = min(limit or settings.HISTORY_DEFAULT_LIMIT, settings.HISTORY_MAX_LIMIT)
        start = as_utc(start) if start is not None else None
        end = as_utc(end) if end is not None else None

        employee = await self.directory.get_by_id(employee_id)
        current = await self.ledger.get_current_balance(employee_id)

        entries: list[HistoryEntry] = []

        if current is not None and (action is None or action.lower() in ADJUSTMENT_ACTION):
            for adj in current.adjustments:
                adjusted_at = as_utc(adj.adjusted_at)
                if leave_type and adj.leave_type != leave_type:
                    continue
                if start is not None and adjusted_at < start:
                    continue
                if end is not None and adjusted_at > end:
                    continue
                entries.append(HistoryEntry(
                    type="adjustment",
                    date=adjusted_at,
                    leave_type=adj.leave_type,
                    action=ADJUSTMENT_ACTION,
                    details={
                        "adjustment": adj.amount,
                        "reason": adj.reason,
                        "admin_id": str(adj.admin_id) if adj.admin_id else None,
                    },
                    description=describe_adjustment(adj.leave_type, adj.amount),
                ))

        logs = await list_audit_entries(
            self.db,
            entity_type=ENTITY_LEAVE_BALANCE,
            entity_id=employee_id,
            action_contains=action,
            created_from=start,
            created_to=end,
        )
        for log in logs:
            details = log.new_values or {}
            log_type = details.get("leave_type", ALL_LEAVE_TYPES)
            if leave_type and log_type != leave_type:
                continue
            entries.append(HistoryEntry(
                type="audit",
                date=as_utc(log.created_at),
                leave_type=log_type,
                action=log.action,
                details=details or None,
                description=describe_audit(log),
            ))

        entries.sort(key=lambda e: e.date, reverse=True)
        summary = summarise(entries, utcnow())

        return HistoryOut(
            employee=EmployeeSummary.model_validate(employee),
            current_balance=current,
            history=entries[:limit],
            summary=summary,
            total_records=len(entries),
        )

    async def record_entry(
        self,
        employee_id: uuid.UUID,
        *,
        leave_type: str = ALL_LEAVE_TYPES,
        action: str,
        details: Optional[dict[str, Any]] = None,
        admin_id: Optional[uuid.UUID] = None,
    ) -> HistoryEntryOut:
        """Store an admin history note.

        An ``adjustment`` entry carrying ``details.adjustment`` is applied to
        the ledger through the same invariant-checked path as direct
        adjustments.
        """
        await self.directory.get_by_id(employee_id)
        details = details or {}

        if action == ADJUSTMENT_ACTION and details.get("adjustment") is not None:
            if leave_type == ALL_LEAVE_TYPES:
                raise ValidationException(
                    {"leave_type": ["A specific leave type is required for adjustments."]}
                )
            try:
                amount = int(details["adjustment"])
            except (TypeError, ValueError):
                raise ValidationException(
                    {"details.adjustment": ["Adjustment must be a whole number of days."]}
                )
            await self.ledger.apply_adjustment(
                employee_id, leave_type, amount, details.get("reason"), admin_id,
            )

        entry = BalanceHistoryEntry(
            employee_id=employee_id,
            leave_type=leave_type,
            action=action,
            details=details,
            admin_id=admin_id,
            created_at=utcnow(),
        )
        self.db.add(entry)
        await create_audit_entry(
            self.db,
            action=AuditAction.leave_balance_history.value,
            entity_type=ENTITY_LEAVE_BALANCE,
            entity_id=employee_id,
            actor_id=admin_id,
            new_values={"leave_type": leave_type, "action": action, **details},
        )
        logger.info("Recorded %s history entry for %s", action, employee_id)
        return HistoryEntryOut.model_validate(entry)
