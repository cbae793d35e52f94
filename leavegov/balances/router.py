"""Leave balance router — balances, adjustments, ledger actions, alerts, history."""


import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leavegov.balances.history import HistoryReader
from leavegov.balances.schemas import (
    BalanceActionRequest,
    BalanceAdjustRequest,
    BalanceAlertOut,
    EntitlementOut,
    HistoryEntryCreate,
    HistoryEntryOut,
    HistoryOut,
)
from leavegov.balances.service import BalanceLedgerService
from leavegov.config import settings
from leavegov.database import get_db

router = APIRouter(prefix="", tags=["leave-balances"])


def get_ledger(db: AsyncSession = Depends(get_db)) -> BalanceLedgerService:
    return BalanceLedgerService(db)


def get_history_reader(db: AsyncSession = Depends(get_db)) -> HistoryReader:
    return HistoryReader(db)


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=EntitlementOut)
async def get_balances(
    employee_id: uuid.UUID = Query(...),
    ledger: BalanceLedgerService = Depends(get_ledger),
):
    """Current balances; the entitlement record is created on first request."""
    return await ledger.get_balances(employee_id)


# ── PUT / ───────────────────────────────────────────────────────────

@router.put("", response_model=EntitlementOut)
async def adjust_balance(
    body: BalanceAdjustRequest,
    ledger: BalanceLedgerService = Depends(get_ledger),
):
    """Apply a manual adjustment. Rejected if the category would go negative."""
    return await ledger.apply_adjustment(
        body.employee_id, body.leave_type, body.adjustment, body.reason, body.admin_id,
    )


# ── POST /actions ───────────────────────────────────────────────────

@router.post("/actions", response_model=EntitlementOut)
async def balance_action(
    body: BalanceActionRequest,
    ledger: BalanceLedgerService = Depends(get_ledger),
):
    """Recalculate or reset an employee's balances."""
    if body.action == "reset":
        return await ledger.reset(body.employee_id, body.admin_id)
    return await ledger.recalculate(body.employee_id, body.admin_id)


# ── GET /alerts ─────────────────────────────────────────────────────

@router.get("/alerts", response_model=list[BalanceAlertOut])
async def balance_alerts(
    employee_id: uuid.UUID = Query(...),
    ledger: BalanceLedgerService = Depends(get_ledger),
):
    """Low-balance, high-usage, and pending-request notices."""
    return await ledger.balance_alerts(employee_id)


# ── GET /history ────────────────────────────────────────────────────

@router.get("/history", response_model=HistoryOut)
async def get_history(
    employee_id: uuid.UUID = Query(...),
    leave_type: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    action: Optional[str] = Query(None),
    limit: int = Query(settings.HISTORY_DEFAULT_LIMIT, ge=1, le=settings.HISTORY_MAX_LIMIT),
    reader: HistoryReader = Depends(get_history_reader),
):
    """Adjustments and audit events, newest first, with a summary."""
    return await reader.get_history(
        employee_id,
        leave_type=leave_type,
        start=start_date,
        end=end_date,
        action=action,
        limit=limit,
    )


# ── POST /history ───────────────────────────────────────────────────

@router.post("/history", response_model=HistoryEntryOut, status_code=201)
async def create_history_entry(
    body: HistoryEntryCreate,
    reader: HistoryReader = Depends(get_history_reader),
):
    """Record a history note; ``adjustment`` entries also adjust the ledger."""
    return await reader.record_entry(
        body.employee_id,
        leave_type=body.leave_type,
        action=body.action,
        details=body.details,
        admin_id=body.admin_id,
    )
