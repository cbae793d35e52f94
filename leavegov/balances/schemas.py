"""Leave balance Pydantic v2 schemas — request / response validation."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from leavegov.common.constants import LeaveType


# ═════════════════════════════════════════════════════════════════════
# Balances
# ═════════════════════════════════════════════════════════════════════


class CategoryBalanceOut(BaseModel):
    """Balance for one leave type with derived used/pending/available."""

    model_config = ConfigDict(from_attributes=True)

    leave_type: str
    description: Optional[str] = None
    total_earned: int
    carried_forward: int
    adjusted: int = 0
    used: int = 0
    pending: int = 0
    available: int


class AdjustmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    leave_type: str
    amount: int
    reason: Optional[str] = None
    admin_id: Optional[uuid.UUID] = None
    adjusted_at: datetime


class EntitlementOut(BaseModel):
    """An employee's entitlement record with current balances."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    employment_date: date
    years_of_service: float
    balances: dict[str, CategoryBalanceOut]
    adjustments: list[AdjustmentOut] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    last_calculated: Optional[datetime] = None


class BalanceAdjustRequest(BaseModel):
    """Manual correction by an administrator."""

    employee_id: uuid.UUID
    leave_type: LeaveType
    adjustment: int = Field(..., description="Signed number of days")
    reason: Optional[str] = Field(None, max_length=1000)
    admin_id: uuid.UUID

    @field_validator("adjustment")
    @classmethod
    def _non_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("Adjustment must be a non-zero number of days")
        return v


class BalanceActionRequest(BaseModel):
    employee_id: uuid.UUID
    action: Literal["recalculate", "reset"]
    admin_id: uuid.UUID


class BalanceAlertOut(BaseModel):
    type: Literal["warning", "info", "pending"]
    title: str
    message: str
    employee_id: uuid.UUID
    leave_type: str
    priority: Literal["high", "medium", "low"]
    created_at: datetime


# ═════════════════════════════════════════════════════════════════════
# History
# ═════════════════════════════════════════════════════════════════════


class EmployeeSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: Optional[str] = None
    department: Optional[str] = None


class HistoryEntry(BaseModel):
    type: Literal["adjustment", "audit"]
    date: datetime
    leave_type: str
    action: str
    details: Optional[dict[str, Any]] = None
    description: str


class HistorySummary(BaseModel):
    total_adjustments: int = 0
    total_added: int = 0
    total_deducted: int = 0
    adjustments_by_type: dict[str, int] = Field(default_factory=dict)
    recent_activity: int = 0


class HistoryOut(BaseModel):
    employee: EmployeeSummary
    current_balance: Optional[EntitlementOut] = None
    history: list[HistoryEntry]
    summary: HistorySummary
    total_records: int


class HistoryEntryCreate(BaseModel):
    employee_id: uuid.UUID
    leave_type: str = "all"
    action: str = Field(..., min_length=1, max_length=100)
    details: dict[str, Any] = Field(default_factory=dict)
    admin_id: Optional[uuid.UUID] = None


class HistoryEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: str
    action: str
    details: Optional[dict[str, Any]] = None
    admin_id: Optional[uuid.UUID] = None
    created_at: datetime
