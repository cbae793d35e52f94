"""Leave balance ORM models: LeaveEntitlement, CategoryBalance, BalanceAdjustment,
BalanceHistoryEntry."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leavegov.common.audit import utcnow
from leavegov.database import Base


class LeaveEntitlement(Base):
    """One record per employee, created lazily on first balance read."""

    __tablename__ = "leave_entitlements"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"), unique=True, nullable=False,
    )
    employment_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    years_of_service: Mapped[float] = mapped_column(sa.Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow,
    )

    # Relationships
    balances: Mapped[list[CategoryBalance]] = relationship(
        back_populates="entitlement",
        cascade="all, delete-orphan",
        order_by="CategoryBalance.position",
    )
    adjustments: Mapped[list[BalanceAdjustment]] = relationship(
        back_populates="entitlement",
        order_by="BalanceAdjustment.adjusted_at",
    )


class CategoryBalance(Base):
    """Stored accrual for one leave type.

    ``available`` holds ``total_earned + carried_forward + adjusted``; used and
    pending days are subtracted at read time and never stored.
    """

    __tablename__ = "leave_category_balances"
    __table_args__ = (
        sa.UniqueConstraint("entitlement_id", "leave_type", name="uq_category_balance"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    entitlement_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("leave_entitlements.id"), nullable=False,
    )
    leave_type: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    position: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    description: Mapped[Optional[str]] = mapped_column(sa.String(100))
    total_earned: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    carried_forward: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    adjusted: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    available: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)

    # Relationships
    entitlement: Mapped[LeaveEntitlement] = relationship(back_populates="balances")


class BalanceAdjustment(Base):
    """Append-only record of a manual balance correction."""

    __tablename__ = "leave_balance_adjustments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    entitlement_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("leave_entitlements.id"), nullable=False,
    )
    leave_type: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    amount: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    admin_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True))
    adjusted_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow,
    )

    __table_args__ = (
        sa.Index("ix_balance_adjustments_entitlement", "entitlement_id", "adjusted_at"),
    )

    # Relationships
    entitlement: Mapped[LeaveEntitlement] = relationship(back_populates="adjustments")


class BalanceHistoryEntry(Base):
    """Free-form history note recorded by an administrator."""

    __tablename__ = "leave_balance_history"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"), nullable=False,
    )
    leave_type: Mapped[str] = mapped_column(sa.String(20), nullable=False, default="all")
    action: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    details: Mapped[Optional[dict]] = mapped_column(JSONB)
    admin_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True))
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow,
    )
