"""Employee directory ORM model.

Only the attributes the leave engine routes on are mapped here; the full
employee profile lives with the surrounding HR application.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from leavegov.common.audit import utcnow
from leavegov.database import Base


class Employee(Base):
    """Directory entry: identity plus department/designation for routing."""

    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(sa.String(255), unique=True)
    department: Mapped[Optional[str]] = mapped_column(sa.String(100))
    designation: Mapped[Optional[str]] = mapped_column(sa.String(100))
    employment_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow,
    )

    __table_args__ = (
        sa.Index("ix_employees_department_designation", "department", "designation"),
        sa.Index("ix_employees_designation", "designation"),
    )

    def __repr__(self) -> str:
        return f"<Employee {self.name} ({self.department}/{self.designation})>"
