"""Approval routing ORM model: per-employee routing override."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from leavegov.common.audit import utcnow
from leavegov.database import Base


class ApprovalRoutingOverride(Base):
    """Custom approval chain for one employee.

    ``levels`` is stored as a JSON list of ApprovalLevel dicts and replaces
    the default level computation wholesale.
    """

    __tablename__ = "approval_routing_overrides"

    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"), primary_key=True,
    )
    levels: Mapped[list] = mapped_column(JSONB, nullable=False)
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True))
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )
