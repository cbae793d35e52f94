"""001 – Leave governance schema.

Creates the directory, leave request, routing override, entitlement ledger
and audit tables used by the leave governance engine.

Uses CREATE TABLE IF NOT EXISTS so the migration is safe to run against a
database where the surrounding HR application already owns ``employees``
and ``leave_requests``.

Revision ID: 001_leave_governance_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00
"""

import re

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "001_leave_governance_schema"
down_revision = None
branch_labels = None
depends_on = None

_SAFE_IDENT_RE = re.compile(r'^[a-z_][a-z0-9_]*$')


def _validate_identifier(name: str) -> str:
    if not _SAFE_IDENT_RE.match(name):
        raise ValueError(f"Unsafe SQL identifier: {name!r}")
    return name


def _safe_drop_table(name: str) -> None:
    _validate_identifier(name)
    op.execute(sa.text(f'DROP TABLE IF EXISTS "{name}" CASCADE'))


def upgrade() -> None:
    # ══════════════════════════════════════════════════════════════════
    # 1. employees (directory projection)
    # ══════════════════════════════════════════════════════════════════
    op.execute("""
        CREATE TABLE IF NOT EXISTS employees (
            id               UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name             VARCHAR(200) NOT NULL,
            email            VARCHAR(255) UNIQUE,
            department       VARCHAR(100),
            designation      VARCHAR(100),
            employment_date  DATE NOT NULL,
            is_active        BOOLEAN DEFAULT TRUE,
            created_at       TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_employees_department_designation "
        "ON employees(department, designation)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_employees_designation ON employees(designation)"
    )

    # ══════════════════════════════════════════════════════════════════
    # 2. leave_requests
    # ══════════════════════════════════════════════════════════════════
    op.execute("""
        CREATE TABLE IF NOT EXISTS leave_requests (
            id            UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            employee_id   UUID NOT NULL REFERENCES employees(id),
            leave_type    VARCHAR(20) NOT NULL,
            start_date    DATE NOT NULL,
            end_date      DATE NOT NULL,
            status        VARCHAR(20) NOT NULL DEFAULT 'pending',
            reason        TEXT,
            submitted_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_leave_requests_employee_start "
        "ON leave_requests(employee_id, start_date)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_leave_requests_status ON leave_requests(status)"
    )

    # ══════════════════════════════════════════════════════════════════
    # 3. approval_routing_overrides
    # ══════════════════════════════════════════════════════════════════
    op.execute("""
        CREATE TABLE IF NOT EXISTS approval_routing_overrides (
            employee_id  UUID PRIMARY KEY REFERENCES employees(id),
            levels       JSONB NOT NULL,
            updated_by   UUID,
            updated_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # ══════════════════════════════════════════════════════════════════
    # 4. leave_entitlements + leave_category_balances
    # ══════════════════════════════════════════════════════════════════
    op.execute("""
        CREATE TABLE IF NOT EXISTS leave_entitlements (
            id                UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            employee_id       UUID NOT NULL UNIQUE REFERENCES employees(id),
            employment_date   DATE NOT NULL,
            years_of_service  DOUBLE PRECISION NOT NULL,
            created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at        TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS leave_category_balances (
            id               UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            entitlement_id   UUID NOT NULL REFERENCES leave_entitlements(id),
            leave_type       VARCHAR(20) NOT NULL,
            position         INTEGER NOT NULL DEFAULT 0,
            description      VARCHAR(100),
            total_earned     INTEGER NOT NULL DEFAULT 0,
            carried_forward  INTEGER NOT NULL DEFAULT 0,
            adjusted         INTEGER NOT NULL DEFAULT 0,
            available        INTEGER NOT NULL DEFAULT 0,
            CONSTRAINT uq_category_balance UNIQUE (entitlement_id, leave_type)
        )
    """)

    # ══════════════════════════════════════════════════════════════════
    # 5. leave_balance_adjustments (append-only) + leave_balance_history
    # ══════════════════════════════════════════════════════════════════
    op.execute("""
        CREATE TABLE IF NOT EXISTS leave_balance_adjustments (
            id              UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            entitlement_id  UUID NOT NULL REFERENCES leave_entitlements(id),
            leave_type      VARCHAR(20) NOT NULL,
            amount          INTEGER NOT NULL,
            reason          TEXT,
            admin_id        UUID,
            adjusted_at     TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_balance_adjustments_entitlement "
        "ON leave_balance_adjustments(entitlement_id, adjusted_at)"
    )
    op.execute("""
        CREATE TABLE IF NOT EXISTS leave_balance_history (
            id           UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            employee_id  UUID NOT NULL REFERENCES employees(id),
            leave_type   VARCHAR(20) NOT NULL DEFAULT 'all',
            action       VARCHAR(100) NOT NULL,
            details      JSONB,
            admin_id     UUID,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # ══════════════════════════════════════════════════════════════════
    # 6. audit_logs
    # ══════════════════════════════════════════════════════════════════
    op.execute("""
        CREATE TABLE IF NOT EXISTS audit_logs (
            id           UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            actor_id     UUID,
            action       VARCHAR(100) NOT NULL,
            entity_type  VARCHAR(100) NOT NULL,
            entity_id    UUID NOT NULL,
            old_values   JSONB,
            new_values   JSONB,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_audit_logs_entity ON audit_logs(entity_type, entity_id)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_audit_logs_created_at ON audit_logs(created_at)"
    )
    op.execute("CREATE INDEX IF NOT EXISTS ix_audit_logs_action ON audit_logs(action)")


def downgrade() -> None:
    for name in (
        "audit_logs",
        "leave_balance_history",
        "leave_balance_adjustments",
        "leave_category_balances",
        "leave_entitlements",
        "approval_routing_overrides",
    ):
        _safe_drop_table(name)
