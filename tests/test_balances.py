"""Leave balance test suite — accrual arithmetic, derived usage, lazy
entitlement creation, invariant-checked adjustments, reset/recalculate,
alerts, and API endpoints.

Tests run against SQLite via the shared conftest.py fixtures.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from leavegov.balances.calculator import (
    compute_current_balances,
    initial_category_balances,
    tally_usage,
    years_of_service,
)
from leavegov.balances.models import CategoryBalance, LeaveEntitlement
from leavegov.balances.service import BalanceLedgerService
from leavegov.common.audit import AuditLog
from leavegov.common.constants import AuditAction, LeaveStatus, LeaveType
from leavegov.common.exceptions import (
    InsufficientBalanceException,
    NotFoundException,
    ValidationException,
)
from tests.conftest import (
    current_year_monday,
    employed_years_ago,
    seed_employee,
    seed_leave_request,
)


# ═════════════════════════════════════════════════════════════════════
# Helpers
# ═════════════════════════════════════════════════════════════════════


def _by_type(rows: list[dict]) -> dict[str, dict]:
    return {row["leave_type"]: row for row in rows}


def _request(leave_type: str, status: str, start: date, end: date) -> SimpleNamespace:
    return SimpleNamespace(leave_type=leave_type, status=status, start_date=start, end_date=end)


def _assert_conserved(balances) -> None:
    for bal in balances.values():
        assert bal.available == (
            bal.total_earned + bal.carried_forward + bal.adjusted - bal.used - bal.pending
        )


async def _count_audit(db: AsyncSession, action: AuditAction, employee_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count()).select_from(AuditLog).where(
            AuditLog.action == action.value,
            AuditLog.entity_id == employee_id,
        )
    )
    return result.scalar_one()


# ═════════════════════════════════════════════════════════════════════
# Calculator — pure logic
# ═════════════════════════════════════════════════════════════════════


class TestYearsOfService:

    def test_one_calendar_year(self):
        now = datetime(2021, 1, 1, tzinfo=timezone.utc)
        assert years_of_service(date(2020, 1, 1), now) == pytest.approx(366 / 365.25)

    def test_naive_now_treated_as_utc(self):
        assert years_of_service(date(2020, 1, 1), datetime(2020, 1, 1)) == 0

    def test_future_employment_is_negative(self):
        now = datetime(2020, 1, 1, tzinfo=timezone.utc)
        assert years_of_service(date(2021, 1, 1), now) < 0


class TestInitialCategoryBalances:

    def test_six_years_caps_annual_carry_forward(self):
        rows = _by_type(initial_category_balances(6.0))
        assert rows["annual"]["total_earned"] == 120
        assert rows["annual"]["carried_forward"] == 5
        assert rows["annual"]["available"] == 125

    def test_non_carrying_categories(self):
        rows = _by_type(initial_category_balances(6.0))
        assert rows["sick"]["total_earned"] == 60
        assert rows["sick"]["carried_forward"] == 0
        assert rows["bereavement"]["total_earned"] == 18

    def test_partial_first_year_earns_no_carry_forward(self):
        rows = _by_type(initial_category_balances(0.5))
        assert rows["annual"]["total_earned"] == 10
        assert rows["annual"]["carried_forward"] == 0

    def test_carry_forward_below_cap(self):
        rows = _by_type(initial_category_balances(1.2))
        assert rows["annual"]["total_earned"] == 24
        assert rows["annual"]["carried_forward"] == 4

    def test_negative_service_floors_at_zero(self):
        rows = initial_category_balances(-0.5)
        assert all(row["total_earned"] == 0 for row in rows)
        assert all(row["available"] == 0 for row in rows)

    def test_every_category_present_in_order(self):
        rows = initial_category_balances(2.0)
        assert [row["leave_type"] for row in rows] == [
            "annual", "sick", "personal", "maternity", "paternity", "bereavement",
        ]
        assert [row["position"] for row in rows] == list(range(6))
        assert all(row["adjusted"] == 0 for row in rows)


class TestDerivedUsage:

    def test_tally_counts_working_days_by_status(self):
        monday = current_year_monday()
        usage = tally_usage([
            _request("annual", "approved", monday, monday + timedelta(days=6)),
            _request("annual", "pending", monday, monday + timedelta(days=1)),
            _request("annual", "rejected", monday, monday + timedelta(days=4)),
            _request("sick", "approved", monday, monday),
        ])
        assert usage["annual"].used == 5
        assert usage["annual"].pending == 2
        assert usage["sick"].used == 1
        assert usage["sick"].pending == 0

    def test_compute_current_balances_conserves_ledger(self):
        monday = current_year_monday()
        categories = [
            SimpleNamespace(leave_type="annual", description="Annual Leave",
                            total_earned=40, carried_forward=5, adjusted=-3, available=42),
            SimpleNamespace(leave_type="sick", description="Sick Leave",
                            total_earned=20, carried_forward=0, adjusted=0, available=20),
        ]
        balances = compute_current_balances(categories, [
            _request(LeaveType.annual, LeaveStatus.approved, monday, monday + timedelta(days=2)),
            _request(LeaveType.annual, LeaveStatus.pending, monday, monday),
        ])
        assert balances["annual"].used == 3
        assert balances["annual"].pending == 1
        assert balances["annual"].available == 38
        assert balances["sick"].available == 20
        _assert_conserved(balances)

    def test_overcommitment_is_not_clamped(self):
        monday = current_year_monday()
        categories = [
            SimpleNamespace(leave_type="bereavement", description=None,
                            total_earned=1, carried_forward=0, adjusted=0, available=1),
        ]
        balances = compute_current_balances(categories, [
            _request("bereavement", "approved", monday, monday + timedelta(days=2)),
        ])
        assert balances["bereavement"].available == -2


# ═════════════════════════════════════════════════════════════════════
# Ledger service — entitlement lifecycle
# ═════════════════════════════════════════════════════════════════════


class TestEntitlementLifecycle:

    async def test_first_read_creates_entitlement(self, db: AsyncSession, test_employee):
        out = await BalanceLedgerService(db).get_balances(test_employee.id)

        assert out.employee_id == test_employee.id
        assert out.years_of_service == pytest.approx(2.27, abs=0.01)
        annual = out.balances["annual"]
        assert annual.total_earned == 45
        assert annual.carried_forward == 5
        assert annual.available == 50
        assert out.balances["sick"].total_earned == 22
        assert out.adjustments == []
        assert await _count_audit(db, AuditAction.leave_balance_create, test_employee.id) == 1

    async def test_available_starts_at_earned_plus_carried(self, db: AsyncSession, test_employee):
        out = await BalanceLedgerService(db).get_balances(test_employee.id)
        for bal in out.balances.values():
            assert bal.available == bal.total_earned + bal.carried_forward
            assert bal.used == 0 and bal.pending == 0

    async def test_get_or_create_is_idempotent(self, db: AsyncSession, test_employee):
        ledger = BalanceLedgerService(db)
        first = await ledger.get_or_create(test_employee)
        second = await ledger.get_or_create(test_employee)
        assert first.id == second.id

        count = await db.execute(
            select(func.count()).select_from(LeaveEntitlement).where(
                LeaveEntitlement.employee_id == test_employee.id,
            )
        )
        assert count.scalar_one() == 1
        assert await _count_audit(db, AuditAction.leave_balance_create, test_employee.id) == 1

    async def test_six_years_of_service_caps_carry_forward(self, db: AsyncSession):
        veteran = await seed_employee(db, employment_date=employed_years_ago(6.27))
        out = await BalanceLedgerService(db).get_balances(veteran.id)
        assert out.balances["annual"].total_earned == 125
        assert out.balances["annual"].carried_forward == 5
        assert out.balances["sick"].carried_forward == 0

    async def test_unknown_employee_not_found(self, db: AsyncSession):
        with pytest.raises(NotFoundException):
            await BalanceLedgerService(db).get_balances(uuid.uuid4())

    async def test_get_or_create_uses_record_inserted_concurrently(
        self, db: AsyncSession, test_employee, monkeypatch,
    ):
        ledger = BalanceLedgerService(db)
        existing = await ledger.get_or_create(test_employee)
        load = ledger._load
        calls: list[uuid.UUID] = []

        async def miss_first_lookup(employee_id):
            # First lookup happens before the competing insert is visible.
            calls.append(employee_id)
            if len(calls) == 1:
                return None
            return await load(employee_id)

        monkeypatch.setattr(ledger, "_load", miss_first_lookup)
        winner = await ledger.get_or_create(test_employee)

        assert winner.id == existing.id
        assert len(calls) == 2
        count = await db.execute(
            select(func.count()).select_from(LeaveEntitlement).where(
                LeaveEntitlement.employee_id == test_employee.id,
            )
        )
        assert count.scalar_one() == 1
        assert await _count_audit(db, AuditAction.leave_balance_create, test_employee.id) == 1

    async def test_get_current_balance_never_creates(self, db: AsyncSession, test_employee):
        ledger = BalanceLedgerService(db)
        assert await ledger.get_current_balance(test_employee.id) is None
        await ledger.get_balances(test_employee.id)
        assert await ledger.get_current_balance(test_employee.id) is not None


class TestDerivedBalances:

    async def test_requests_reduce_available(self, db: AsyncSession, test_employee):
        monday = current_year_monday()
        await seed_leave_request(
            db, test_employee.id, leave_type=LeaveType.annual, status=LeaveStatus.approved,
            start_date=monday, end_date=monday + timedelta(days=2),
        )
        await seed_leave_request(
            db, test_employee.id, leave_type=LeaveType.annual, status=LeaveStatus.pending,
            start_date=monday + timedelta(days=7), end_date=monday + timedelta(days=8),
        )
        await seed_leave_request(
            db, test_employee.id, leave_type=LeaveType.annual, status=LeaveStatus.rejected,
            start_date=monday + timedelta(days=14), end_date=monday + timedelta(days=18),
        )

        out = await BalanceLedgerService(db).get_balances(test_employee.id)
        annual = out.balances["annual"]
        assert annual.used == 3
        assert annual.pending == 2
        assert annual.available == 45
        _assert_conserved(out.balances)

    async def test_prior_year_requests_ignored(self, db: AsyncSession, test_employee):
        last_year = date(date.today().year - 1, 6, 1)
        await seed_leave_request(
            db, test_employee.id, status=LeaveStatus.approved,
            start_date=last_year, end_date=last_year + timedelta(days=10),
        )
        out = await BalanceLedgerService(db).get_balances(test_employee.id)
        assert out.balances["annual"].used == 0

    async def test_repeated_reads_do_not_drift(self, db: AsyncSession, test_employee):
        await seed_leave_request(db, test_employee.id, status=LeaveStatus.approved)
        ledger = BalanceLedgerService(db)
        first = await ledger.get_balances(test_employee.id)
        second = await ledger.get_balances(test_employee.id)
        third = await ledger.get_balances(test_employee.id)
        assert first.balances == second.balances == third.balances


# ═════════════════════════════════════════════════════════════════════
# Ledger service — adjustments
# ═════════════════════════════════════════════════════════════════════


class TestAdjustments:

    async def test_positive_adjustment(self, db: AsyncSession, test_employee):
        ledger = BalanceLedgerService(db)
        await ledger.get_balances(test_employee.id)
        admin_id = uuid.uuid4()

        out = await ledger.apply_adjustment(
            test_employee.id, LeaveType.annual, 3, "Worked weekend", admin_id,
        )
        annual = out.balances["annual"]
        assert annual.adjusted == 3
        assert annual.available == 53
        assert len(out.adjustments) == 1
        assert out.adjustments[0].amount == 3
        assert out.adjustments[0].admin_id == admin_id
        _assert_conserved(out.balances)

    async def test_adjustment_audited(self, db: AsyncSession, test_employee):
        ledger = BalanceLedgerService(db)
        await ledger.get_balances(test_employee.id)
        await ledger.apply_adjustment(test_employee.id, "sick", -2, "Correction", uuid.uuid4())

        result = await db.execute(
            select(AuditLog).where(AuditLog.action == AuditAction.leave_balance_adjust.value)
        )
        log = result.scalar_one()
        assert log.entity_id == test_employee.id
        assert log.new_values == {"leave_type": "sick", "adjustment": -2, "reason": "Correction"}

    async def test_adjustment_below_zero_rejected(self, db: AsyncSession, test_employee):
        ledger = BalanceLedgerService(db)
        await ledger.get_balances(test_employee.id)
        await ledger.apply_adjustment(test_employee.id, "sick", -20, "Drawdown", uuid.uuid4())

        with pytest.raises(InsufficientBalanceException) as exc_info:
            await ledger.apply_adjustment(test_employee.id, "sick", -5, "Too much", uuid.uuid4())
        assert exc_info.value.available == 2
        assert exc_info.value.status_code == 400

        out = await ledger.get_balances(test_employee.id)
        assert out.balances["sick"].available == 2
        assert out.balances["sick"].adjusted == -20
        assert len(out.adjustments) == 1

    async def test_adjustment_guard_uses_row_as_stored(
        self, db: AsyncSession, test_employee, monkeypatch,
    ):
        ledger = BalanceLedgerService(db)
        entitlement_id = (await ledger.get_balances(test_employee.id)).id
        read_requests = ledger._current_year_requests

        async def drain_between_read_and_write(employee_id, now):
            # A concurrent writer lowers the stored balance after the
            # category was read but before the conditional UPDATE runs.
            await db.execute(
                update(CategoryBalance)
                .where(
                    CategoryBalance.entitlement_id == entitlement_id,
                    CategoryBalance.leave_type == "annual",
                )
                .values(available=3)
                .execution_options(synchronize_session=False)
            )
            return await read_requests(employee_id, now)

        monkeypatch.setattr(ledger, "_current_year_requests", drain_between_read_and_write)
        with pytest.raises(InsufficientBalanceException) as exc_info:
            await ledger.apply_adjustment(test_employee.id, "annual", -5, "Stale", uuid.uuid4())
        assert exc_info.value.available == 3
        monkeypatch.undo()

        out = await ledger.get_balances(test_employee.id)
        assert out.balances["annual"].available == 3
        assert out.balances["annual"].adjusted == 0
        assert out.adjustments == []
        assert await _count_audit(db, AuditAction.leave_balance_adjust, test_employee.id) == 0

    async def test_pending_requests_count_against_adjustment(
        self, db: AsyncSession, test_employee,
    ):
        monday = current_year_monday()
        await seed_leave_request(
            db, test_employee.id, leave_type=LeaveType.sick,
            start_date=monday, end_date=monday + timedelta(days=2),
        )
        ledger = BalanceLedgerService(db)
        await ledger.get_balances(test_employee.id)

        with pytest.raises(InsufficientBalanceException):
            await ledger.apply_adjustment(test_employee.id, "sick", -20, None, uuid.uuid4())

        out = await ledger.apply_adjustment(test_employee.id, "sick", -19, None, uuid.uuid4())
        assert out.balances["sick"].available == 0

    async def test_adjustment_to_exactly_zero_allowed(self, db: AsyncSession, test_employee):
        ledger = BalanceLedgerService(db)
        await ledger.get_balances(test_employee.id)
        out = await ledger.apply_adjustment(test_employee.id, "bereavement", -6, None, None)
        assert out.balances["bereavement"].available == 0

    async def test_adjustment_without_entitlement_not_found(
        self, db: AsyncSession, test_employee,
    ):
        with pytest.raises(NotFoundException):
            await BalanceLedgerService(db).apply_adjustment(
                test_employee.id, "annual", 1, None, uuid.uuid4(),
            )

    async def test_unknown_category_rejected(self, db: AsyncSession, test_employee):
        ledger = BalanceLedgerService(db)
        await ledger.get_balances(test_employee.id)
        with pytest.raises(ValidationException):
            await ledger.apply_adjustment(test_employee.id, "sabbatical", 1, None, uuid.uuid4())


# ═════════════════════════════════════════════════════════════════════
# Ledger service — reset / recalculate / alerts
# ═════════════════════════════════════════════════════════════════════


class TestLedgerActions:

    async def test_reset_discards_adjustments(self, db: AsyncSession, test_employee):
        ledger = BalanceLedgerService(db)
        await ledger.get_balances(test_employee.id)
        await ledger.apply_adjustment(test_employee.id, "annual", 4, "Bonus", uuid.uuid4())

        admin_id = uuid.uuid4()
        out = await ledger.reset(test_employee.id, admin_id)
        assert out.balances["annual"].adjusted == 0
        assert out.balances["annual"].available == 50
        assert [a.leave_type for a in out.adjustments] == ["annual", "all"]
        assert out.adjustments[-1].amount == 0
        assert await _count_audit(db, AuditAction.leave_balance_reset, test_employee.id) == 1

    async def test_reset_without_entitlement_not_found(self, db: AsyncSession, test_employee):
        with pytest.raises(NotFoundException):
            await BalanceLedgerService(db).reset(test_employee.id, uuid.uuid4())

    async def test_recalculate_records_audit(self, db: AsyncSession, test_employee):
        ledger = BalanceLedgerService(db)
        await ledger.get_balances(test_employee.id)
        out = await ledger.recalculate(test_employee.id, uuid.uuid4())
        assert out.balances["annual"].available == 50
        assert await _count_audit(
            db, AuditAction.leave_balance_recalculate, test_employee.id,
        ) == 1

    async def test_recalculate_reaccrues_and_keeps_adjustments(self, db: AsyncSession):
        newcomer = await seed_employee(db, employment_date=employed_years_ago(0.5))
        ledger = BalanceLedgerService(db)
        before = await ledger.get_balances(newcomer.id)
        assert before.balances["annual"].total_earned == 10
        assert before.balances["annual"].carried_forward == 0
        await ledger.apply_adjustment(newcomer.id, "annual", 2, "Overtime", uuid.uuid4())

        # HR corrects the employment date in the directory.
        newcomer.employment_date = employed_years_ago(3.27)
        await db.flush()

        out = await ledger.recalculate(newcomer.id, uuid.uuid4())
        annual = out.balances["annual"]
        assert annual.total_earned == 65
        assert annual.carried_forward == 5
        assert annual.adjusted == 2
        assert annual.available == 72
        assert out.balances["sick"].total_earned == 32
        assert out.employment_date == newcomer.employment_date
        assert out.years_of_service == pytest.approx(3.27, abs=0.01)
        assert [a.reason for a in out.adjustments] == ["Overtime"]
        _assert_conserved(out.balances)

    async def test_recalculate_without_entitlement_not_found(
        self, db: AsyncSession, test_employee,
    ):
        with pytest.raises(NotFoundException):
            await BalanceLedgerService(db).recalculate(test_employee.id, uuid.uuid4())

    async def test_low_balance_alert_first(self, db: AsyncSession, test_employee):
        ledger = BalanceLedgerService(db)
        await ledger.get_balances(test_employee.id)
        await ledger.apply_adjustment(test_employee.id, "sick", -21, None, uuid.uuid4())
        await seed_leave_request(db, test_employee.id, leave_type=LeaveType.annual)

        alerts = await ledger.balance_alerts(test_employee.id)
        assert alerts[0].priority == "high"
        assert alerts[0].leave_type == "sick"
        assert alerts[0].type == "warning"
        assert any(a.type == "pending" and a.leave_type == "annual" for a in alerts)

    async def test_high_usage_alert(self, db: AsyncSession, test_employee):
        monday = current_year_monday()
        await seed_leave_request(
            db, test_employee.id, leave_type=LeaveType.annual, status=LeaveStatus.approved,
            start_date=monday, end_date=monday + timedelta(days=53),
        )
        ledger = BalanceLedgerService(db)
        await ledger.get_balances(test_employee.id)
        alerts = await ledger.balance_alerts(test_employee.id)
        usage = [a for a in alerts if a.type == "info"]
        assert [a.leave_type for a in usage] == ["annual"]
        assert "80.0%" in usage[0].message

    async def test_no_alerts_for_fresh_balance(self, db: AsyncSession, test_employee):
        ledger = BalanceLedgerService(db)
        await ledger.get_balances(test_employee.id)
        assert await ledger.balance_alerts(test_employee.id) == []

    async def test_alerts_do_not_create_entitlement(self, db: AsyncSession, test_employee):
        await seed_leave_request(db, test_employee.id)
        ledger = BalanceLedgerService(db)

        assert await ledger.balance_alerts(test_employee.id) == []
        assert await ledger.get_current_balance(test_employee.id) is None
        assert await _count_audit(db, AuditAction.leave_balance_create, test_employee.id) == 0

    async def test_alerts_unknown_employee_not_found(self, db: AsyncSession):
        with pytest.raises(NotFoundException):
            await BalanceLedgerService(db).balance_alerts(uuid.uuid4())


# ═════════════════════════════════════════════════════════════════════
# API endpoints
# ═════════════════════════════════════════════════════════════════════


BASE = "/api/v1/leave/balances"


class TestBalancesAPI:

    async def test_get_balances_endpoint(self, client, db: AsyncSession, test_employee):
        await db.commit()
        resp = await client.get(BASE, params={"employee_id": str(test_employee.id)})
        assert resp.status_code == 200
        data = resp.json()
        assert data["balances"]["annual"]["available"] == 50
        assert set(data["balances"]) == {
            "annual", "sick", "personal", "maternity", "paternity", "bereavement",
        }

    async def test_get_balances_unknown_employee(self, client):
        resp = await client.get(BASE, params={"employee_id": str(uuid.uuid4())})
        assert resp.status_code == 404

    async def test_adjust_endpoint(self, client, db: AsyncSession, test_employee):
        await db.commit()
        await client.get(BASE, params={"employee_id": str(test_employee.id)})

        resp = await client.put(BASE, json={
            "employee_id": str(test_employee.id),
            "leave_type": "annual",
            "adjustment": 2,
            "reason": "Conference travel",
            "admin_id": str(uuid.uuid4()),
        })
        assert resp.status_code == 200
        assert resp.json()["balances"]["annual"]["available"] == 52

    async def test_adjust_insufficient_balance(self, client, db: AsyncSession, test_employee):
        await db.commit()
        await client.get(BASE, params={"employee_id": str(test_employee.id)})

        resp = await client.put(BASE, json={
            "employee_id": str(test_employee.id),
            "leave_type": "bereavement",
            "adjustment": -10,
            "admin_id": str(uuid.uuid4()),
        })
        assert resp.status_code == 400
        body = resp.json()
        assert body["type"].endswith("/insufficient-balance")
        assert body["errors"]["available"] == 6

        resp = await client.get(BASE, params={"employee_id": str(test_employee.id)})
        assert resp.json()["balances"]["bereavement"]["available"] == 6

    async def test_adjust_zero_rejected(self, client, db: AsyncSession, test_employee):
        await db.commit()
        resp = await client.put(BASE, json={
            "employee_id": str(test_employee.id),
            "leave_type": "annual",
            "adjustment": 0,
            "admin_id": str(uuid.uuid4()),
        })
        assert resp.status_code == 422

    async def test_adjust_unknown_leave_type_rejected(self, client, db: AsyncSession, test_employee):
        await db.commit()
        resp = await client.put(BASE, json={
            "employee_id": str(test_employee.id),
            "leave_type": "sabbatical",
            "adjustment": 1,
            "admin_id": str(uuid.uuid4()),
        })
        assert resp.status_code == 422

    async def test_adjust_before_entitlement_not_found(
        self, client, db: AsyncSession, test_employee,
    ):
        await db.commit()
        resp = await client.put(BASE, json={
            "employee_id": str(test_employee.id),
            "leave_type": "annual",
            "adjustment": 1,
            "admin_id": str(uuid.uuid4()),
        })
        assert resp.status_code == 404

    async def test_reset_action_endpoint(self, client, db: AsyncSession, test_employee):
        await db.commit()
        await client.get(BASE, params={"employee_id": str(test_employee.id)})
        resp = await client.post(f"{BASE}/actions", json={
            "employee_id": str(test_employee.id),
            "action": "reset",
            "admin_id": str(uuid.uuid4()),
        })
        assert resp.status_code == 200
        assert resp.json()["adjustments"][-1]["leave_type"] == "all"

    async def test_unknown_action_rejected(self, client, db: AsyncSession, test_employee):
        await db.commit()
        resp = await client.post(f"{BASE}/actions", json={
            "employee_id": str(test_employee.id),
            "action": "purge",
            "admin_id": str(uuid.uuid4()),
        })
        assert resp.status_code == 422

    async def test_alerts_endpoint(self, client, db: AsyncSession, test_employee):
        await seed_leave_request(db, test_employee.id)
        await db.commit()
        params = {"employee_id": str(test_employee.id)}

        resp = await client.get(f"{BASE}/alerts", params=params)
        assert resp.status_code == 200
        assert resp.json() == []

        await client.get(BASE, params=params)
        resp = await client.get(f"{BASE}/alerts", params=params)
        assert [a["type"] for a in resp.json()] == ["pending"]

    async def test_alerts_unknown_employee(self, client):
        resp = await client.get(f"{BASE}/alerts", params={"employee_id": str(uuid.uuid4())})
        assert resp.status_code == 404
