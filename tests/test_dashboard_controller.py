"""Dashboard controller tests against an in-memory fake record store.

The fake store applies the same access policy as the SQL store and records
every call, so load ordering, reloads and failure handling can be checked
without a database.
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from barbertrack.access.policy import Caller
from barbertrack.common.constants import UserRole
from barbertrack.common.exceptions import NotFoundException
from barbertrack.dashboard.controller import DashboardController, recent_history

BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeStore:
    def __init__(self):
        self.employees: list = []
        self.services: list = []
        self.transactions: list = []
        self.calls: list[str] = []
        self.fail_reads = False
        self.fail_mutations: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def list_active_employees(self):
        self.calls.append("employees")
        if self.fail_reads:
            raise OperationalError("SELECT", {}, Exception("database is down"))
        return sorted((e for e in self.employees if e.is_active), key=lambda e: e.full_name)

    async def list_active_service_types(self):
        self.calls.append("services")
        return sorted((s for s in self.services if s.is_active), key=lambda s: s.display_order)

    async def list_transactions(self, caller):
        self.calls.append("transactions")
        if self.gate is not None:
            await self.gate.wait()
        return caller.policy.filter(self.transactions, caller)

    async def delete_transaction(self, caller, transaction_id):
        self.calls.append("delete")
        if self.fail_mutations is not None:
            raise self.fail_mutations
        caller.policy.authorize(caller, "transaction:delete")
        for t in self.transactions:
            if t.id == transaction_id:
                self.transactions.remove(t)
                return
        raise NotFoundException(entity_type="Transaction", entity_id=transaction_id)

    async def deactivate_employee(self, caller, employee_id):
        self.calls.append("deactivate")
        caller.policy.authorize(caller, "profile:deactivate")
        for e in self.employees:
            if e.id == employee_id:
                e.is_active = False
                return
        raise NotFoundException(entity_type="Profile", entity_id=employee_id)

    # ── seeding ─────────────────────────────────────────────────────

    def employee(self, name: str):
        e = SimpleNamespace(id=uuid.uuid4(), full_name=name, is_active=True, role=UserRole.employee)
        self.employees.append(e)
        return e

    def service(self, name: str, order: int, is_active: bool = True):
        s = SimpleNamespace(id=uuid.uuid4(), name=name, display_order=order, is_active=is_active)
        self.services.append(s)
        return s

    def transaction(self, employee, service, minutes: int = 0):
        t = SimpleNamespace(
            id=uuid.uuid4(),
            employee_id=employee.id,
            service_type_id=service.id,
            service_type=service,
            performed_at=BASE_TIME + timedelta(minutes=minutes),
            notes=None,
        )
        self.transactions.append(t)
        return t


@pytest.fixture
def shop() -> FakeStore:
    store = FakeStore()
    store.haircut = store.service("Haircut", 1)
    store.shave = store.service("Shave", 2)
    store.alex = store.employee("Alex")
    store.blake = store.employee("Blake")
    return store


def _admin() -> Caller:
    return Caller(id=uuid.uuid4(), role=UserRole.admin)


# ═════════════════════════════════════════════════════════════════════
# Loading
# ═════════════════════════════════════════════════════════════════════


async def test_load_builds_stats_for_admin(shop):
    shop.transaction(shop.alex, shop.haircut)
    shop.transaction(shop.blake, shop.shave)
    shop.transaction(shop.blake, shop.shave, 5)
    controller = DashboardController(shop, _admin())

    assert await controller.load() is True

    state = controller.state
    assert state.ready
    assert [s.profile.full_name for s in state.stats] == ["Alex", "Blake"]
    assert state.total_transactions == 3
    assert [s.name for s in state.services] == ["Haircut", "Shave"]


async def test_transactions_load_after_employees_and_services(shop):
    controller = DashboardController(shop, _admin())
    await controller.load()

    assert shop.calls.index("transactions") > shop.calls.index("employees")
    assert shop.calls.index("transactions") > shop.calls.index("services")


async def test_employee_sees_own_row_only(shop):
    shop.transaction(shop.alex, shop.haircut)
    shop.transaction(shop.blake, shop.haircut)
    controller = DashboardController(shop, Caller(id=shop.alex.id, role=UserRole.employee))

    await controller.load()

    assert [s.profile.id for s in controller.state.stats] == [shop.alex.id]
    assert all(t.employee_id == shop.alex.id for t in controller.state.stats[0].transactions)


async def test_missing_caller_defers_load(shop):
    shop.transaction(shop.alex, shop.haircut)
    controller = DashboardController(shop, None)

    assert await controller.load() is False

    assert controller.state.ready is False
    assert controller.state.stats == []
    assert shop.calls == []


async def test_load_failure_sets_notice_and_keeps_state(shop):
    controller = DashboardController(shop, _admin())
    await controller.load()
    before = controller.state.stats

    shop.fail_reads = True
    assert await controller.load() is False

    assert controller.state.notice is not None
    assert controller.state.notice.level == "error"
    assert controller.state.stats is before


async def test_successful_reload_clears_load_failure_notice(shop):
    controller = DashboardController(shop, _admin())
    shop.fail_reads = True
    assert await controller.load() is False
    assert controller.state.notice is not None

    shop.fail_reads = False
    assert await controller.load() is True

    assert controller.state.ready
    assert controller.state.notice is None


async def test_closed_controller_discards_inflight_load(shop):
    shop.gate = asyncio.Event()
    controller = DashboardController(shop, _admin())

    task = asyncio.create_task(controller.load())
    await asyncio.sleep(0)
    controller.close()
    shop.gate.set()

    assert await task is False
    assert controller.closed
    assert controller.state.ready is False


# ═════════════════════════════════════════════════════════════════════
# Selection & history
# ═════════════════════════════════════════════════════════════════════


async def test_toggle_expands_and_collapses(shop):
    controller = DashboardController(shop, _admin())
    await controller.load()

    assert controller.toggle_employee(shop.alex.id) == shop.alex.id
    assert controller.toggle_employee(shop.blake.id) == shop.blake.id
    assert controller.toggle_employee(shop.blake.id) is None
    assert controller.state.expanded_employee_id is None


async def test_toggle_ignores_employee_outside_roster(shop):
    shop.transaction(shop.alex, shop.haircut)
    controller = DashboardController(shop, Caller(id=shop.blake.id, role=UserRole.employee))
    await controller.load()

    assert controller.toggle_employee(shop.alex.id) is None
    assert controller.state.expanded_employee_id is None
    assert controller.history() == []

    controller.toggle_employee(shop.blake.id)
    assert controller.toggle_employee(uuid.uuid4()) is None


async def test_history_capped_at_thirty_newest_first(shop):
    for minute in range(45):
        shop.transaction(shop.alex, shop.haircut, minute)
    controller = DashboardController(shop, _admin())
    await controller.load()
    controller.toggle_employee(shop.alex.id)

    history = controller.history()

    assert len(history) == 30
    stamps = [t.performed_at for t in history]
    assert stamps == sorted(stamps, reverse=True)
    assert stamps[0] == BASE_TIME + timedelta(minutes=44)
    assert stamps[-1] == BASE_TIME + timedelta(minutes=15)


def test_recent_history_sorts_before_truncating():
    rows = [SimpleNamespace(performed_at=BASE_TIME + timedelta(minutes=m)) for m in (3, 9, 1, 7)]
    assert [r.performed_at.minute for r in recent_history(rows, cap=2)] == [9, 7]


async def test_history_empty_without_selection(shop):
    shop.transaction(shop.alex, shop.haircut)
    controller = DashboardController(shop, _admin())
    await controller.load()

    assert controller.history() == []


# ═════════════════════════════════════════════════════════════════════
# Mutations
# ═════════════════════════════════════════════════════════════════════


async def test_unconfirmed_mutation_is_cancelled(shop):
    t = shop.transaction(shop.alex, shop.haircut)
    controller = DashboardController(shop, _admin())

    result = await controller.delete_transaction(t.id, confirmed=False)

    assert result.cancelled and not result.ok
    assert "delete" not in shop.calls
    assert t in shop.transactions


async def test_delete_reloads_from_store(shop):
    t = shop.transaction(shop.alex, shop.haircut)
    shop.transaction(shop.alex, shop.shave)
    controller = DashboardController(shop, _admin())
    await controller.load()
    shop.calls.clear()

    result = await controller.delete_transaction(t.id, confirmed=True)

    assert result.ok
    assert shop.calls == ["delete", "employees", "services", "transactions"]
    assert controller.state.total_transactions == 1


async def test_deactivate_removes_employee_from_roster(shop):
    shop.transaction(shop.blake, shop.haircut)
    controller = DashboardController(shop, _admin())
    await controller.load()
    controller.toggle_employee(shop.blake.id)

    result = await controller.deactivate_employee(shop.blake.id, confirmed=True)

    assert result.ok
    assert [s.profile.id for s in controller.state.stats] == [shop.alex.id]
    assert controller.state.expanded_employee_id is None
    assert len(shop.transactions) == 1


async def test_forbidden_mutation_surfaces_notice(shop):
    t = shop.transaction(shop.alex, shop.haircut)
    controller = DashboardController(shop, Caller(id=shop.alex.id, role=UserRole.employee))
    await controller.load()

    result = await controller.delete_transaction(t.id, confirmed=True)

    assert not result.ok
    assert result.error.status_code == 403
    assert controller.state.notice.status == 403
    assert t in shop.transactions


async def test_store_failure_becomes_mutation_failed(shop):
    t = shop.transaction(shop.alex, shop.haircut)
    controller = DashboardController(shop, _admin())
    await controller.load()
    before = controller.state.stats
    shop.fail_mutations = OperationalError("DELETE", {}, Exception("connection reset"))
    shop.calls.clear()

    result = await controller.delete_transaction(t.id, confirmed=True)

    assert not result.ok
    assert result.error.status_code == 503
    assert controller.state.notice.status == 503
    assert controller.state.stats is before
    assert shop.calls == ["delete"]


async def test_same_control_blocked_while_in_flight(shop):
    t = shop.transaction(shop.alex, shop.haircut)
    shop.gate = asyncio.Event()
    controller = DashboardController(shop, _admin())

    first = asyncio.create_task(controller.delete_transaction(t.id, confirmed=True))
    while "transactions" not in shop.calls:
        await asyncio.sleep(0)

    assert controller.is_busy(f"delete:{t.id}")
    second = await controller.delete_transaction(t.id, confirmed=True)
    assert second.busy

    shop.gate.set()
    assert (await first).ok
    assert not controller.is_busy(f"delete:{t.id}")


async def test_mutation_without_caller_is_unauthorized(shop):
    t = shop.transaction(shop.alex, shop.haircut)
    controller = DashboardController(shop, None)

    result = await controller.delete_transaction(t.id, confirmed=True)

    assert result.error.status_code == 401
    assert shop.calls == []


async def test_successful_mutation_clears_notice(shop):
    t = shop.transaction(shop.alex, shop.haircut)
    controller = DashboardController(shop, _admin())
    shop.fail_reads = True
    await controller.load()
    assert controller.state.notice is not None

    shop.fail_reads = False
    result = await controller.delete_transaction(t.id, confirmed=True)

    assert result.ok
    assert controller.state.notice is None
    assert controller.state.ready


async def test_collapse_and_dismiss(shop):
    controller = DashboardController(shop, _admin())
    await controller.load()
    controller.toggle_employee(shop.alex.id)
    shop.fail_reads = True
    await controller.load()
    assert controller.state.expanded_employee_id == shop.alex.id
    assert controller.state.notice is not None

    controller.collapse()
    controller.dismiss_notice()

    assert controller.state.expanded_employee_id is None
    assert controller.state.notice is None
