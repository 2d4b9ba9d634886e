"""Dashboard controller — load sequencing, view state and mutations.

Load graph::

    employees ─┐
               ├─> transactions ─> aggregate
    services ──┘

Employees and service types are fetched concurrently; transactions are
fetched only after both resolve, and aggregation runs last.  Every
successful mutation triggers a full reload from the store; local state is
never patched in place.  Failures are logged and surfaced as a ``Notice``
instead of propagating to the consumer.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from barbertrack.access.policy import Caller
from barbertrack.common.constants import HISTORY_DISPLAY_CAP
from barbertrack.common.exceptions import (
    AppException,
    MutationFailedException,
    UnauthorizedException,
)
from barbertrack.dashboard.aggregator import (
    EmployeeStats,
    active_columns,
    aggregate,
    total_transactions,
)
from barbertrack.store.record_store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class Notice:
    """A blocking, user-visible message."""

    level: str
    message: str
    status: Optional[int] = None


@dataclass
class MutationResult:
    ok: bool
    cancelled: bool = False
    busy: bool = False
    error: Optional[AppException] = None


@dataclass
class DashboardState:
    ready: bool = False
    employees: list[Any] = field(default_factory=list)
    services: list[Any] = field(default_factory=list)
    stats: list[EmployeeStats] = field(default_factory=list)
    expanded_employee_id: Optional[uuid.UUID] = None
    notice: Optional[Notice] = None

    @property
    def total_transactions(self) -> int:
        return total_transactions(self.stats)

    def stats_for(self, employee_id: uuid.UUID) -> Optional[EmployeeStats]:
        for stat in self.stats:
            if stat.profile.id == employee_id:
                return stat
        return None


def recent_history(transactions: Iterable[Any], cap: int = HISTORY_DISPLAY_CAP) -> list[Any]:
    """Newest-first by ``performed_at``, truncated to *cap* after sorting."""
    ordered = sorted(transactions, key=lambda t: t.performed_at, reverse=True)
    return ordered[:cap]


class DashboardController:
    """Per-session orchestrator of the access policy, store and aggregator."""

    def __init__(
        self,
        store: RecordStore,
        caller: Optional[Caller],
        *,
        history_cap: int = HISTORY_DISPLAY_CAP,
    ) -> None:
        self._store = store
        self._caller = caller
        self.history_cap = history_cap
        self.state = DashboardState()
        self._closed = False
        self._pending: set[str] = set()

    @property
    def caller(self) -> Optional[Caller]:
        return self._caller

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Discard the controller; in-flight loads will not write state."""
        self._closed = True

    # ── Loading ─────────────────────────────────────────────────────

    async def load(self) -> bool:
        """Rebuild the whole view state from the store.  Returns success.

        A successful load clears any notice left by an earlier failure.
        """
        caller = self._caller
        if caller is None:
            logger.info("Dashboard load deferred: caller identity not resolved")
            if not self._closed:
                self.state.ready = False
            return False

        try:
            employees, services = await asyncio.gather(
                self._store.list_active_employees(),
                self._store.list_active_service_types(),
            )
            transactions = await self._store.list_transactions(caller)
        except (AppException, SQLAlchemyError, OSError):
            logger.exception("Dashboard load failed for caller %s", caller.id)
            if not self._closed:
                self.state.notice = Notice(
                    level="error", message="Could not load dashboard data.", status=503,
                )
            return False

        if self._closed:
            logger.debug("Dashboard load finished after close; result discarded")
            return False

        roster = caller.policy.roster(employees, caller)
        visible = caller.policy.filter(transactions, caller)
        stats = aggregate(roster, services, visible)

        expanded = self.state.expanded_employee_id
        if expanded is not None and not any(s.profile.id == expanded for s in stats):
            expanded = None

        self.state = DashboardState(
            ready=True,
            employees=roster,
            services=active_columns(services),
            stats=stats,
            expanded_employee_id=expanded,
        )
        return True

    # ── Selection ───────────────────────────────────────────────────

    def toggle_employee(self, employee_id: uuid.UUID) -> Optional[uuid.UUID]:
        """Expand *employee_id*, or collapse it if it is already expanded.

        Ids that are not a row of the loaded stats leave the view collapsed.
        """
        if self.state.expanded_employee_id == employee_id:
            self.state.expanded_employee_id = None
        elif self.state.stats_for(employee_id) is None:
            self.state.expanded_employee_id = None
        else:
            self.state.expanded_employee_id = employee_id
        return self.state.expanded_employee_id

    def collapse(self) -> None:
        self.state.expanded_employee_id = None

    def history(self) -> list[Any]:
        """The expanded employee's most recent transactions (display cap)."""
        if self.state.expanded_employee_id is None:
            return []
        stat = self.state.stats_for(self.state.expanded_employee_id)
        if stat is None:
            return []
        return recent_history(stat.transactions, self.history_cap)

    def dismiss_notice(self) -> None:
        self.state.notice = None

    # ── Mutations ───────────────────────────────────────────────────

    def is_busy(self, control: str) -> bool:
        return control in self._pending

    async def delete_transaction(
        self, transaction_id: uuid.UUID, *, confirmed: bool,
    ) -> MutationResult:
        return await self._mutate(
            f"delete:{transaction_id}",
            "delete the transaction",
            confirmed,
            lambda caller: self._store.delete_transaction(caller, transaction_id),
        )

    async def deactivate_employee(
        self, employee_id: uuid.UUID, *, confirmed: bool,
    ) -> MutationResult:
        return await self._mutate(
            f"deactivate:{employee_id}",
            "deactivate the employee",
            confirmed,
            lambda caller: self._store.deactivate_employee(caller, employee_id),
        )

    async def _mutate(
        self,
        control: str,
        action: str,
        confirmed: bool,
        operation: Callable[[Caller], Awaitable[None]],
    ) -> MutationResult:
        if not confirmed:
            return MutationResult(ok=False, cancelled=True)
        if self._caller is None:
            return self._fail(UnauthorizedException())
        if control in self._pending:
            return MutationResult(ok=False, busy=True)

        self._pending.add(control)
        try:
            try:
                await operation(self._caller)
            except AppException as exc:
                logger.warning("Could not %s (%s): %s", action, control, exc.detail)
                return self._fail(exc)
            except (SQLAlchemyError, OSError) as exc:
                logger.exception("Store error while trying to %s (%s)", action, control)
                return self._fail(MutationFailedException(action, type(exc).__name__))

            await self.load()
            return MutationResult(ok=True)
        finally:
            self._pending.discard(control)

    def _fail(self, exc: AppException) -> MutationResult:
        if not self._closed:
            self.state.notice = Notice(level="error", message=exc.detail, status=exc.status_code)
        return MutationResult(ok=False, error=exc)
