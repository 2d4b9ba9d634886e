"""Dashboard service — opens a controller per request and renders its state."""

from __future__ import annotations

import uuid
from typing import Any, Optional

from barbertrack.access.policy import Caller
from barbertrack.dashboard.controller import DashboardController
from barbertrack.dashboard.schemas import (
    DashboardView,
    EmployeeStatsRow,
    HistoryItem,
    NoticeOut,
    ServiceColumn,
)
from barbertrack.profiles.schemas import ProfileBrief
from barbertrack.store.record_store import RecordStore


class DashboardService:

    @staticmethod
    async def open(
        store: RecordStore,
        caller: Optional[Caller],
        *,
        expanded: Optional[uuid.UUID] = None,
    ) -> DashboardController:
        """Build a controller, run the full load and apply the selection."""
        controller = DashboardController(store, caller)
        await controller.load()
        if expanded is not None:
            controller.toggle_employee(expanded)
        return controller

    @staticmethod
    def to_view(controller: DashboardController, shop_name: Optional[str] = None) -> DashboardView:
        state = controller.state
        return DashboardView(
            ready=state.ready,
            shop_name=shop_name,
            total_transactions=state.total_transactions,
            active_employees=len(state.stats),
            services=[ServiceColumn.model_validate(s) for s in state.services],
            rows=[
                EmployeeStatsRow(
                    employee=ProfileBrief.model_validate(stat.profile),
                    total_count=stat.total_count,
                    service_counts=stat.service_counts,
                )
                for stat in state.stats
            ],
            expanded_employee_id=state.expanded_employee_id,
            history=[_history_item(t) for t in controller.history()],
            notice=NoticeOut.model_validate(state.notice) if state.notice else None,
        )


def _history_item(transaction: Any) -> HistoryItem:
    return HistoryItem(
        id=transaction.id,
        service_type_id=transaction.service_type_id,
        service_name=transaction.service_type.name,
        performed_at=transaction.performed_at,
        notes=transaction.notes,
    )
