"""Dashboard router — aggregated performance view and its two mutations.

Reads are open to every authenticated caller; what they contain is decided
by the caller's access policy.  Mutations are not role-gated here: the
record store rejects them for non-admin callers, and that rejection is
returned as-is.
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from barbertrack.access.policy import Caller
from barbertrack.auth.dependencies import get_current_profile
from barbertrack.common.exceptions import NotFoundException, ValidationException
from barbertrack.dashboard.controller import DashboardController, MutationResult
from barbertrack.dashboard.schemas import DashboardView, HistoryItem
from barbertrack.dashboard.service import DashboardService
from barbertrack.profiles.models import Profile
from barbertrack.store.record_store import RecordStore, get_record_store

router = APIRouter()


def _raise_for(result: MutationResult) -> None:
    if result.cancelled:
        raise ValidationException({"confirm": ["Confirmation is required for this action."]})
    if result.error is not None:
        raise result.error


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=DashboardView)
async def dashboard(
    expanded: Optional[uuid.UUID] = Query(None, description="Employee whose history to include"),
    profile: Profile = Depends(get_current_profile),
    store: RecordStore = Depends(get_record_store),
):
    """Per-employee performance table, optionally with one expanded history."""
    controller = await DashboardService.open(store, Caller.from_profile(profile), expanded=expanded)
    return DashboardService.to_view(controller, profile.shop_name)


# ── GET /employees/{id}/history ─────────────────────────────────────

@router.get("/employees/{employee_id}/history", response_model=list[HistoryItem])
async def employee_history(
    employee_id: uuid.UUID,
    profile: Profile = Depends(get_current_profile),
    store: RecordStore = Depends(get_record_store),
):
    """The 30 most recent transactions of one employee, newest first."""
    controller = await DashboardService.open(store, Caller.from_profile(profile), expanded=employee_id)
    if controller.state.stats_for(employee_id) is None:
        raise NotFoundException(entity_type="Employee", entity_id=employee_id)
    return DashboardService.to_view(controller).history


# ── DELETE /transactions/{id} ───────────────────────────────────────

@router.delete("/transactions/{transaction_id}", response_model=DashboardView)
async def delete_transaction(
    transaction_id: uuid.UUID,
    confirm: bool = Query(False),
    expanded: Optional[uuid.UUID] = Query(None),
    profile: Profile = Depends(get_current_profile),
    store: RecordStore = Depends(get_record_store),
):
    """Delete one transaction, then return the reloaded dashboard."""
    controller = DashboardController(store, Caller.from_profile(profile))
    _raise_for(await controller.delete_transaction(transaction_id, confirmed=confirm))
    if expanded is not None:
        controller.toggle_employee(expanded)
    return DashboardService.to_view(controller, profile.shop_name)


# ── POST /employees/{id}/deactivate ─────────────────────────────────

@router.post("/employees/{employee_id}/deactivate", response_model=DashboardView)
async def deactivate_employee(
    employee_id: uuid.UUID,
    confirm: bool = Query(False),
    expanded: Optional[uuid.UUID] = Query(None),
    profile: Profile = Depends(get_current_profile),
    store: RecordStore = Depends(get_record_store),
):
    """Deactivate an employee, then return the reloaded dashboard."""
    controller = DashboardController(store, Caller.from_profile(profile))
    _raise_for(await controller.deactivate_employee(employee_id, confirmed=confirm))
    if expanded is not None:
        controller.toggle_employee(expanded)
    return DashboardService.to_view(controller, profile.shop_name)
