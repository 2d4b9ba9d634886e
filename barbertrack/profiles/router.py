"""Profile router — active roster and employee deactivation.

Routes:
    /profiles/employees              — Active employees (admin)
    /profiles/{id}                   — One profile (admin, or the profile itself)
    /profiles/{id}/deactivate        — Soft-delete an employee (admin)
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from barbertrack.access.policy import Caller
from barbertrack.auth.dependencies import get_caller, require_role
from barbertrack.common.constants import UserRole
from barbertrack.common.exceptions import ForbiddenException, ValidationException
from barbertrack.database import get_db
from barbertrack.profiles.schemas import EmployeeListResponse, ProfileOut
from barbertrack.profiles.service import ProfileService

router = APIRouter(prefix="", tags=["profiles"])


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


# ── GET /employees ──────────────────────────────────────────────────

@router.get("/employees", response_model=EmployeeListResponse)
async def list_employees(
    caller: Caller = Depends(require_role(UserRole.admin)),
    db: AsyncSession = Depends(get_db),
):
    employees = await ProfileService.list_active_employees(db)
    return EmployeeListResponse(
        data=[ProfileOut.model_validate(e) for e in employees],
        total=len(employees),
    )


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{profile_id}", response_model=ProfileOut)
async def get_profile(
    profile_id: uuid.UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    if profile_id != caller.id and not caller.policy.can("profile:read_all"):
        raise ForbiddenException(detail="You can only view your own profile.")
    return await ProfileService.get(db, profile_id)


# ── POST /{id}/deactivate ───────────────────────────────────────────

@router.post("/{profile_id}/deactivate", response_model=ProfileOut)
async def deactivate_employee(
    profile_id: uuid.UUID,
    request: Request,
    confirm: bool = Query(False),
    caller: Caller = Depends(require_role(UserRole.admin)),
    db: AsyncSession = Depends(get_db),
):
    """Deactivate an employee.  Their transaction history is kept."""
    if not confirm:
        raise ValidationException({"confirm": ["Confirmation is required for this action."]})
    return await ProfileService.deactivate_employee(
        db, caller, profile_id, ip_address=_client_ip(request),
    )
