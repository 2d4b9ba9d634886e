"""Transaction router — log, list and delete performed services.

Listing is open to every authenticated caller; the access policy decides
which rows come back.  Only employees log transactions, and only for
themselves.  Only admins delete.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from barbertrack.access.policy import Caller
from barbertrack.auth.dependencies import get_caller, require_role
from barbertrack.common.constants import UserRole
from barbertrack.common.exceptions import ValidationException
from barbertrack.database import get_db
from barbertrack.transactions.schemas import (
    TransactionCreate,
    TransactionListResponse,
    TransactionOut,
)
from barbertrack.transactions.service import TransactionService

router = APIRouter(prefix="", tags=["transactions"])


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    employee_id: Optional[uuid.UUID] = Query(None),
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    transactions = await TransactionService.list_visible(db, caller, employee_id=employee_id)
    return TransactionListResponse(
        data=[TransactionOut.model_validate(t) for t in transactions],
        total=len(transactions),
    )


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=TransactionOut, status_code=201)
async def create_transaction(
    body: TransactionCreate,
    request: Request,
    caller: Caller = Depends(require_role(UserRole.employee)),
    db: AsyncSession = Depends(get_db),
):
    return await TransactionService.create(db, caller, body, ip_address=_client_ip(request))


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: uuid.UUID,
    request: Request,
    confirm: bool = Query(False),
    caller: Caller = Depends(require_role(UserRole.admin)),
    db: AsyncSession = Depends(get_db),
):
    if not confirm:
        raise ValidationException({"confirm": ["Confirmation is required for this action."]})
    await TransactionService.delete(db, caller, transaction_id, ip_address=_client_ip(request))
    return Response(status_code=204)
