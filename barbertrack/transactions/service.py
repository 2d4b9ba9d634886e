"""Transaction service — visibility-scoped reads, logging and deletion.

Reads go through ``caller.policy.scope`` so the SQL itself carries the
visibility rule; a non-admin caller's query never selects another
employee's rows.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from barbertrack.access.policy import Caller
from barbertrack.common.audit import create_audit_entry
from barbertrack.common.exceptions import ValidationException
from barbertrack.common.filters import apply_filters, apply_sorting
from barbertrack.profiles.models import Profile
from barbertrack.service_types.models import ServiceType
from barbertrack.store import crud
from barbertrack.transactions.models import Transaction
from barbertrack.transactions.schemas import TransactionCreate

logger = logging.getLogger(__name__)

_JOINED = (
    selectinload(Transaction.service_type),
    selectinload(Transaction.profile),
)


class TransactionService:

    @staticmethod
    async def list_visible(
        db: AsyncSession,
        caller: Caller,
        *,
        employee_id: Optional[uuid.UUID] = None,
    ) -> list[Transaction]:
        """Transactions visible to *caller*, newest first, with joins loaded."""
        query = select(Transaction).options(*_JOINED)
        query = caller.policy.scope(query, caller)
        query = apply_filters(query, Transaction, {"employee_id": employee_id})
        query = apply_sorting(query, Transaction, ["-performed_at", "-created_at"])
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def create(
        db: AsyncSession,
        caller: Caller,
        data: TransactionCreate,
        *,
        ip_address: Optional[str] = None,
    ) -> Transaction:
        """Log a service performed by *caller*."""
        caller.policy.authorize(caller, "transaction:create")

        employee = await crud.get_by_id(db, Profile, caller.id)
        if not employee.is_active:
            raise ValidationException({"employee_id": ["Profile is deactivated."]})

        service_type = await crud.get_by_id(db, ServiceType, data.service_type_id)
        if not service_type.is_active:
            raise ValidationException(
                {"service_type_id": [f"Service type '{service_type.name}' is not active."]},
            )

        transaction = await crud.insert(
            db,
            Transaction,
            {
                "employee_id": caller.id,
                "service_type_id": service_type.id,
                "performed_at": data.performed_at or datetime.now(timezone.utc),
                "notes": data.notes,
            },
        )
        await create_audit_entry(
            db,
            action="create",
            entity_type="transaction",
            entity_id=transaction.id,
            actor_id=caller.id,
            new_values={"service_type_id": str(service_type.id)},
            ip_address=ip_address,
        )
        logger.info("Transaction %s logged by %s (%s)", transaction.id, caller.id, service_type.name)
        await db.refresh(
            transaction,
            attribute_names=["performed_at", "created_at", "updated_at", "service_type", "profile"],
        )
        return transaction

    @staticmethod
    async def delete(
        db: AsyncSession,
        caller: Caller,
        transaction_id: uuid.UUID,
        *,
        ip_address: Optional[str] = None,
    ) -> None:
        """Hard-delete a transaction.  Admin only."""
        caller.policy.authorize(caller, "transaction:delete")

        transaction = await crud.delete_by_id(db, Transaction, transaction_id)
        await create_audit_entry(
            db,
            action="delete",
            entity_type="transaction",
            entity_id=transaction_id,
            actor_id=caller.id,
            old_values={
                "employee_id": str(transaction.employee_id),
                "service_type_id": str(transaction.service_type_id),
                "performed_at": transaction.performed_at.isoformat(),
            },
            ip_address=ip_address,
        )
        logger.info("Transaction %s deleted by %s", transaction_id, caller.id)
