"""Record store — the async boundary the dashboard controller talks to.

``RecordStore`` is the contract; ``SqlRecordStore`` implements it over the
domain services, opening one ``AsyncSession`` per operation so that
independent reads can run concurrently without sharing a session.
Reads always hit the database; there is no cache.
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from barbertrack.access.policy import Caller
from barbertrack.database import async_session_factory
from barbertrack.profiles.models import Profile
from barbertrack.profiles.service import ProfileService
from barbertrack.service_types.models import ServiceType
from barbertrack.service_types.service import ServiceTypeService
from barbertrack.transactions.models import Transaction
from barbertrack.transactions.service import TransactionService


class RecordStore(Protocol):
    async def list_active_employees(self) -> list[Profile]: ...
    async def list_active_service_types(self) -> list[ServiceType]: ...
    async def list_transactions(self, caller: Caller) -> list[Transaction]: ...
    async def delete_transaction(self, caller: Caller, transaction_id: uuid.UUID) -> None: ...
    async def deactivate_employee(self, caller: Caller, employee_id: uuid.UUID) -> None: ...


class SqlRecordStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, *, write: bool = False) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
                if write:
                    await session.commit()
            except Exception:
                await session.rollback()
                raise

    # ── Reads ───────────────────────────────────────────────────────

    async def list_active_employees(self) -> list[Profile]:
        async with self._session() as db:
            return await ProfileService.list_active_employees(db)

    async def list_active_service_types(self) -> list[ServiceType]:
        async with self._session() as db:
            return await ServiceTypeService.list_active(db)

    async def list_transactions(self, caller: Caller) -> list[Transaction]:
        async with self._session() as db:
            return await TransactionService.list_visible(db, caller)

    # ── Mutations (authorized inside the services) ──────────────────

    async def delete_transaction(self, caller: Caller, transaction_id: uuid.UUID) -> None:
        async with self._session(write=True) as db:
            await TransactionService.delete(db, caller, transaction_id)

    async def deactivate_employee(self, caller: Caller, employee_id: uuid.UUID) -> None:
        async with self._session(write=True) as db:
            await ProfileService.deactivate_employee(db, caller, employee_id)


def get_record_store() -> RecordStore:
    """FastAPI dependency: a store bound to the application session factory."""
    return SqlRecordStore(async_session_factory)
