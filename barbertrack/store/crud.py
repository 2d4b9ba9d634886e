"""Generic per-collection operations used by the domain services.

Every collection (profiles, service_types, transactions) supports the same
five operations: filtered/ordered read, read-by-id, insert, update-by-id
and delete-by-id.  Filters and sort keys use the conventions of
``barbertrack.common.filters``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Sequence, TypeVar, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from barbertrack.common.exceptions import NotFoundException
from barbertrack.common.filters import apply_filters, apply_sorting
from barbertrack.database import Base

M = TypeVar("M", bound=Base)


async def find(
    db: AsyncSession,
    model: type[M],
    filters: Optional[dict[str, Any]] = None,
    sort: Optional[Union[str, Sequence[str]]] = None,
    options: Sequence[Any] = (),
) -> list[M]:
    """Read rows matching *filters*, ordered by *sort*, with loader *options*."""
    query = select(model)
    if options:
        query = query.options(*options)
    query = apply_filters(query, model, filters or {})
    query = apply_sorting(query, model, sort)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_by_id(
    db: AsyncSession,
    model: type[M],
    entity_id: uuid.UUID,
    options: Sequence[Any] = (),
) -> M:
    """Return the row with primary key *entity_id*, or raise 404."""
    query = select(model).where(model.id == entity_id)
    if options:
        query = query.options(*options)
    result = await db.execute(query)
    entity = result.scalars().first()
    if entity is None:
        raise NotFoundException(entity_type=_entity_name(model), entity_id=entity_id)
    return entity


async def insert(db: AsyncSession, model: type[M], values: dict[str, Any]) -> M:
    entity = model(**values)
    db.add(entity)
    await db.flush()
    return entity


async def update_by_id(
    db: AsyncSession,
    model: type[M],
    entity_id: uuid.UUID,
    values: dict[str, Any],
) -> M:
    """Apply *values* to an existing row; bumps ``updated_at`` when present."""
    entity = await get_by_id(db, model, entity_id)
    for key, value in values.items():
        setattr(entity, key, value)
    if hasattr(entity, "updated_at"):
        entity.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return entity


async def delete_by_id(db: AsyncSession, model: type[M], entity_id: uuid.UUID) -> M:
    """Hard-delete a row and return the (now detached) instance."""
    entity = await get_by_id(db, model, entity_id)
    await db.delete(entity)
    await db.flush()
    return entity


def _entity_name(model: type) -> str:
    # ServiceType -> "Service Type"
    name = model.__name__
    return "".join(f" {c}" if c.isupper() and i else c for i, c in enumerate(name))
