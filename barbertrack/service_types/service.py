"""Service-type reads.  Service types are seed data; no mutations here."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from barbertrack.service_types.models import ServiceType
from barbertrack.store import crud


class ServiceTypeService:

    @staticmethod
    async def list_active(db: AsyncSession) -> list[ServiceType]:
        """Active service types, ``display_order`` ascending."""
        return await crud.find(
            db,
            ServiceType,
            filters={"is_active": True},
            sort=["display_order", "name"],
        )
