"""Profile service — active roster reads and employee deactivation."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from barbertrack.access.policy import Caller
from barbertrack.common.audit import create_audit_entry
from barbertrack.common.constants import UserRole
from barbertrack.common.exceptions import ValidationException
from barbertrack.profiles.models import Profile
from barbertrack.store import crud

logger = logging.getLogger(__name__)


class ProfileService:
    """Static service class for profile operations."""

    @staticmethod
    async def list_active_employees(db: AsyncSession) -> list[Profile]:
        """The active roster: employees with ``is_active``, by name."""
        return await crud.find(
            db,
            Profile,
            filters={"role": UserRole.employee, "is_active": True},
            sort="full_name",
        )

    @staticmethod
    async def get(db: AsyncSession, profile_id: uuid.UUID) -> Profile:
        return await crud.get_by_id(db, Profile, profile_id)

    @staticmethod
    async def deactivate_employee(
        db: AsyncSession,
        caller: Caller,
        employee_id: uuid.UUID,
        *,
        ip_address: Optional[str] = None,
    ) -> Profile:
        """Soft-delete an employee.  Their transactions are left untouched."""
        caller.policy.authorize(caller, "profile:deactivate")

        employee = await crud.get_by_id(db, Profile, employee_id)
        if employee.role != UserRole.employee:
            raise ValidationException(
                {"employee_id": ["Only employee profiles can be deactivated."]},
            )
        if not employee.is_active:
            return employee

        employee = await crud.update_by_id(db, Profile, employee_id, {"is_active": False})
        await create_audit_entry(
            db,
            action="deactivate",
            entity_type="profile",
            entity_id=employee.id,
            actor_id=caller.id,
            old_values={"is_active": True},
            new_values={"is_active": False},
            ip_address=ip_address,
        )
        logger.info("Employee %s deactivated by %s", employee.id, caller.id)
        return employee
