"""Profile ORM model — shop administrators and employees.

Profiles are never hard-deleted; an admin deactivates an employee by
clearing ``is_active`` and the employee's transactions stay in place.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from barbertrack.common.constants import UserRole
from barbertrack.database import Base

if TYPE_CHECKING:
    from barbertrack.auth.models import UserSession
    from barbertrack.transactions.models import Transaction


class Profile(Base):
    """An authenticated identity with a role."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        sa.Enum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.employee,
    )
    shop_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=True, server_default=sa.true(),
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )

    # ── Relationships ───────────────────────────────────────────────
    transactions: Mapped[list[Transaction]] = relationship(
        back_populates="profile",
        passive_deletes="all",
    )
    sessions: Mapped[list[UserSession]] = relationship(
        back_populates="profile",
    )

    def __repr__(self) -> str:
        return f"<Profile {self.email!r} ({self.role.value})>"
