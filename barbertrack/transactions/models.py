"""Transaction ORM model — one service performed by one employee."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from barbertrack.database import Base

if TYPE_CHECKING:
    from barbertrack.profiles.models import Profile
    from barbertrack.service_types.models import ServiceType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        sa.Index("ix_transactions_employee_performed", "employee_id", "performed_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    # RESTRICT: soft-deleting a profile must never take its history with it
    employee_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("profiles.id", ondelete="RESTRICT"),
        nullable=False,
    )
    service_type_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("service_types.id", ondelete="RESTRICT"),
        nullable=False,
    )
    performed_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )

    # ── Relationships (joined reads) ────────────────────────────────
    profile: Mapped[Profile] = relationship(back_populates="transactions")
    service_type: Mapped[ServiceType] = relationship()

    def __repr__(self) -> str:
        return f"<Transaction {self.id} employee={self.employee_id} service={self.service_type_id}>"
