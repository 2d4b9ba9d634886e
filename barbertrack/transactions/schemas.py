"""Transaction Pydantic schemas for request / response validation."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from barbertrack.profiles.schemas import ProfileBrief
from barbertrack.service_types.schemas import ServiceTypeOut


# ── Requests ────────────────────────────────────────────────────────

class TransactionCreate(BaseModel):
    service_type_id: uuid.UUID
    performed_at: Optional[datetime] = Field(
        None, description="Defaults to the current time when omitted",
    )
    notes: Optional[str] = Field(None, max_length=1000)


# ── Responses ───────────────────────────────────────────────────────

class TransactionOut(BaseModel):
    """Transaction with its joined service type and employee."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    service_type_id: uuid.UUID
    performed_at: datetime
    notes: Optional[str] = None
    service_type: ServiceTypeOut
    profile: ProfileBrief


class TransactionListResponse(BaseModel):
    data: list[TransactionOut]
    total: int
