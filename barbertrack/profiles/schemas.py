"""Profile Pydantic schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from barbertrack.common.constants import UserRole


class ProfileBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    email: str


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    full_name: str
    role: UserRole
    shop_name: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None


class EmployeeListResponse(BaseModel):
    data: list[ProfileOut]
    total: int
