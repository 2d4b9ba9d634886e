"""ServiceType Pydantic schemas."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict


class ServiceTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    display_order: int
    is_active: bool
