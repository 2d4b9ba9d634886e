"""Dashboard Pydantic v2 schemas — render-ready view state."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from barbertrack.profiles.schemas import ProfileBrief


class ServiceColumn(BaseModel):
    """One column of the performance table, in ``display_order``."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    display_order: int


class EmployeeStatsRow(BaseModel):
    """One row of the performance table."""

    employee: ProfileBrief
    total_count: int = 0
    service_counts: dict[uuid.UUID, int] = Field(
        default_factory=dict,
        description="Count per active service type id; render in column order",
    )


class HistoryItem(BaseModel):
    id: uuid.UUID
    service_type_id: uuid.UUID
    service_name: str
    performed_at: datetime
    notes: Optional[str] = None


class NoticeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    level: str
    message: str
    status: Optional[int] = None


class DashboardView(BaseModel):
    """Everything the dashboard page needs to render."""

    ready: bool
    shop_name: Optional[str] = None
    total_transactions: int = Field(0, description="Sum of every row's total")
    active_employees: int = Field(0, description="Rows in the performance table")
    services: list[ServiceColumn] = Field(default_factory=list)
    rows: list[EmployeeStatsRow] = Field(default_factory=list)
    expanded_employee_id: Optional[uuid.UUID] = None
    history: list[HistoryItem] = Field(
        default_factory=list,
        description="Expanded employee's most recent transactions, newest first",
    )
    notice: Optional[NoticeOut] = None
