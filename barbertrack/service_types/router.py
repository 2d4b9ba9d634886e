"""Service-type router — the active catalogue, in column order."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from barbertrack.access.policy import Caller
from barbertrack.auth.dependencies import get_caller
from barbertrack.database import get_db
from barbertrack.service_types.schemas import ServiceTypeOut
from barbertrack.service_types.service import ServiceTypeService

router = APIRouter(prefix="", tags=["service-types"])


@router.get("", response_model=list[ServiceTypeOut])
async def list_service_types(
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    caller.policy.authorize(caller, "service_type:read")
    return await ServiceTypeService.list_active(db)
