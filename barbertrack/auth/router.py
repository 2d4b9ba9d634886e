"""Auth router — sign-up, sign-in, sign-out, current caller profile."""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from barbertrack.auth.dependencies import extract_bearer, get_current_profile
from barbertrack.auth.schemas import (
    MeResponse,
    SignInRequest,
    SignUpRequest,
    TokenResponse,
    UserInfo,
)
from barbertrack.auth.service import hash_token, revoke_session, sign_in, sign_up
from barbertrack.common.audit import create_audit_entry
from barbertrack.common.constants import PERMISSIONS
from barbertrack.common.rate_limit import limiter
from barbertrack.config import settings
from barbertrack.database import get_db
from barbertrack.profiles.models import Profile

router = APIRouter(prefix="", tags=["auth"])


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


# ── POST /sign-up ───────────────────────────────────────────────────

@router.post("/sign-up", response_model=UserInfo, status_code=201)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def sign_up_route(
    request: Request,
    body: SignUpRequest,
    db: AsyncSession = Depends(get_db),
):
    profile = await sign_up(db, body, ip_address=_client_ip(request))
    return UserInfo.model_validate(profile)


# ── POST /sign-in ───────────────────────────────────────────────────

@router.post("/sign-in", response_model=TokenResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def sign_in_route(
    request: Request,
    body: SignInRequest,
    db: AsyncSession = Depends(get_db),
):
    token, expires_in, profile = await sign_in(
        db,
        body.email,
        body.password,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return TokenResponse(
        access_token=token,
        expires_in=expires_in,
        user=UserInfo.model_validate(profile),
    )


# ── POST /sign-out — Revoke current session ────────────────────────

@router.post("/sign-out")
async def sign_out_route(
    request: Request,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    await revoke_session(db, hash_token(extract_bearer(request)))

    await create_audit_entry(
        db,
        action="sign_out",
        entity_type="user_session",
        entity_id=profile.id,
        actor_id=profile.id,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )

    return {"message": "Signed out successfully"}


# ── GET /me — Current caller ───────────────────────────────────────

@router.get("/me", response_model=MeResponse)
async def me(profile: Profile = Depends(get_current_profile)):
    return MeResponse(
        **UserInfo.model_validate(profile).model_dump(),
        permissions=PERMISSIONS.get(profile.role, []),
    )
