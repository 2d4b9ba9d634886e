"""Auth dependencies — JWT validation, caller resolution, RBAC enforcement."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from barbertrack.access.policy import Caller
from barbertrack.auth.models import UserSession
from barbertrack.auth.service import hash_token
from barbertrack.common.constants import UserRole
from barbertrack.common.exceptions import ForbiddenException, UnauthorizedException
from barbertrack.config import settings
from barbertrack.database import get_db
from barbertrack.profiles.models import Profile


def extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise UnauthorizedException(detail="Missing or invalid Authorization header.")
    return auth_header[7:]


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_profile(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """Validate JWT, verify session, return the authenticated active Profile."""
    token = extract_bearer(request)

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise UnauthorizedException(detail="Token has expired.")
    except JWTError:
        raise UnauthorizedException(detail="Invalid token.")

    if payload.get("type") != "access":
        raise UnauthorizedException(detail="Invalid token type.")

    # Verify session exists, not revoked, not expired
    result = await db.execute(
        select(UserSession).where(
            UserSession.token_hash == hash_token(token),
            UserSession.is_revoked.is_(False),
            UserSession.expires_at > datetime.now(timezone.utc),
        ),
    )
    if result.scalars().first() is None:
        raise UnauthorizedException(detail="Session invalid or expired.")

    try:
        profile_id = uuid.UUID(payload["sub"])
    except (KeyError, ValueError):
        raise UnauthorizedException(detail="Invalid token subject.")

    profile_result = await db.execute(
        select(Profile).where(Profile.id == profile_id, Profile.is_active.is_(True)),
    )
    profile = profile_result.scalars().first()
    if profile is None:
        raise UnauthorizedException(detail="User account is inactive or not found.")
    return profile


async def get_caller(profile: Profile = Depends(get_current_profile)) -> Caller:
    """Resolve the caller (identity + access policy) for this request."""
    return Caller.from_profile(profile)


# ── Role-based dependency ───────────────────────────────────────────

def require_role(*allowed_roles: UserRole) -> Callable:
    """Return a FastAPI dependency that enforces role membership."""

    async def _check(caller: Caller = Depends(get_caller)) -> Caller:
        if caller.role not in allowed_roles:
            raise ForbiddenException(
                detail=f"Role '{caller.role.value}' is not permitted. Required: {[r.value for r in allowed_roles]}.",
            )
        return caller

    return _check
