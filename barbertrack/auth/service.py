"""Auth service — password hashing, sign-up, sign-in, JWT sessions."""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from barbertrack.auth.models import UserSession
from barbertrack.auth.schemas import SignUpRequest
from barbertrack.common.audit import create_audit_entry
from barbertrack.common.constants import UserRole
from barbertrack.common.exceptions import (
    ConflictError,
    UnauthorizedException,
    ValidationException,
)
from barbertrack.config import settings
from barbertrack.profiles.models import Profile
from barbertrack.store import crud

logger = logging.getLogger(__name__)

_PBKDF2_ITERATIONS = 240_000


# ── Passwords ───────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    """Return ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), _PBKDF2_ITERATIONS,
    ).hex()
    return f"pbkdf2_sha256${_PBKDF2_ITERATIONS}${salt}${digest}"


def verify_password(password: str, stored: str) -> bool:
    try:
        scheme, iterations, salt, expected = stored.split("$", 3)
    except ValueError:
        return False
    if scheme != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations),
    ).hex()
    return hmac.compare_digest(digest, expected)


# ── JWT helpers ─────────────────────────────────────────────────────

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def create_access_token(profile_id: uuid.UUID, role: UserRole) -> tuple[str, int]:
    """Return (encoded_jwt, expires_in_seconds)."""
    expires_in = settings.JWT_EXPIRY_HOURS * 3600
    payload = {
        "sub": str(profile_id),
        "role": role.value,
        "type": "access",
        "jti": uuid.uuid4().hex,
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_in


def _normalise_email(email: str) -> str:
    return email.strip().lower()


# ── Sign-up ─────────────────────────────────────────────────────────

async def sign_up(
    db: AsyncSession,
    data: SignUpRequest,
    *,
    ip_address: Optional[str] = None,
) -> Profile:
    """Create a profile.  Admins must name their shop; an employee's shop name is ignored."""
    email = _normalise_email(data.email)
    shop_name = (data.shop_name or "").strip() or None

    errors: dict[str, list[str]] = {}
    if data.role == UserRole.admin and not shop_name:
        errors["shop_name"] = ["Shop name is required for admin accounts."]
    if len(data.password) < settings.PASSWORD_MIN_LENGTH:
        errors["password"] = [
            f"Password must have at least {settings.PASSWORD_MIN_LENGTH} characters.",
        ]
    if errors:
        raise ValidationException(errors)

    existing = await crud.find(db, Profile, filters={"email": email})
    if existing:
        logger.info("Duplicate sign-up attempt for %s", email)
        raise ConflictError(field="email", value=email)

    try:
        profile = await crud.insert(
            db,
            Profile,
            {
                "email": email,
                "password_hash": hash_password(data.password),
                "full_name": data.full_name.strip(),
                "role": data.role,
                "shop_name": shop_name if data.role == UserRole.admin else None,
                "is_active": True,
            },
        )
    except IntegrityError:
        # a concurrent sign-up took the email between the check and the insert
        logger.info("Duplicate sign-up race for %s", email)
        raise ConflictError(field="email", value=email) from None
    await create_audit_entry(
        db,
        action="sign_up",
        entity_type="profile",
        entity_id=profile.id,
        actor_id=profile.id,
        new_values={"email": email, "role": data.role.value},
        ip_address=ip_address,
    )
    logger.info("Profile %s signed up as %s", profile.id, data.role.value)
    return profile


# ── Sign-in ─────────────────────────────────────────────────────────

async def sign_in(
    db: AsyncSession,
    email: str,
    password: str,
    *,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> tuple[str, int, Profile]:
    """Verify credentials and open a session.  Returns (token, expires_in, profile)."""
    email = _normalise_email(email)
    matches = await crud.find(db, Profile, filters={"email": email})
    profile = matches[0] if matches else None

    if profile is None or not verify_password(password, profile.password_hash):
        logger.warning("Failed sign-in for %s", email)
        raise UnauthorizedException(detail="Invalid email or password.")
    if not profile.is_active:
        logger.warning("Sign-in refused for deactivated profile %s", profile.id)
        raise UnauthorizedException(detail="This account has been deactivated.")

    token, expires_in = create_access_token(profile.id, profile.role)
    db.add(
        UserSession(
            profile_id=profile.id,
            token_hash=hash_token(token),
            ip_address=ip_address,
            user_agent=user_agent,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )
    )
    await db.flush()

    await create_audit_entry(
        db,
        action="sign_in",
        entity_type="user_session",
        entity_id=profile.id,
        actor_id=profile.id,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return token, expires_in, profile


# ── Sign-out ────────────────────────────────────────────────────────

async def revoke_session(db: AsyncSession, token_hash: str) -> None:
    """Mark a session as revoked by its token hash."""
    result = await db.execute(
        select(UserSession).where(UserSession.token_hash == token_hash),
    )
    session = result.scalars().first()
    if session:
        session.is_revoked = True
        await db.flush()
