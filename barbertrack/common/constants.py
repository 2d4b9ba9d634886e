"""Enums and constants for BarberTrack."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    admin = "admin"
    employee = "employee"


# ── Role-based permissions ──────────────────────────────────────────

PERMISSIONS: dict[UserRole, list[str]] = {
    UserRole.employee: [
        "service_type:read",
        "transaction:create",
    ],
    UserRole.admin: [
        "profile:read_all",
        "profile:deactivate",
        "service_type:read",
        "transaction:delete",
    ],
}

# ── Misc constants ──────────────────────────────────────────────────

HISTORY_DISPLAY_CAP = 30          # most recent transactions shown per employee
