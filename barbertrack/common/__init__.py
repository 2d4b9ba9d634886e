"""Common module — shared utilities for BarberTrack."""

from barbertrack.common.audit import AuditTrail, create_audit_entry
from barbertrack.common.constants import HISTORY_DISPLAY_CAP, PERMISSIONS, UserRole
from barbertrack.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    MutationFailedException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
    register_exception_handlers,
)
from barbertrack.common.filters import apply_filters, apply_sorting

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "UserRole",
    "PERMISSIONS",
    "HISTORY_DISPLAY_CAP",
    # Exceptions
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "MutationFailedException",
    "NotFoundException",
    "UnauthorizedException",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_sorting",
]
