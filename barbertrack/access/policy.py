"""Access policy — transaction visibility and mutation rights per caller.

Two variants exist, ``AdminPolicy`` and ``EmployeePolicy``.  A caller's
policy is chosen once, when the ``Caller`` is built from the resolved
identity, and every store read and mutation consults ``caller.policy``.

Visibility is enforced twice: ``scope`` narrows the SQL query so another
employee's rows never leave the database, and ``filter`` applies the same
rule to an in-memory collection.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Protocol, TypeVar

from sqlalchemy import Select

from barbertrack.common.constants import PERMISSIONS, UserRole
from barbertrack.common.exceptions import ForbiddenException
from barbertrack.transactions.models import Transaction

logger = logging.getLogger(__name__)


class HasEmployeeId(Protocol):
    employee_id: uuid.UUID


class HasId(Protocol):
    id: uuid.UUID


T = TypeVar("T", bound=HasEmployeeId)
P = TypeVar("P", bound=HasId)

TransactionPredicate = Callable[[HasEmployeeId], bool]


# ── Caller ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Caller:
    """The authenticated identity performing an operation."""

    id: uuid.UUID
    role: UserRole
    policy: AccessPolicy = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        policy = policy_for(self.role)
        object.__setattr__(self, "policy", policy)
        object.__setattr__(self, "role", policy.role)

    @classmethod
    def from_profile(cls, profile: Any) -> Caller:
        return cls(id=profile.id, role=profile.role)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin


# ── Policies ────────────────────────────────────────────────────────

class AccessPolicy:
    """Base policy.  Subclasses define the visibility rule."""

    role: UserRole

    def predicate(self, caller: Caller) -> TransactionPredicate:
        raise NotImplementedError

    def scope(self, query: Select, caller: Caller) -> Select:
        """Narrow a ``select(Transaction)`` to what *caller* may see."""
        raise NotImplementedError

    def roster(self, employees: Iterable[P], caller: Caller) -> list[P]:
        """Employees whose rows *caller* may see on the dashboard."""
        raise NotImplementedError

    def filter(self, transactions: Iterable[T], caller: Caller) -> list[T]:
        keep = self.predicate(caller)
        return [t for t in transactions if keep(t)]

    def can(self, action: str) -> bool:
        return action in PERMISSIONS.get(self.role, [])

    def authorize(self, caller: Caller, action: str) -> None:
        """Raise ``ForbiddenException`` unless *caller* may perform *action*."""
        if not self.can(action):
            logger.warning(
                "Denied %s for caller %s (role=%s)", action, caller.id, caller.role.value,
            )
            raise ForbiddenException(
                detail=f"Role '{caller.role.value}' is not permitted to perform '{action}'.",
            )


class AdminPolicy(AccessPolicy):
    role = UserRole.admin

    def predicate(self, caller: Caller) -> TransactionPredicate:
        return lambda _transaction: True

    def scope(self, query: Select, caller: Caller) -> Select:
        return query

    def roster(self, employees: Iterable[P], caller: Caller) -> list[P]:
        return list(employees)


class EmployeePolicy(AccessPolicy):
    role = UserRole.employee

    def predicate(self, caller: Caller) -> TransactionPredicate:
        own_id = caller.id
        return lambda transaction: transaction.employee_id == own_id

    def scope(self, query: Select, caller: Caller) -> Select:
        return query.where(Transaction.employee_id == caller.id)

    def roster(self, employees: Iterable[P], caller: Caller) -> list[P]:
        return [e for e in employees if e.id == caller.id]


_POLICIES: dict[UserRole, AccessPolicy] = {
    UserRole.admin: AdminPolicy(),
    UserRole.employee: EmployeePolicy(),
}


def policy_for(role: UserRole | str) -> AccessPolicy:
    """Return the policy for *role*; unknown roles get the employee policy."""
    try:
        role = UserRole(role)
    except ValueError:
        logger.warning("Unknown role %r; falling back to employee policy", role)
        role = UserRole.employee
    return _POLICIES[role]


def visible_transactions(caller: Caller) -> TransactionPredicate:
    """Predicate accepting exactly the transactions *caller* may see."""
    return caller.policy.predicate(caller)
