"""Per-employee statistics over the visible transaction log.

``aggregate`` is pure: it never touches the store and returns the same
result for the same inputs.  Only active service types become columns,
so a transaction against a retired service type still counts towards the
employee's total but towards no column.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence


@dataclass
class EmployeeStats:
    """Derived, never persisted.  Recomputed on every load."""

    profile: Any
    transactions: list[Any] = field(default_factory=list)
    total_count: int = 0
    service_counts: dict[uuid.UUID, int] = field(default_factory=dict)


def active_columns(services: Iterable[Any]) -> list[Any]:
    """Active service types in ``display_order`` (stable for ties)."""
    return sorted((s for s in services if s.is_active), key=lambda s: s.display_order)


def aggregate(
    employees: Sequence[Any],
    services: Iterable[Any],
    transactions: Iterable[Any],
) -> list[EmployeeStats]:
    """One ``EmployeeStats`` per employee, in the order *employees* was given."""
    columns = active_columns(services)

    by_employee: dict[uuid.UUID, list[Any]] = {}
    for transaction in transactions:
        by_employee.setdefault(transaction.employee_id, []).append(transaction)

    stats: list[EmployeeStats] = []
    for employee in employees:
        own = list(by_employee.get(employee.id, ()))
        counts = {service.id: 0 for service in columns}
        for transaction in own:
            if transaction.service_type_id in counts:
                counts[transaction.service_type_id] += 1
        stats.append(
            EmployeeStats(
                profile=employee,
                transactions=own,
                total_count=len(own),
                service_counts=counts,
            )
        )
    return stats


def total_transactions(stats: Iterable[EmployeeStats]) -> int:
    return sum(s.total_count for s in stats)
