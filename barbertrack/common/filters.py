"""Generic equality / range filtering and sorting for record-store queries."""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

from sqlalchemy import Select, and_
from sqlalchemy.orm import InstrumentedAttribute


# ── Sorting ─────────────────────────────────────────────────────────

def apply_sorting(
    query: Select,
    model: Any,
    sort: Optional[Union[str, Sequence[str]]],
) -> Select:
    """
    Parse sort keys like ``"-performed_at"`` and apply ORDER BY.

    * Leading ``-`` → DESC; otherwise ASC.
    * Accepts a single key or a sequence of keys (applied in order).
    * Unknown columns raise ``ValueError``; sort keys never reach raw SQL.
    """
    if not sort:
        return query

    keys = [sort] if isinstance(sort, str) else list(sort)
    for key in keys:
        descending = key.startswith("-")
        col_name = key.lstrip("-")
        col = _get_column(model, col_name)
        if col is None:
            raise ValueError(f"Unknown sort column '{col_name}' for {model.__name__}.")
        query = query.order_by(col.desc() if descending else col.asc())
    return query


# ── Generic filtering ──────────────────────────────────────────────

def apply_filters(
    query: Select,
    model: Any,
    filters: dict[str, Any],
) -> Select:
    """
    Apply a dict of filter parameters to a SQLAlchemy ``Select``.

    Key suffixes determine the operator:

    ============  ==================
    Suffix        Operator
    ============  ==================
    (none)        ``==``
    ``__from``    ``>=``
    ``__to``      ``<=``
    ``__in``      ``IN (…)``
    ============  ==================

    ``None`` values are silently skipped.
    """
    conditions: list = []

    for key, value in filters.items():
        if value is None:
            continue

        if key.endswith("__from"):
            col = _get_column(model, key.removesuffix("__from"))
            if col is not None:
                conditions.append(col >= value)

        elif key.endswith("__to"):
            col = _get_column(model, key.removesuffix("__to"))
            if col is not None:
                conditions.append(col <= value)

        elif key.endswith("__in"):
            col = _get_column(model, key.removesuffix("__in"))
            if col is not None:
                conditions.append(col.in_(value))

        else:
            col = _get_column(model, key)
            if col is not None:
                conditions.append(col == value)

    if conditions:
        query = query.where(and_(*conditions))

    return query


# ── Internal helper ─────────────────────────────────────────────────

def _get_column(model: Any, name: str) -> Optional[InstrumentedAttribute]:
    """Safely retrieve a mapped column attribute by name."""
    return getattr(model, name, None)
