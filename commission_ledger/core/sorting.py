"""Ordering helper shared by the list endpoints."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from commission_ledger.core.database import Base


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    order_by: str | None,
    default_field: str = "created_at",
    default_direction: str = "desc",
    allowed_fields: Iterable[str] | None = None,
) -> Query:  # type: ignore[type-arg]
    """Apply a ``field:direction`` sort string to a query.

    Unknown fields, and fields outside ``allowed_fields`` when it is given,
    fall back to the default ordering instead of raising. A secondary sort on
    ``id`` keeps pagination stable when many rows share the sort value.
    """
    field = default_field
    direction = default_direction
    allowed = set(allowed_fields) if allowed_fields is not None else None

    if order_by:
        candidate_field, _, candidate_direction = order_by.partition(":")
        candidate_direction = candidate_direction or "asc"
        if hasattr(model, candidate_field) and (allowed is None or candidate_field in allowed):
            field = candidate_field
            if candidate_direction in ("asc", "desc"):
                direction = candidate_direction

    order_func = asc if direction == "asc" else desc
    query = query.order_by(order_func(getattr(model, field)))
    if field != "id" and hasattr(model, "id"):
        query = query.order_by(asc(model.id))
    return query
