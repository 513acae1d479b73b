"""``order_by`` query-string support for list endpoints."""

from __future__ import annotations

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from thirdplace.core.database import Base


def sortable_columns(model: type[Base]) -> set[str]:
    """Names of the mapped table columns a client may sort ``model`` by."""
    return {column.name for column in model.__table__.columns}


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    order_by: str | None,
    default_field: str = "created_at",
    default_direction: str = "desc",
) -> Query:  # type: ignore[type-arg]
    """Order ``query`` by a ``"column:direction"`` string such as ``"attempts:desc"``.

    A bare column name sorts ascending, as does an unrecognised direction.
    Anything that is not a column of ``model`` falls back to
    ``default_field`` / ``default_direction``.
    """
    field, direction = default_field, default_direction

    if order_by:
        candidate_field, _, candidate_direction = order_by.partition(":")
        if candidate_field in sortable_columns(model):
            field = candidate_field
            direction = "desc" if candidate_direction == "desc" else "asc"

    order_func = desc if direction == "desc" else asc
    return query.order_by(order_func(getattr(model, field)))
