"""Generic query filtering for service search endpoints."""

from __future__ import annotations

from typing import Any, Dict, Type

from sqlalchemy import or_
from sqlalchemy.orm import Query

SUPPORTED_OPERATORS = {"eq", "ne", "in", "ilike", "gte", "lte"}


def apply_filters(query: Query, model: Type[Any], filters: Dict[str, Any]) -> Query:
    """
    Apply `filters` to `query`.

    A plain value means equality. A dict `{"operator": op, "value": v}`
    selects one of SUPPORTED_OPERATORS. `None` values and unknown columns are
    ignored. A list of column names under `"__search__"` with a `"q"` value
    builds a case-insensitive OR across those columns.
    """
    for key, raw in filters.items():
        if raw is None:
            continue

        if key == "__search__":
            columns = [getattr(model, c) for c in raw.get("columns", []) if hasattr(model, c)]
            term = raw.get("q")
            if columns and term:
                query = query.filter(or_(*[col.ilike(f"%{term}%") for col in columns]))
            continue

        column = getattr(model, key, None)
        if column is None:
            continue

        if isinstance(raw, dict):
            operator = raw.get("operator", "eq")
            value = raw.get("value")
        else:
            operator, value = "eq", raw

        if operator not in SUPPORTED_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {operator}")

        if operator == "eq":
            query = query.filter(column == value)
        elif operator == "ne":
            query = query.filter(column != value)
        elif operator == "in":
            query = query.filter(column.in_(list(value)))
        elif operator == "ilike":
            query = query.filter(column.ilike(f"%{value}%"))
        elif operator == "gte":
            query = query.filter(column >= value)
        elif operator == "lte":
            query = query.filter(column <= value)

    return query
