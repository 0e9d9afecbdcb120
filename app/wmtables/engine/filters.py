from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from app.wmtables.engine.columns import ColumnConfig, RowT, stringify


def active_filters(columns: Sequence[ColumnConfig[RowT]], filters: Mapping[str, str]) -> list[tuple[ColumnConfig[RowT], str]]:
    """Pair each filterable column with its non-empty filter value."""
    active = []
    for column in columns:
        if not column.filterable:
            continue
        value = filters.get(column.key)
        if value is None or value == "":
            continue
        active.append((column, str(value)))
    return active


def matches_filter(value: Any, filter_value: str, filter_type: str) -> bool:
    if value is None:
        return False
    needle = filter_value.lower()
    if filter_type == "boolean":
        if needle == "true":
            return bool(value)
        if needle == "false":
            return not bool(value)
        return False
    text = stringify(value).lower()
    if filter_type == "select":
        return text == needle
    return needle in text


def apply_filters(
    rows: Sequence[RowT],
    columns: Sequence[ColumnConfig[RowT]],
    filters: Mapping[str, str],
) -> list[RowT]:
    active = [(column, value, column.effective_filter_type) for column, value in active_filters(columns, filters)]
    if not active:
        return list(rows)
    return [
        row
        for row in rows
        if all(matches_filter(column.value_of(row), value, filter_type) for column, value, filter_type in active)
    ]


def clean_filters(filters: Mapping[str, Any]) -> dict[str, str]:
    return {key: str(value) for key, value in filters.items() if value not in (None, "")}
