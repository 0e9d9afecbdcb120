from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from functools import cmp_to_key
from typing import Any

from app.wmtables.engine.columns import ColumnConfig, RowT, TableConfig, stringify

ASC = "asc"
DESC = "desc"
DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")


@dataclass(frozen=True)
class SortState:
    column: str
    direction: str = ASC


def _epoch_ms(value: Any) -> float | None:
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return moment.timestamp() * 1000
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc).timestamp() * 1000
    if isinstance(value, str) and DATE_PREFIX.match(value):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            try:
                parsed = datetime.fromisoformat(value[:10])
            except ValueError:
                return None
        return _epoch_ms(parsed)
    return None


def _number(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value)) if value == value else None
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def _cmp(left: Any, right: Any) -> int:
    return (left > right) - (left < right)


def compare_values(left: Any, right: Any) -> int:
    """Compare two non-null values: dates, then numbers, then case-insensitive text."""
    left_ms, right_ms = _epoch_ms(left), _epoch_ms(right)
    if left_ms is not None and right_ms is not None:
        return _cmp(left_ms, right_ms)
    left_num, right_num = _number(left), _number(right)
    if left_num is not None and right_num is not None:
        return _cmp(left_num, right_num)
    return _cmp(stringify(left).lower(), stringify(right).lower())


def sort_rows(rows: Sequence[RowT], columns: Sequence[ColumnConfig[RowT]], sort: SortState | None) -> list[RowT]:
    if sort is None:
        return list(rows)
    column = next((item for item in columns if item.key == sort.column), None)
    if column is None or not column.sortable:
        return list(rows)
    sign = -1 if sort.direction == DESC else 1

    def _compare(left_row: RowT, right_row: RowT) -> int:
        left, right = column.value_of(left_row), column.value_of(right_row)
        if left is None and right is None:
            return 0
        if left is None:
            return 1
        if right is None:
            return -1
        return sign * compare_values(left, right)

    return sorted(rows, key=cmp_to_key(_compare))


def cycle_sort(current: SortState | None, config: TableConfig, column_key: str) -> SortState | None:
    """none -> asc -> desc -> none on one column; another column restarts at asc."""
    column = config.column(column_key)
    if column is None or not column.sortable:
        return current
    if current is None or current.column != column_key:
        return SortState(column=column_key, direction=ASC)
    if current.direction == ASC:
        return SortState(column=column_key, direction=DESC)
    return None
