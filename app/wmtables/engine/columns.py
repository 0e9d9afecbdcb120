"""Declarative column and table configuration.

Columns read row values either through a typed ``accessor`` callable or by
key.  Keys may be dotted paths (``"warehouse.name"``) and rows may be plain
mappings or arbitrary objects; a missing field always reads as ``None``.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Generic, TypeVar

from app.wmtables.core.logging import log_json

RowT = TypeVar("RowT")

FILTER_TYPES = ("text", "select", "date", "boolean")
DEFAULT_PRIMARY_KEY = "id"
DEFAULT_PAGE_SIZE = 25
DEFAULT_PAGE_SIZE_OPTIONS = (10, 25, 50, 100)

logger = logging.getLogger(__name__)
MAX_REPORTED_DEGRADATIONS = 256


@dataclass(frozen=True)
class FilterOption:
    value: str
    label: str


@dataclass(frozen=True)
class ColumnConfig(Generic[RowT]):
    key: str
    label: str
    sortable: bool = True
    filterable: bool = True
    groupable: bool = True
    width: int | None = None
    min_width: int | None = None
    filter_type: str = "text"
    filter_options: tuple[FilterOption, ...] = ()
    render: Callable[[RowT], Any] | None = field(default=None, compare=False)
    accessor: Callable[[RowT], Any] | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "filter_options", tuple(self.filter_options))

    @property
    def effective_filter_type(self) -> str:
        if self.filter_type not in FILTER_TYPES:
            report_degradation("unknown_filter_type", column=self.key, filter_type=self.filter_type)
            return "text"
        if self.filter_type == "select" and not self.filter_options:
            report_degradation("select_without_options", column=self.key)
            return "text"
        return self.filter_type

    def value_of(self, row: RowT) -> Any:
        if self.accessor is None:
            return read_field(row, self.key)
        try:
            return self.accessor(row)
        except (AttributeError, KeyError, IndexError, TypeError):
            return None


@dataclass(frozen=True)
class TableConfig(Generic[RowT]):
    columns: tuple[ColumnConfig[RowT], ...]
    entity_name: str = "Item"
    entity_name_plural: str = "Items"
    primary_key: str = DEFAULT_PRIMARY_KEY
    page_size_options: tuple[int, ...] = DEFAULT_PAGE_SIZE_OPTIONS
    default_page_size: int = DEFAULT_PAGE_SIZE
    # "filtered" selects across every page, "page" only the rows on screen.
    selection_scope: str = "filtered"

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "page_size_options", tuple(self.page_size_options))
        if self.default_page_size < 1:
            object.__setattr__(self, "default_page_size", DEFAULT_PAGE_SIZE)
        if self.selection_scope not in {"filtered", "page"}:
            object.__setattr__(self, "selection_scope", "filtered")

    @property
    def column_keys(self) -> tuple[str, ...]:
        return tuple(column.key for column in self.columns)

    def column(self, key: str | None) -> ColumnConfig[RowT] | None:
        if key is None:
            return None
        for column in self.columns:
            if column.key == key:
                return column
        return None

    def signature(self) -> tuple:
        return tuple(
            (
                column.key,
                column.filter_type,
                column.filter_options,
                column.filterable,
                column.sortable,
                column.groupable,
                id(column.accessor),
            )
            for column in self.columns
        )


def read_field(row: Any, path: str) -> Any:
    if row is None:
        return None
    if isinstance(row, Mapping) and path in row:
        return row[path]
    current = row
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def _primary_key_value(row: Any, primary_key: str) -> str | None:
    value = read_field(row, primary_key)
    if value is None or value == "":
        return None
    return stringify(value)


def row_identifiers(rows: Sequence[Any], primary_key: str) -> list[str]:
    """One id per row, taken from the primary key.

    When no row carries the key every row is identified by its index.  Rows
    missing the key among keyed rows get a ``__row_<index>`` id that never
    collides with a real key.
    """
    keys = [_primary_key_value(row, primary_key) for row in rows]
    if rows and all(key is None for key in keys):
        report_degradation("primary_key_missing", column=primary_key)
        return [str(index) for index in range(len(rows))]
    if any(key is None for key in keys):
        report_degradation("primary_key_partial", column=primary_key)
    taken = {key for key in keys if key is not None}
    identifiers = []
    for index, key in enumerate(keys):
        if key is None:
            key = f"__row_{index}"
            while key in taken:
                key = f"_{key}"
            taken.add(key)
        identifiers.append(key)
    return identifiers


class _DegradationLog:
    """Remembers recently reported degradations so each is logged once, up to ``limit`` entries."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self._seen: OrderedDict[tuple[str, str], None] = OrderedDict()

    def __len__(self) -> int:
        return len(self._seen)

    def first_time(self, marker: tuple[str, str]) -> bool:
        if marker in self._seen:
            self._seen.move_to_end(marker)
            return False
        self._seen[marker] = None
        while len(self._seen) > self.limit:
            self._seen.popitem(last=False)
        return True

    def clear(self) -> None:
        self._seen.clear()


_reported_degradations = _DegradationLog(MAX_REPORTED_DEGRADATIONS)


def report_degradation(reason: str, **context: Any) -> None:
    if not _reported_degradations.first_time((reason, str(context.get("column")))):
        return
    log_json(logger, {"event": "table_config_degraded", "reason": reason, **context}, level=logging.WARNING)
