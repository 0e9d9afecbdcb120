"""Table state and its pure transition functions.

Every transition returns a new ``TableState``; nothing is mutated in place.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from app.wmtables.engine import pagination, selection
from app.wmtables.engine.columns import TableConfig
from app.wmtables.engine.filters import clean_filters
from app.wmtables.engine.pagination import PaginationState
from app.wmtables.engine.sorting import SortState, cycle_sort


def _frozen_filters(filters: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(clean_filters(filters))


@dataclass(frozen=True)
class TableState:
    filters: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    sort: SortState | None = None
    group_by: str | None = None
    collapsed_groups: frozenset[str] = frozenset()
    pagination: PaginationState = field(default_factory=PaginationState)
    selection: frozenset[str] = frozenset()
    hidden_columns: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if not isinstance(self.filters, MappingProxyType):
            object.__setattr__(self, "filters", _frozen_filters(self.filters))
        object.__setattr__(self, "collapsed_groups", frozenset(self.collapsed_groups))
        object.__setattr__(self, "selection", frozenset(self.selection))
        object.__setattr__(self, "hidden_columns", frozenset(self.hidden_columns))

    @classmethod
    def initial(cls, config: TableConfig) -> "TableState":
        return cls(pagination=PaginationState(page=1, page_size=config.default_page_size))

    def filter_key(self) -> tuple[tuple[str, str], ...]:
        return tuple(sorted(self.filters.items()))


def set_filter(state: TableState, config: TableConfig, column_key: str, value: str | None) -> TableState:
    column = config.column(column_key)
    if column is None or not column.filterable:
        return state
    filters = dict(state.filters)
    if value in (None, ""):
        filters.pop(column_key, None)
    else:
        filters[column_key] = str(value)
    return replace(state, filters=_frozen_filters(filters), pagination=pagination.go_to_first(state.pagination))


def clear_filters(state: TableState) -> TableState:
    return replace(state, filters=_frozen_filters({}), pagination=pagination.go_to_first(state.pagination))


def toggle_sort(state: TableState, config: TableConfig, column_key: str) -> TableState:
    return replace(state, sort=cycle_sort(state.sort, config, column_key))


def toggle_group_by(state: TableState, config: TableConfig, column_key: str) -> TableState:
    column = config.column(column_key)
    if column is None or not column.groupable:
        return state
    group_by = None if state.group_by == column_key else column_key
    return replace(state, group_by=group_by, collapsed_groups=frozenset())


def toggle_group_collapsed(state: TableState, group_key: str) -> TableState:
    if state.group_by is None:
        return state
    collapsed = state.collapsed_groups
    collapsed = collapsed - {group_key} if group_key in collapsed else collapsed | {group_key}
    return replace(state, collapsed_groups=collapsed)


def change_page_size(state: TableState, config: TableConfig, page_size: int) -> TableState:
    return replace(state, pagination=pagination.set_page_size(state.pagination, page_size, config.default_page_size))


def toggle_column_visibility(state: TableState, config: TableConfig, column_key: str) -> TableState:
    if config.column(column_key) is None:
        return state
    hidden = state.hidden_columns
    if column_key in hidden:
        return replace(state, hidden_columns=hidden - {column_key})
    # at least one column stays visible
    if len(set(config.column_keys) - hidden) <= 1:
        return state
    return replace(state, hidden_columns=hidden | {column_key})


def normalize_state(
    state: TableState,
    config: TableConfig,
    *,
    total_rows: int,
    known_ids: Iterable[str] | None = None,
) -> TableState:
    """Drop state naming removed columns, clamp the page and prune the selection."""
    keys = set(config.column_keys)
    filters = {
        key: value
        for key, value in state.filters.items()
        if key in keys and config.column(key).filterable
    }
    sort = state.sort
    if sort is not None:
        column = config.column(sort.column)
        if column is None or not column.sortable:
            sort = None
    group_by = state.group_by
    if group_by is not None:
        column = config.column(group_by)
        if column is None or not column.groupable:
            group_by = None
    page_size = state.pagination.page_size if state.pagination.page_size >= 1 else config.default_page_size
    pages = pagination.total_pages(total_rows, page_size)
    current = PaginationState(page=pagination.clamp_page(state.pagination.page, pages), page_size=page_size)
    selected = state.selection if known_ids is None else selection.prune_selection(state.selection, known_ids)
    return TableState(
        filters=filters,
        sort=sort,
        group_by=group_by,
        collapsed_groups=state.collapsed_groups if group_by == state.group_by else frozenset(),
        pagination=current,
        selection=selected,
        hidden_columns=state.hidden_columns & keys,
    )
