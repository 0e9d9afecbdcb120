"""JSON-safe persistence of a table's view state.

Hydration is forgiving: unknown columns are dropped and malformed values
fall back to defaults, so a stale saved view never breaks the table.
"""

from __future__ import annotations

from typing import Any

from app.wmtables.engine.columns import TableConfig
from app.wmtables.engine.pagination import PaginationState
from app.wmtables.engine.sorting import ASC, DESC, SortState
from app.wmtables.engine.state import TableState


def serialize_state(state: TableState) -> dict[str, Any]:
    return {
        "filters": dict(state.filters),
        "sort": {"column": state.sort.column, "direction": state.sort.direction} if state.sort else None,
        "group_by": state.group_by,
        "collapsed_groups": sorted(state.collapsed_groups),
        "page": state.pagination.page,
        "page_size": state.pagination.page_size,
        "selection": sorted(state.selection),
        "hidden_columns": sorted(state.hidden_columns),
    }


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    return [str(item) for item in value if item is not None]


def hydrate_state(payload: dict[str, Any] | None, config: TableConfig) -> TableState:
    default = TableState.initial(config)
    if not isinstance(payload, dict):
        return default
    allowed = set(config.column_keys)

    raw_filters = payload.get("filters")
    filters = {}
    if isinstance(raw_filters, dict):
        filters = {str(key): str(value) for key, value in raw_filters.items() if str(key) in allowed and value not in (None, "")}

    sort = None
    raw_sort = payload.get("sort")
    if isinstance(raw_sort, dict) and isinstance(raw_sort.get("column"), str) and raw_sort["column"] in allowed:
        direction = DESC if str(raw_sort.get("direction", ASC)).lower() == DESC else ASC
        sort = SortState(column=str(raw_sort["column"]), direction=direction)

    group_by = payload.get("group_by")
    resolved_group = group_by if isinstance(group_by, str) and group_by in allowed else None

    return TableState(
        filters=filters,
        sort=sort,
        group_by=resolved_group,
        collapsed_groups=frozenset(_string_list(payload.get("collapsed_groups"))) if resolved_group else frozenset(),
        pagination=PaginationState(
            page=_positive_int(payload.get("page"), 1),
            page_size=_positive_int(payload.get("page_size"), config.default_page_size),
        ),
        selection=frozenset(_string_list(payload.get("selection"))),
        hidden_columns=frozenset(key for key in _string_list(payload.get("hidden_columns")) if key in allowed),
    )
