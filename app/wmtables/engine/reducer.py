from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from app.wmtables.engine import pagination, selection, state as transitions
from app.wmtables.engine.columns import RowT, TableConfig
from app.wmtables.engine.errors import UnknownActionError
from app.wmtables.engine.pipeline import PipelineResult, TablePipeline
from app.wmtables.engine.state import TableState

ACTION_TYPES = (
    "set_filter",
    "clear_filters",
    "toggle_sort",
    "toggle_group",
    "toggle_group_collapsed",
    "set_page_size",
    "go_to_first",
    "go_to_previous",
    "go_to_next",
    "go_to_last",
    "go_to_page",
    "toggle_row",
    "toggle_select_all",
    "select_none",
    "toggle_column",
)


def selectable_ids(result: PipelineResult, config: TableConfig) -> list[str]:
    if config.selection_scope == "page":
        return result.page_ids()
    return result.filtered_ids()


def _text(action: Mapping[str, Any], key: str) -> str:
    value = action.get(key)
    return "" if value is None else str(value)


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def reduce(
    state: TableState,
    action: Mapping[str, Any],
    *,
    config: TableConfig[RowT],
    rows: Sequence[RowT],
    pipeline: TablePipeline[RowT] | None = None,
) -> TableState:
    """Apply one named action to ``state`` and return the next state."""
    action_type = _text(action, "type")
    pipeline = pipeline or TablePipeline(config)

    if action_type == "set_filter":
        return transitions.set_filter(state, config, _text(action, "column"), action.get("value"))
    if action_type == "clear_filters":
        return transitions.clear_filters(state)
    if action_type == "toggle_sort":
        return transitions.toggle_sort(state, config, _text(action, "column"))
    if action_type == "toggle_group":
        return transitions.toggle_group_by(state, config, _text(action, "column"))
    if action_type == "toggle_group_collapsed":
        return transitions.toggle_group_collapsed(state, _text(action, "group_key"))
    if action_type == "set_page_size":
        return transitions.change_page_size(state, config, _as_int(action.get("page_size"), config.default_page_size))
    if action_type == "select_none":
        return replace(state, selection=selection.select_none())
    if action_type == "toggle_column":
        return transitions.toggle_column_visibility(state, config, _text(action, "column"))
    if action_type not in ACTION_TYPES:
        raise UnknownActionError("table", action_type)

    result = pipeline.run(rows, state)
    current = state.pagination
    if action_type == "go_to_first":
        return replace(state, pagination=pagination.go_to_first(current))
    if action_type == "go_to_previous":
        return replace(state, pagination=pagination.go_to_previous(current))
    if action_type == "go_to_next":
        return replace(state, pagination=pagination.go_to_next(current, result.total_rows))
    if action_type == "go_to_last":
        return replace(state, pagination=pagination.go_to_last(current, result.total_rows))
    if action_type == "go_to_page":
        page = _as_int(action.get("page"), current.page)
        return replace(state, pagination=pagination.go_to_page(current, page, result.total_rows))
    if action_type == "toggle_row":
        row_id = _text(action, "row_id")
        if row_id not in set(result.ids.values()):
            return state
        return replace(state, selection=selection.toggle_row(state.selection, row_id))
    # toggle_select_all
    return replace(state, selection=selection.toggle_select_all(state.selection, selectable_ids(result, config)))
