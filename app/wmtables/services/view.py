"""Headless view model for one table render.

``build_view`` runs the pipeline and shapes everything a UI binding needs:
headers with sort/group indicators, formatted cells, groups or the current
page, and the selection summary.  It never raises for bad configuration or
missing row fields; those degrade to placeholders.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from app.wmtables.core.logging import log_json
from app.wmtables.engine.actions import BulkActionDispatcher, MenuItem, RowActions
from app.wmtables.engine.columns import ColumnConfig, FilterOption, RowT, TableConfig, stringify
from app.wmtables.engine.grouping import group_label
from app.wmtables.engine.pagination import Page, range_summary
from app.wmtables.engine.pipeline import TablePipeline
from app.wmtables.engine.reducer import selectable_ids
from app.wmtables.engine.selection import is_all_selected, selection_summary
from app.wmtables.engine.sorting import DATE_PREFIX
from app.wmtables.engine.state import TableState

EMPTY_CELL = "-"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnHeader:
    key: str
    label: str
    sortable: bool
    filterable: bool
    groupable: bool
    filter_type: str
    filter_options: list[FilterOption]
    filter_value: str
    sort_direction: str | None
    grouped: bool
    width: int | None
    min_width: int | None


@dataclass(frozen=True)
class RenderedRow:
    id: str
    cells: dict[str, str]
    selected: bool


@dataclass(frozen=True)
class RenderedGroup:
    key: str
    label: str
    count: int
    collapsed: bool
    rows: list[RenderedRow]


@dataclass(frozen=True)
class PageInfo:
    page: int
    page_size: int
    total_pages: int
    total_rows: int
    start_index: int
    end_index: int
    has_previous: bool
    has_next: bool
    page_size_options: list[int]
    summary: str


@dataclass(frozen=True)
class SelectionInfo:
    count: int
    ids: list[str]
    all_selected: bool
    summary: str


@dataclass(frozen=True)
class TableView:
    status: str
    message: str | None
    entity_name: str
    entity_name_plural: str
    columns: list[ColumnHeader]
    rows: list[RenderedRow] = field(default_factory=list)
    groups: list[RenderedGroup] | None = None
    pagination: PageInfo | None = None
    selection: SelectionInfo | None = None
    total_rows: int = 0
    row_actions: list[MenuItem] = field(default_factory=list)
    bulk_actions: list[MenuItem] = field(default_factory=list)


def format_value(value: Any) -> str:
    if value is None or value == "":
        return EMPTY_CELL
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and DATE_PREFIX.match(value):
        return value[:10]
    return stringify(value)


def render_cell(row: RowT, column: ColumnConfig[RowT]) -> str:
    if column.render is not None:
        try:
            return format_value(column.render(row))
        except Exception as exc:
            log_json(
                logger,
                {
                    "event": "table_config_degraded",
                    "reason": "render_failed",
                    "column": column.key,
                    "error_class": exc.__class__.__name__,
                },
                level=logging.WARNING,
            )
    return format_value(column.value_of(row))


def visible_columns(config: TableConfig[RowT], state: TableState) -> list[ColumnConfig[RowT]]:
    columns = [column for column in config.columns if column.key not in state.hidden_columns]
    return columns or list(config.columns)


def _headers(columns: Sequence[ColumnConfig], state: TableState) -> list[ColumnHeader]:
    headers = []
    for column in columns:
        filter_type = column.effective_filter_type
        sort_direction = state.sort.direction if state.sort and state.sort.column == column.key else None
        headers.append(
            ColumnHeader(
                key=column.key,
                label=column.label,
                sortable=column.sortable,
                filterable=column.filterable,
                groupable=column.groupable,
                filter_type=filter_type,
                filter_options=list(column.filter_options) if filter_type == "select" else [],
                filter_value=state.filters.get(column.key, ""),
                sort_direction=sort_direction,
                grouped=state.group_by == column.key,
                width=column.width,
                min_width=column.min_width,
            )
        )
    return headers


def _menu(bulk_actions: BulkActionDispatcher | None) -> list[MenuItem]:
    if bulk_actions is None:
        return []
    return [MenuItem(action.key, action.label, icon=action.icon, variant=action.variant) for action in bulk_actions.available()]


def build_view(
    config: TableConfig[RowT],
    rows: Sequence[RowT],
    state: TableState,
    *,
    loading: bool = False,
    error: object | None = None,
    pipeline: TablePipeline[RowT] | None = None,
    row_actions: RowActions[RowT] | None = None,
    bulk_actions: BulkActionDispatcher | None = None,
) -> TableView:
    columns = visible_columns(config, state)
    base = {
        "entity_name": config.entity_name,
        "entity_name_plural": config.entity_name_plural,
        "columns": _headers(columns, state),
        "row_actions": row_actions.menu_items() if row_actions else [],
        "bulk_actions": _menu(bulk_actions),
    }
    if loading:
        return TableView(status="loading", message="Loading...", **base)
    if error:
        return TableView(status="error", message=str(error), **base)

    pipeline = pipeline or TablePipeline(config)
    result = pipeline.run(rows, state)

    def _render(row: RowT) -> RenderedRow:
        row_id = result.id_of(row)
        cells = {column.key: render_cell(row, column) for column in columns}
        return RenderedRow(id=row_id, cells=cells, selected=row_id in state.selection)

    candidates = selectable_ids(result, config)
    selected = list(dict.fromkeys(row_id for row_id in result.ids.values() if row_id in state.selection))
    selection = SelectionInfo(
        count=len(selected),
        ids=selected,
        all_selected=is_all_selected(state.selection, candidates),
        summary=selection_summary(len(selected), config.entity_name),
    )

    if not result.rows:
        return TableView(
            status="empty",
            message=f"No {config.entity_name_plural.lower()} found.",
            pagination=_page_info(result.page, config),
            selection=selection,
            **base,
        )

    if result.groups is not None:
        groups = []
        for group in result.groups:
            collapsed = group.key in state.collapsed_groups
            groups.append(
                RenderedGroup(
                    key=group.key,
                    label=group_label(group, config),
                    count=group.count,
                    collapsed=collapsed,
                    rows=[] if collapsed else [_render(row) for row in group.rows],
                )
            )
        return TableView(
            status="ready",
            message=None,
            groups=groups,
            selection=selection,
            total_rows=result.total_rows,
            **base,
        )

    return TableView(
        status="ready",
        message=None,
        rows=[_render(row) for row in result.page.rows],
        pagination=_page_info(result.page, config),
        selection=selection,
        total_rows=result.total_rows,
        **base,
    )


def _page_info(page: Page | None, config: TableConfig) -> PageInfo | None:
    if page is None:
        return None
    return PageInfo(
        page=page.page,
        page_size=page.page_size,
        total_pages=page.total_pages,
        total_rows=page.total_rows,
        start_index=page.start_index,
        end_index=page.end_index,
        has_previous=page.has_previous,
        has_next=page.has_next,
        page_size_options=list(config.page_size_options),
        summary=range_summary(page, config.entity_name_plural),
    )
