from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.wmtables.core.config import settings
from app.wmtables.engine.columns import ColumnConfig, FilterOption, TableConfig

FilterValue = str | int | float | bool | None


class FilterOptionIn(BaseModel):
    value: str
    label: str


class ColumnConfigIn(BaseModel):
    key: str
    label: str
    sortable: bool = True
    filterable: bool = True
    groupable: bool = True
    width: int | None = None
    min_width: int | None = None
    filter_type: str = "text"
    filter_options: list[FilterOptionIn] = Field(default_factory=list)

    def to_column(self) -> ColumnConfig:
        return ColumnConfig(
            key=self.key,
            label=self.label,
            sortable=self.sortable,
            filterable=self.filterable,
            groupable=self.groupable,
            width=self.width,
            min_width=self.min_width,
            filter_type=self.filter_type,
            filter_options=tuple(FilterOption(option.value, option.label) for option in self.filter_options),
        )


class TableConfigIn(BaseModel):
    columns: list[ColumnConfigIn]
    entity_name: str = "Item"
    entity_name_plural: str = "Items"
    primary_key: str = "id"
    page_size_options: list[int] | None = None
    default_page_size: int | None = None
    selection_scope: str = "filtered"

    def to_table_config(self) -> TableConfig:
        return TableConfig(
            columns=tuple(column.to_column() for column in self.columns),
            entity_name=self.entity_name,
            entity_name_plural=self.entity_name_plural,
            primary_key=self.primary_key,
            page_size_options=tuple(self.page_size_options or settings.TABLE_PAGE_SIZE_OPTIONS),
            default_page_size=self.default_page_size or settings.TABLE_DEFAULT_PAGE_SIZE,
            selection_scope=self.selection_scope,
        )


class SortIn(BaseModel):
    column: str
    direction: str = "asc"


class TableStateIn(BaseModel):
    filters: dict[str, FilterValue] = Field(default_factory=dict)
    sort: SortIn | None = None
    group_by: str | None = None
    collapsed_groups: list[str] = Field(default_factory=list)
    page: int = 1
    page_size: int | None = None
    selection: list[str] = Field(default_factory=list)
    hidden_columns: list[str] = Field(default_factory=list)


class TableActionIn(BaseModel):
    type: str
    column: str | None = None
    value: FilterValue = None
    group_key: str | None = None
    page: int | None = None
    page_size: int | None = None
    row_id: str | None = None


class TableRequest(BaseModel):
    config: TableConfigIn
    rows: list[dict[str, Any]] = Field(default_factory=list)
    state: TableStateIn | None = None
    loading: bool = False
    error: str | None = None


class TableActionRequest(TableRequest):
    action: TableActionIn


class TableExportRequest(BaseModel):
    config: TableConfigIn
    rows: list[dict[str, Any]] = Field(default_factory=list)
    state: TableStateIn | None = None
    file_name: str | None = None
    selected_only: bool = False


class SortOut(BaseModel):
    column: str
    direction: str


class TableStateOut(BaseModel):
    filters: dict[str, str]
    sort: SortOut | None = None
    group_by: str | None = None
    collapsed_groups: list[str]
    page: int
    page_size: int
    selection: list[str]
    hidden_columns: list[str]


class FilterOptionOut(BaseModel):
    value: str
    label: str


class ColumnHeaderOut(BaseModel):
    key: str
    label: str
    sortable: bool
    filterable: bool
    groupable: bool
    filter_type: str
    filter_options: list[FilterOptionOut]
    filter_value: str
    sort_direction: str | None = None
    grouped: bool
    width: int | None = None
    min_width: int | None = None


class RenderedRowOut(BaseModel):
    id: str
    cells: dict[str, str]
    selected: bool


class RenderedGroupOut(BaseModel):
    key: str
    label: str
    count: int
    collapsed: bool
    rows: list[RenderedRowOut]


class PageInfoOut(BaseModel):
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


class SelectionInfoOut(BaseModel):
    count: int
    ids: list[str]
    all_selected: bool
    summary: str


class MenuItemOut(BaseModel):
    key: str
    label: str
    icon: str | None = None
    variant: str


class TableViewOut(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str
    message: str | None = None
    entity_name: str
    entity_name_plural: str
    columns: list[ColumnHeaderOut]
    rows: list[RenderedRowOut]
    groups: list[RenderedGroupOut] | None = None
    pagination: PageInfoOut | None = None
    selection: SelectionInfoOut | None = None
    total_rows: int
    row_actions: list[MenuItemOut]
    bulk_actions: list[MenuItemOut]


class TableResponse(BaseModel):
    view: TableViewOut
    state: TableStateOut
