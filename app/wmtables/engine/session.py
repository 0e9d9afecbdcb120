from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Generic

from app.wmtables.engine.actions import BulkActionDispatcher, RowActions
from app.wmtables.engine.columns import ColumnConfig, RowT, TableConfig
from app.wmtables.engine.pipeline import PipelineResult, TablePipeline
from app.wmtables.engine.reducer import reduce, selectable_ids
from app.wmtables.engine.state import TableState, normalize_state
from app.wmtables.services.view import TableView, build_view


class TableSession(Generic[RowT]):
    """One interactive table: configuration, the current rows and the derived state.

    All operations replace ``state`` with a new value.  Bulk and row actions
    are forwarded to the caller's callbacks and never touch the selection.
    """

    def __init__(
        self,
        config: TableConfig[RowT],
        rows: Sequence[RowT] = (),
        *,
        state: TableState | None = None,
        row_actions: RowActions[RowT] | None = None,
        bulk_actions: BulkActionDispatcher | None = None,
        on_selection_change: Callable[[list[str]], Any] | None = None,
    ) -> None:
        self.config = config
        self.rows: Sequence[RowT] = rows
        self.pipeline: TablePipeline[RowT] = TablePipeline(config)
        self.row_actions = row_actions or RowActions()
        self.bulk_actions = bulk_actions or BulkActionDispatcher()
        self.on_selection_change = on_selection_change
        self.state = self._normalized(state or TableState.initial(config))

    def _normalized(self, state: TableState) -> TableState:
        result = self.pipeline.run(self.rows, state)
        return normalize_state(state, self.config, total_rows=result.total_rows, known_ids=result.ids.values())

    def _apply(self, action: dict[str, Any]) -> TableState:
        previous = self.state.selection
        self.state = reduce(self.state, action, config=self.config, rows=self.rows, pipeline=self.pipeline)
        if self.state.selection != previous and self.on_selection_change is not None:
            self.on_selection_change(self.selected_ids())
        return self.state

    def result(self) -> PipelineResult[RowT]:
        return self.pipeline.run(self.rows, self.state)

    def set_rows(self, rows: Sequence[RowT]) -> TableState:
        self.rows = rows
        previous = self.state.selection
        self.state = self._normalized(self.state)
        if self.state.selection != previous and self.on_selection_change is not None:
            self.on_selection_change(self.selected_ids())
        return self.state

    def set_columns(self, columns: Sequence[ColumnConfig[RowT]]) -> TableState:
        self.config = TableConfig(
            columns=tuple(columns),
            entity_name=self.config.entity_name,
            entity_name_plural=self.config.entity_name_plural,
            primary_key=self.config.primary_key,
            page_size_options=self.config.page_size_options,
            default_page_size=self.config.default_page_size,
            selection_scope=self.config.selection_scope,
        )
        self.pipeline.reconfigure(self.config)
        self.state = self._normalized(self.state)
        return self.state

    def set_filter(self, column_key: str, value: str | None) -> TableState:
        return self._apply({"type": "set_filter", "column": column_key, "value": value})

    def clear_filters(self) -> TableState:
        return self._apply({"type": "clear_filters"})

    def toggle_sort(self, column_key: str) -> TableState:
        return self._apply({"type": "toggle_sort", "column": column_key})

    def toggle_group_by(self, column_key: str) -> TableState:
        return self._apply({"type": "toggle_group", "column": column_key})

    def toggle_group_collapsed(self, group_key: str) -> TableState:
        return self._apply({"type": "toggle_group_collapsed", "group_key": group_key})

    def toggle_column_visibility(self, column_key: str) -> TableState:
        return self._apply({"type": "toggle_column", "column": column_key})

    def set_page_size(self, page_size: int) -> TableState:
        return self._apply({"type": "set_page_size", "page_size": page_size})

    def go_to_first(self) -> TableState:
        return self._apply({"type": "go_to_first"})

    def go_to_previous(self) -> TableState:
        return self._apply({"type": "go_to_previous"})

    def go_to_next(self) -> TableState:
        return self._apply({"type": "go_to_next"})

    def go_to_last(self) -> TableState:
        return self._apply({"type": "go_to_last"})

    def go_to_page(self, page: int) -> TableState:
        return self._apply({"type": "go_to_page", "page": page})

    def toggle_row(self, row_id: str) -> TableState:
        return self._apply({"type": "toggle_row", "row_id": row_id})

    def toggle_select_all(self) -> TableState:
        return self._apply({"type": "toggle_select_all"})

    def select_none(self) -> TableState:
        return self._apply({"type": "select_none"})

    def selected_ids(self) -> list[str]:
        """Selected ids in the order the rows appear in the source collection."""
        ordered = [row_id for row_id in self.result().ids.values() if row_id in self.state.selection]
        return list(dict.fromkeys(ordered))

    def selectable_ids(self) -> list[str]:
        return selectable_ids(self.result(), self.config)

    def dispatch_bulk_action(self, action_key: str) -> Any:
        return self.bulk_actions.dispatch(action_key, self.selected_ids())

    def invoke_row_action(self, action_key: str, row: RowT) -> Any:
        return self.row_actions.invoke(action_key, row)

    def view(self, *, loading: bool = False, error: object | None = None) -> TableView:
        return build_view(
            self.config,
            self.rows,
            self.state,
            loading=loading,
            error=error,
            pipeline=self.pipeline,
            row_actions=self.row_actions,
            bulk_actions=self.bulk_actions,
        )
