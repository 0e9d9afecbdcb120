"""Memoized filter -> sort -> group/paginate pipeline.

Each stage keeps the last result together with the inputs it was computed
from, the same way a UI framework memo hook would.  Stage inputs are the
row collection (by identity), the column signature and the relevant slice
of ``TableState``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Generic

from app.wmtables.engine.columns import RowT, TableConfig, row_identifiers
from app.wmtables.engine.filters import apply_filters
from app.wmtables.engine.grouping import RowGroup, group_rows
from app.wmtables.engine.pagination import Page, paginate
from app.wmtables.engine.sorting import sort_rows
from app.wmtables.engine.state import TableState


@dataclass
class _Memo:
    rows: Sequence[Any]
    key: tuple
    value: Any


@dataclass(frozen=True)
class PipelineResult(Generic[RowT]):
    rows: tuple[RowT, ...]
    groups: tuple[RowGroup[RowT], ...] | None
    page: Page[RowT] | None
    ids: dict[int, str]

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    @property
    def visible_rows(self) -> tuple[RowT, ...]:
        if self.page is not None:
            return self.page.rows
        return self.rows

    def id_of(self, row: RowT) -> str:
        return self.ids[id(row)]

    def filtered_ids(self) -> list[str]:
        return [self.ids[id(row)] for row in self.rows]

    def page_ids(self) -> list[str]:
        return [self.ids[id(row)] for row in self.visible_rows]


class TablePipeline(Generic[RowT]):
    def __init__(self, config: TableConfig[RowT]) -> None:
        self.config = config
        self.hits = 0
        self.misses = 0
        self._memos: dict[str, _Memo] = {}

    def reconfigure(self, config: TableConfig[RowT]) -> None:
        self.config = config
        self._memos.clear()

    def _memoized(self, stage: str, rows: Sequence[Any], key: tuple, compute):
        memo = self._memos.get(stage)
        if memo is not None and memo.rows is rows and memo.key == key:
            self.hits += 1
            return memo.value
        self.misses += 1
        value = compute()
        self._memos[stage] = _Memo(rows=rows, key=key, value=value)
        return value

    def identifiers(self, rows: Sequence[RowT]) -> dict[int, str]:
        key = (len(rows), self.config.primary_key)

        def _compute() -> dict[int, str]:
            ids = row_identifiers(rows, self.config.primary_key)
            return {id(row): row_id for row, row_id in zip(rows, ids)}

        return self._memoized("ids", rows, key, _compute)

    def filtered(self, rows: Sequence[RowT], state: TableState) -> tuple[RowT, ...]:
        key = (len(rows), self.config.signature(), state.filter_key())
        return self._memoized(
            "filter", rows, key, lambda: tuple(apply_filters(rows, self.config.columns, state.filters))
        )

    def sorted(self, rows: Sequence[RowT], state: TableState) -> tuple[RowT, ...]:
        filtered = self.filtered(rows, state)
        key = (len(rows), self.config.signature(), state.filter_key(), state.sort)
        return self._memoized("sort", rows, key, lambda: tuple(sort_rows(filtered, self.config.columns, state.sort)))

    def grouped(self, rows: Sequence[RowT], state: TableState) -> tuple[RowGroup[RowT], ...] | None:
        ordered = self.sorted(rows, state)
        key = (len(rows), self.config.signature(), state.filter_key(), state.sort, state.group_by)

        def _compute():
            groups = group_rows(ordered, self.config.columns, state.group_by)
            return tuple(groups) if groups is not None else None

        return self._memoized("group", rows, key, _compute)

    def run(self, rows: Sequence[RowT], state: TableState) -> PipelineResult[RowT]:
        ordered = self.sorted(rows, state)
        groups = self.grouped(rows, state)
        page = paginate(ordered, state.pagination) if groups is None else None
        return PipelineResult(rows=ordered, groups=groups, page=page, ids=self.identifiers(rows))
