from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Generic

from app.wmtables.engine.columns import DEFAULT_PAGE_SIZE, RowT


@dataclass(frozen=True)
class PaginationState:
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class Page(Generic[RowT]):
    rows: tuple[RowT, ...]
    page: int
    page_size: int
    total_rows: int
    total_pages: int

    @property
    def start_index(self) -> int:
        if not self.total_rows:
            return 0
        return (self.page - 1) * self.page_size + 1

    @property
    def end_index(self) -> int:
        return min(self.page * self.page_size, self.total_rows)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def total_pages(total_rows: int, page_size: int) -> int:
    if page_size < 1:
        return 1
    return max(1, math.ceil(total_rows / page_size))


def clamp_page(page: int, pages: int) -> int:
    return min(max(1, page), max(1, pages))


def paginate(rows: Sequence[RowT], state: PaginationState) -> Page[RowT]:
    page_size = state.page_size if state.page_size >= 1 else DEFAULT_PAGE_SIZE
    pages = total_pages(len(rows), page_size)
    page = clamp_page(state.page, pages)
    start = (page - 1) * page_size
    return Page(
        rows=tuple(rows[start : start + page_size]),
        page=page,
        page_size=page_size,
        total_rows=len(rows),
        total_pages=pages,
    )


def go_to_first(state: PaginationState) -> PaginationState:
    return replace(state, page=1)


def go_to_previous(state: PaginationState) -> PaginationState:
    return replace(state, page=max(1, state.page - 1))


def go_to_next(state: PaginationState, total_rows: int) -> PaginationState:
    return replace(state, page=min(total_pages(total_rows, state.page_size), state.page + 1))


def go_to_last(state: PaginationState, total_rows: int) -> PaginationState:
    return replace(state, page=total_pages(total_rows, state.page_size))


def go_to_page(state: PaginationState, page: int, total_rows: int) -> PaginationState:
    return replace(state, page=clamp_page(page, total_pages(total_rows, state.page_size)))


def set_page_size(state: PaginationState, page_size: int, default: int = DEFAULT_PAGE_SIZE) -> PaginationState:
    return PaginationState(page=1, page_size=page_size if page_size >= 1 else default)


def range_summary(page: Page, entity_name_plural: str) -> str:
    return f"Showing {page.start_index} to {page.end_index} of {page.total_rows} {entity_name_plural.lower()}"
