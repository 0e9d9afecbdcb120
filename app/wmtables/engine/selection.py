from __future__ import annotations

from collections.abc import Iterable


def toggle_row(selection: frozenset[str], row_id: str) -> frozenset[str]:
    if row_id in selection:
        return selection - {row_id}
    return selection | {row_id}


def is_all_selected(selection: frozenset[str], visible_ids: Iterable[str]) -> bool:
    visible = list(visible_ids)
    return bool(visible) and all(row_id in selection for row_id in visible)


def toggle_select_all(selection: frozenset[str], visible_ids: Iterable[str]) -> frozenset[str]:
    """Deselect the visible rows when all are selected, otherwise select them all.

    Selections outside the visible set are left alone.
    """
    visible = list(visible_ids)
    if is_all_selected(selection, visible):
        return selection - set(visible)
    return selection | set(visible)


def select_none() -> frozenset[str]:
    return frozenset()


def prune_selection(selection: frozenset[str], known_ids: Iterable[str]) -> frozenset[str]:
    return selection & frozenset(known_ids)


def selection_summary(count: int, entity_name: str) -> str:
    suffix = "s" if count > 1 else ""
    return f"{count} {entity_name.lower()}{suffix} selected"
