from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic

from app.wmtables.core.logging import log_json
from app.wmtables.engine.columns import RowT
from app.wmtables.engine.errors import UnknownActionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MenuItem:
    key: str
    label: str
    icon: str | None = None
    variant: str = "default"


@dataclass(frozen=True)
class CustomAction(Generic[RowT]):
    key: str
    label: str
    on_click: Callable[[RowT], Any] = field(compare=False)
    icon: str | None = None
    variant: str = "default"


@dataclass(frozen=True)
class BulkAction:
    key: str
    label: str
    icon: str | None = None
    variant: str = "outline"


class RowActions(Generic[RowT]):
    """Per-row menu that forwards to caller callbacks; menu order is view, edit, custom, delete."""

    def __init__(
        self,
        *,
        on_view: Callable[[RowT], Any] | None = None,
        on_edit: Callable[[RowT], Any] | None = None,
        on_delete: Callable[[RowT], Any] | None = None,
        custom_actions: Sequence[CustomAction[RowT]] = (),
    ) -> None:
        self._callbacks: dict[str, Callable[[RowT], Any]] = {}
        self._items: list[MenuItem] = []
        if on_view is not None:
            self._register(MenuItem("view", "View", icon="eye"), on_view)
        if on_edit is not None:
            self._register(MenuItem("edit", "Edit", icon="edit"), on_edit)
        for action in custom_actions:
            self._register(MenuItem(action.key, action.label, icon=action.icon, variant=action.variant), action.on_click)
        if on_delete is not None:
            self._register(MenuItem("delete", "Delete", icon="trash", variant="destructive"), on_delete)

    def _register(self, item: MenuItem, callback: Callable[[RowT], Any]) -> None:
        self._items.append(item)
        self._callbacks[item.key] = callback

    def __bool__(self) -> bool:
        return bool(self._items)

    def menu_items(self) -> list[MenuItem]:
        return list(self._items)

    def invoke(self, action_key: str, row: RowT) -> Any:
        callback = self._callbacks.get(action_key)
        if callback is None:
            raise UnknownActionError("row", action_key)
        return callback(row)


class BulkActionDispatcher:
    """Forwards a named bulk action and the selected ids to one external handler."""

    def __init__(
        self,
        handler: Callable[[str, list[str]], Any] | None = None,
        actions: Iterable[BulkAction] = (),
    ) -> None:
        self.handler = handler
        self.actions = tuple(actions)

    def available(self) -> list[BulkAction]:
        return list(self.actions) if self.handler is not None else []

    def dispatch(self, action_key: str, selected_ids: Iterable[str]) -> Any:
        declared = {action.key for action in self.actions}
        if self.handler is None or (declared and action_key not in declared):
            raise UnknownActionError("bulk", action_key)
        ids = list(selected_ids)
        try:
            result = self.handler(action_key, ids)
        except Exception as exc:
            log_json(
                logger,
                {
                    "event": "table_bulk_action",
                    "action": action_key,
                    "selected": len(ids),
                    "outcome": "error",
                    "error_class": exc.__class__.__name__,
                },
                level=logging.WARNING,
            )
            raise
        log_json(logger, {"event": "table_bulk_action", "action": action_key, "selected": len(ids), "outcome": "ok"})
        return result
