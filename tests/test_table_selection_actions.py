import pytest

from app.wmtables.engine.actions import BulkAction, BulkActionDispatcher, CustomAction, RowActions
from app.wmtables.engine.errors import UnknownActionError
from app.wmtables.engine.selection import (
    is_all_selected,
    prune_selection,
    select_none,
    selection_summary,
    toggle_row,
    toggle_select_all,
)

VISIBLE = ["1", "2", "3"]


def test_toggle_row_adds_then_removes():
    selected = toggle_row(frozenset(), "2")
    assert selected == {"2"}
    assert toggle_row(selected, "2") == frozenset()


def test_select_all_twice_restores_empty_selection():
    once = toggle_select_all(frozenset(), VISIBLE)
    twice = toggle_select_all(once, VISIBLE)

    assert once == set(VISIBLE)
    assert twice == frozenset()


def test_select_all_twice_restores_full_selection():
    full = frozenset(VISIBLE)

    assert toggle_select_all(toggle_select_all(full, VISIBLE), VISIBLE) == full


def test_select_all_completes_a_partial_selection_and_keeps_hidden_ids():
    selected = toggle_select_all(frozenset({"1", "other-page"}), VISIBLE)

    assert selected == {"1", "2", "3", "other-page"}
    assert toggle_select_all(selected, VISIBLE) == {"other-page"}


def test_all_selected_requires_visible_rows():
    assert is_all_selected(frozenset({"1"}), []) is False
    assert is_all_selected(frozenset(VISIBLE), VISIBLE) is True


def test_select_none_and_prune():
    assert select_none() == frozenset()
    assert prune_selection(frozenset({"1", "9"}), VISIBLE) == {"1"}


def test_selection_summary_pluralizes():
    assert selection_summary(1, "Product") == "1 product selected"
    assert selection_summary(3, "Product") == "3 products selected"


def test_row_menu_order_and_forwarding():
    calls = []
    actions = RowActions(
        on_view=lambda row: calls.append(("view", row["id"])),
        on_edit=lambda row: calls.append(("edit", row["id"])),
        on_delete=lambda row: calls.append(("delete", row["id"])),
        custom_actions=[CustomAction("adjust", "Adjust stock", on_click=lambda row: calls.append(("adjust", row["id"])))],
    )

    assert [item.key for item in actions.menu_items()] == ["view", "edit", "adjust", "delete"]
    assert actions.menu_items()[-1].variant == "destructive"

    actions.invoke("adjust", {"id": 7})
    actions.invoke("delete", {"id": 8})
    assert calls == [("adjust", 7), ("delete", 8)]


def test_row_menu_without_callbacks_is_empty():
    actions = RowActions()

    assert not actions
    with pytest.raises(UnknownActionError):
        actions.invoke("edit", {"id": 1})


def test_bulk_dispatch_forwards_key_and_ids():
    received = []
    dispatcher = BulkActionDispatcher(
        handler=lambda key, ids: received.append((key, ids)) or "done",
        actions=[BulkAction("archive", "Archive")],
    )

    assert dispatcher.dispatch("archive", ("3", "1")) == "done"
    assert received == [("archive", ["3", "1"])]


def test_bulk_dispatch_rejects_undeclared_actions():
    dispatcher = BulkActionDispatcher(handler=lambda key, ids: None, actions=[BulkAction("archive", "Archive")])

    with pytest.raises(UnknownActionError):
        dispatcher.dispatch("delete", ["1"])
    with pytest.raises(UnknownActionError):
        BulkActionDispatcher().dispatch("archive", ["1"])


def test_bulk_dispatch_propagates_handler_errors():
    def _fail(key, ids):
        raise RuntimeError("warehouse api down")

    dispatcher = BulkActionDispatcher(handler=_fail)

    with pytest.raises(RuntimeError):
        dispatcher.dispatch("archive", ["1"])
