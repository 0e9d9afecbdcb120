import pytest

from app.wmtables.engine.actions import BulkAction, BulkActionDispatcher, RowActions
from app.wmtables.engine.columns import ColumnConfig
from app.wmtables.engine.errors import UnknownActionError
from app.wmtables.engine.session import TableSession
from app.wmtables.engine.sorting import SortState
from app.wmtables.engine.state import TableState


def test_session_applies_operations_in_sequence(products, product_config):
    session = TableSession(product_config, products)

    session.set_filter("status", "active")
    session.toggle_sort("price")
    session.toggle_sort("price")

    assert session.state.sort == SortState("price", "desc")
    assert [row["id"] for row in session.result().rows] == [1, 3]


def test_replacing_rows_prunes_selection_and_clamps_page(products, product_config):
    changes = []
    session = TableSession(product_config, products, on_selection_change=changes.append)
    session.toggle_row("4")
    session.toggle_row("1")
    session.go_to_last()

    session.set_rows(products[:2])

    assert session.state.selection == {"1"}
    assert session.state.pagination.page == 1
    assert changes == [["4"], ["1", "4"], ["1"]]


def test_removing_columns_drops_their_state(products, product_config):
    session = TableSession(product_config, products)
    session.set_filter("status", "active")
    session.toggle_sort("price")
    session.toggle_group_by("warehouse.name")

    session.set_columns([ColumnConfig("sku", "SKU"), ColumnConfig("name", "Name")])

    assert dict(session.state.filters) == {}
    assert session.state.sort is None
    assert session.state.group_by is None
    assert session.view().status == "ready"


def test_bulk_action_receives_selection_in_row_order(products, product_config):
    received = []
    session = TableSession(
        product_config,
        products,
        bulk_actions=BulkActionDispatcher(
            handler=lambda key, ids: received.append((key, ids)),
            actions=[BulkAction("archive", "Archive")],
        ),
    )
    session.toggle_row("3")
    session.toggle_row("1")

    session.dispatch_bulk_action("archive")

    assert received == [("archive", ["1", "3"])]


def test_failed_bulk_action_keeps_selection(products, product_config):
    def _fail(key, ids):
        raise RuntimeError("timeout")

    session = TableSession(product_config, products, bulk_actions=BulkActionDispatcher(handler=_fail))
    session.toggle_select_all()

    with pytest.raises(RuntimeError):
        session.dispatch_bulk_action("delete")

    assert session.state.selection == {"1", "2", "3", "4"}


def test_row_actions_are_forwarded(products, product_config):
    edited = []
    session = TableSession(product_config, products, row_actions=RowActions(on_edit=edited.append))

    session.invoke_row_action("edit", products[1])

    assert edited == [products[1]]
    with pytest.raises(UnknownActionError):
        session.invoke_row_action("delete", products[1])


def test_initial_state_is_normalized(products, product_config):
    session = TableSession(product_config, products, state=TableState(group_by="missing", selection={"42"}))

    assert session.state.group_by is None
    assert session.state.selection == frozenset()
