from app.wmtables.engine.columns import ColumnConfig, TableConfig
from app.wmtables.engine.pagination import PaginationState
from app.wmtables.engine.sorting import SortState
from app.wmtables.engine.state import TableState
from app.wmtables.services import exports
from app.wmtables.services.exports import export_current_view, render_csv, sanitize_filename


def test_csv_contains_every_filtered_row_across_pages(products, product_config):
    state = TableState(
        filters={"active": "true"},
        sort=SortState("name", "asc"),
        pagination=PaginationState(page=1, page_size=1),
        hidden_columns={"created_at", "warehouse.name"},
    )

    content = render_csv(product_config, products, state)

    lines = [line for line in content.splitlines() if not line.startswith("#")]
    assert lines[0] == "SKU,Name,Status,Active,Price"
    assert lines[1:] == ["B1,Barcode Scanner,active,Yes,5.00", "A1,Pallet Jack,active,Yes,9.99"]
    assert "# entity: Products" in content
    assert "# filters: {'active': 'true'}" in content


def test_sensitive_columns_are_masked():
    config = TableConfig(columns=(ColumnConfig("username", "User"), ColumnConfig("api_token", "Token")))

    content = render_csv(config, [{"id": 1, "username": "ops", "api_token": "abc"}], TableState())

    assert "ops,-" in content
    assert "abc" not in content


def test_export_current_view_writes_file(tmp_path, products, product_config):
    path = export_current_view(
        product_config,
        products,
        TableState(),
        output_dir=str(tmp_path / "exports"),
        file_name="../stock report.xlsx",
    )

    assert path.name == "stock_report.csv"
    content = path.read_text(encoding="utf-8-sig")
    assert "A1,Pallet Jack" in content
    assert not list((tmp_path / "exports").glob("*.tmp"))


def test_sanitize_filename_fallback():
    assert sanitize_filename(None, fallback="products") == "products.csv"
    assert sanitize_filename("***", fallback="products") == "products.csv"


def test_selected_only_export_keeps_filtered_order(products, product_config):
    state = TableState(sort=SortState("name", "asc"), selection={"1", "2", "4"}, filters={"active": "false"})

    content = render_csv(product_config, products, state, selected_only=True)

    lines = [line for line in content.splitlines() if not line.startswith("#")]
    assert [line.split(",")[0] for line in lines[1:]] == ["B2", "A2"]
    assert "# selected: 2" in content


def test_export_defaults_to_configured_storage_path(tmp_path, monkeypatch, products, product_config):
    monkeypatch.setattr(exports.settings, "EXPORTS_STORAGE_PATH", str(tmp_path / "storage"))

    path = export_current_view(product_config, products, TableState(selection={"3"}), file_name="picked", selected_only=True)

    assert path == tmp_path / "storage" / "picked.csv"
    rows = [line for line in path.read_text(encoding="utf-8-sig").splitlines() if not line.startswith("#")]
    assert len(rows) == 2
    assert rows[1].startswith("B1,Barcode Scanner")
