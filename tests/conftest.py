import importlib

import pytest
from fastapi.testclient import TestClient

from app.wmtables.engine.columns import ColumnConfig, FilterOption, TableConfig


def _setup_app():
    import app.wmtables.core.config as config
    import app.wmtables.core.logging as logging_config
    import app.wmtables.schemas.tables as table_schemas
    import app.wmtables.routers.health as health_router
    import app.wmtables.routers.tables as tables_router
    import app.wmtables.api as api
    import app.main as main

    for module in (config, logging_config, table_schemas, health_router, tables_router, api, main):
        importlib.reload(module)

    return main.create_app()


@pytest.fixture()
def make_client(monkeypatch):
    clients = []

    def _make(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, str(value))
        client = TestClient(_setup_app())
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()


@pytest.fixture()
def client(make_client):
    return make_client()


@pytest.fixture()
def products():
    return [
        {
            "id": 1,
            "sku": "A1",
            "name": "Pallet Jack",
            "status": "active",
            "active": True,
            "price": "9.99",
            "warehouse": {"name": "North"},
            "created_at": "2024-03-01T10:00:00Z",
        },
        {
            "id": 2,
            "sku": "A2",
            "name": "Shelf Unit",
            "status": "inactive",
            "active": False,
            "price": None,
            "warehouse": {"name": "South"},
            "created_at": "2024-01-15",
        },
        {
            "id": 3,
            "sku": "B1",
            "name": "Barcode Scanner",
            "status": "active",
            "active": True,
            "price": "5.00",
            "warehouse": {"name": "North"},
            "created_at": "2023-12-31",
        },
        {
            "id": 4,
            "sku": "B2",
            "name": "Forklift",
            "status": "archived",
            "active": False,
            "price": "1200.50",
            "warehouse": None,
            "created_at": None,
        },
    ]


@pytest.fixture()
def product_config():
    return TableConfig(
        columns=(
            ColumnConfig("sku", "SKU"),
            ColumnConfig("name", "Name"),
            ColumnConfig(
                "status",
                "Status",
                filter_type="select",
                filter_options=(
                    FilterOption("active", "Active"),
                    FilterOption("inactive", "Inactive"),
                    FilterOption("archived", "Archived"),
                ),
            ),
            ColumnConfig("active", "Active", filter_type="boolean"),
            ColumnConfig("price", "Price"),
            ColumnConfig("warehouse.name", "Warehouse"),
            ColumnConfig("created_at", "Created", filter_type="date", groupable=False),
        ),
        entity_name="Product",
        entity_name_plural="Products",
        default_page_size=2,
    )
