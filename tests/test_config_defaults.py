from app.wmtables.core.config import Settings
from tests.table_helpers import product_config_payload


def test_settings_defaults(monkeypatch):
    for key in ("TABLE_DEFAULT_PAGE_SIZE", "TABLE_MAX_ROWS", "EXPORTS_MAX_ROWS"):
        monkeypatch.delenv(key, raising=False)

    settings = Settings()

    assert settings.TABLE_DEFAULT_PAGE_SIZE == 25
    assert settings.TABLE_PAGE_SIZE_OPTIONS == [10, 25, 50, 100]
    assert settings.TABLE_MAX_ROWS == 10000
    assert settings.EXPORTS_MAX_ROWS == 50000


def test_default_page_size_comes_from_settings(make_client, products):
    client = make_client(TABLE_DEFAULT_PAGE_SIZE=3)
    config = product_config_payload()
    config.pop("default_page_size")

    response = client.post("/tables/view", json={"config": config, "rows": products})

    assert response.status_code == 200
    payload = response.json()
    assert payload["state"]["page_size"] == 3
    assert len(payload["view"]["rows"]) == 3
