import json
import logging
from types import SimpleNamespace

from starlette.requests import Request

from app.wmtables.middleware.observability import build_request_log_payload
from tests.table_helpers import product_config_payload


def test_build_request_log_payload_without_response():
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/tables/actions",
        "headers": [],
        "route": SimpleNamespace(path="/tables/actions"),
    }
    request = Request(scope)
    request.state.trace_id = "trace-9"
    request.state.table_rows = 12
    request.state.table_action = "go_to_next"

    payload = build_request_log_payload(request=request, response=None, latency_ms=3.14159)

    assert payload["event"] == "http_request"
    assert payload["route"] == "/tables/actions"
    assert payload["status_code"] == 500
    assert payload["latency_ms"] == 3.14
    assert payload["table_rows"] == 12
    assert payload["table_action"] == "go_to_next"
    assert payload["error_code"] is None


def test_request_log_line_carries_table_context(client, products, caplog):
    caplog.set_level(logging.INFO, logger="wmtables.request")

    response = client.post(
        "/tables/actions",
        headers={"X-Trace-ID": "trace-log-1"},
        json={"config": product_config_payload(), "rows": products, "action": {"type": "explode"}},
    )

    assert response.status_code == 400
    lines = [json.loads(record.getMessage()) for record in caplog.records if record.name == "wmtables.request"]
    assert len(lines) == 1
    line = lines[0]
    assert line["trace_id"] == "trace-log-1"
    assert line["status_code"] == 400
    assert line["table_rows"] == 4
    assert line["table_action"] == "explode"
    assert line["error_code"] == "TABLE_UNKNOWN_ACTION"
    assert line["error_class"] == "UnknownActionError"
