import logging

from app.wmtables.engine import columns
from app.wmtables.engine.columns import MAX_REPORTED_DEGRADATIONS, ColumnConfig


def test_degradation_registry_is_bounded():
    for index in range(MAX_REPORTED_DEGRADATIONS * 4):
        ColumnConfig(f"bounded_{index}", "Column", filter_type="select").effective_filter_type

    assert len(columns._reported_degradations) <= MAX_REPORTED_DEGRADATIONS


def test_degradation_is_logged_once_per_column(caplog):
    caplog.set_level(logging.WARNING, logger=columns.__name__)
    column = ColumnConfig("once_only_status", "Status", filter_type="select")

    column.effective_filter_type
    column.effective_filter_type

    lines = [record for record in caplog.records if "once_only_status" in record.getMessage()]
    assert len(lines) == 1


def test_evicted_degradation_is_reported_again(caplog):
    caplog.set_level(logging.WARNING, logger=columns.__name__)
    ColumnConfig("evicted_status", "Status", filter_type="select").effective_filter_type
    for index in range(MAX_REPORTED_DEGRADATIONS):
        ColumnConfig(f"filler_{index}", "Column", filter_type="select").effective_filter_type

    ColumnConfig("evicted_status", "Status", filter_type="select").effective_filter_type

    lines = [record for record in caplog.records if "evicted_status" in record.getMessage()]
    assert len(lines) == 2
