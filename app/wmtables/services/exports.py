from __future__ import annotations

import csv
import io
import os
import re
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from app.wmtables.core.config import settings
from app.wmtables.engine.columns import RowT, TableConfig
from app.wmtables.engine.pipeline import PipelineResult, TablePipeline
from app.wmtables.engine.state import TableState
from app.wmtables.services.view import EMPTY_CELL, render_cell, visible_columns

SENSITIVE_KEYS = {"token", "refresh_token", "secret", "password", "access_token"}


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return any(token in lowered for token in SENSITIVE_KEYS)


def sanitize_filename(name: str | None, *, fallback: str) -> str:
    if not name:
        return f"{fallback}.csv"
    base = os.path.basename(name)
    base = re.sub(r"\.[^.]+$", "", base)
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", base).strip("._-")
    if not cleaned:
        cleaned = fallback
    return f"{cleaned}.csv"


def selected_rows(result: PipelineResult[RowT], state: TableState) -> tuple[RowT, ...]:
    return tuple(row for row in result.rows if result.id_of(row) in state.selection)


def render_csv(
    config: TableConfig[RowT],
    rows: Sequence[RowT],
    state: TableState,
    *,
    pipeline: TablePipeline[RowT] | None = None,
    generated_at: datetime | None = None,
    selected_only: bool = False,
) -> str:
    """CSV of every filtered and sorted row (all pages) over the visible columns.

    With ``selected_only`` the rows are limited to the current selection,
    still in filtered and sorted order.
    """
    pipeline = pipeline or TablePipeline(config)
    result = pipeline.run(rows, state)
    columns = visible_columns(config, state)
    export_rows = selected_rows(result, state) if selected_only else result.rows
    now = generated_at or datetime.now().astimezone()

    handle = io.StringIO()
    handle.write(f"# timestamp_local: {now.isoformat()}\n")
    handle.write(f"# entity: {config.entity_name_plural}\n")
    handle.write(f"# filters: {dict(state.filters)}\n")
    if selected_only:
        handle.write(f"# selected: {len(export_rows)}\n")
    writer = csv.writer(handle, lineterminator="\n")
    writer.writerow([column.label for column in columns])
    for row in export_rows:
        writer.writerow(
            [EMPTY_CELL if _is_sensitive(column.key) else render_cell(row, column) for column in columns]
        )
    return handle.getvalue()


def export_current_view(
    config: TableConfig[RowT],
    rows: Sequence[RowT],
    state: TableState,
    *,
    output_dir: str | None = None,
    file_name: str | None = None,
    selected_only: bool = False,
) -> Path:
    destination = Path(output_dir or settings.EXPORTS_STORAGE_PATH)
    destination.mkdir(parents=True, exist_ok=True)
    now = datetime.now().astimezone()
    fallback = f"{config.entity_name_plural.lower().replace(' ', '_')}_{now.strftime('%Y%m%d_%H%M%S')}"
    path = destination / sanitize_filename(file_name, fallback=fallback)
    content = render_csv(config, rows, state, generated_at=now, selected_only=selected_only)
    tmp_path = path.with_name(f"{path.name}.tmp")
    tmp_path.write_text(content, encoding="utf-8-sig")
    os.replace(tmp_path, path)
    return path
