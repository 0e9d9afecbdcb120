from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, Request
from fastapi.responses import Response

from app.wmtables.core.config import settings
from app.wmtables.core.error_catalog import AppError, ErrorCatalog
from app.wmtables.core.logging import log_json
from app.wmtables.engine.columns import TableConfig
from app.wmtables.engine.pipeline import TablePipeline
from app.wmtables.engine.reducer import reduce
from app.wmtables.engine.state import TableState, normalize_state
from app.wmtables.schemas.errors import ApiErrorResponse, ApiValidationErrorResponse
from app.wmtables.schemas.tables import (
    TableActionRequest,
    TableExportRequest,
    TableRequest,
    TableResponse,
    TableStateIn,
    TableStateOut,
    TableViewOut,
)
from app.wmtables.services.exports import render_csv, sanitize_filename
from app.wmtables.services.view import build_view
from app.wmtables.services.view_state import hydrate_state, serialize_state


router = APIRouter()
logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    400: {"model": ApiErrorResponse},
    413: {"model": ApiErrorResponse},
    422: {"model": ApiValidationErrorResponse},
}


def _check_rows(request: Request, rows: list[dict]) -> None:
    request.state.table_rows = len(rows)
    if len(rows) > settings.TABLE_MAX_ROWS:
        raise AppError(
            ErrorCatalog.TABLE_ROWS_LIMIT_EXCEEDED,
            details={"rows": len(rows), "max_rows": settings.TABLE_MAX_ROWS},
        )


def _resolve_state(payload: TableStateIn | None, config: TableConfig, rows: list[dict], pipeline: TablePipeline) -> TableState:
    state = hydrate_state(payload.model_dump() if payload else None, config)
    result = pipeline.run(rows, state)
    return normalize_state(state, config, total_rows=result.total_rows, known_ids=result.ids.values())


def _response(config: TableConfig, rows: list[dict], state: TableState, pipeline: TablePipeline, *, loading: bool, error: str | None) -> TableResponse:
    view = build_view(config, rows, state, loading=loading, error=error, pipeline=pipeline)
    return TableResponse(
        view=TableViewOut.model_validate(asdict(view)),
        state=TableStateOut.model_validate(serialize_state(state)),
    )


@router.post("/tables/view", response_model=TableResponse, responses=_ERROR_RESPONSES)
def table_view(request: Request, payload: TableRequest):
    _check_rows(request, payload.rows)
    config = payload.config.to_table_config()
    pipeline = TablePipeline(config)
    state = _resolve_state(payload.state, config, payload.rows, pipeline)
    return _response(config, payload.rows, state, pipeline, loading=payload.loading, error=payload.error)


@router.post("/tables/actions", response_model=TableResponse, responses=_ERROR_RESPONSES)
def table_action(request: Request, payload: TableActionRequest):
    _check_rows(request, payload.rows)
    config = payload.config.to_table_config()
    pipeline = TablePipeline(config)
    state = _resolve_state(payload.state, config, payload.rows, pipeline)
    request.state.table_action = payload.action.type
    state = reduce(state, payload.action.model_dump(), config=config, rows=payload.rows, pipeline=pipeline)
    return _response(config, payload.rows, state, pipeline, loading=payload.loading, error=payload.error)


@router.post(
    "/tables/export",
    responses={200: {"content": {"text/csv": {}}}, **_ERROR_RESPONSES},
)
def table_export(request: Request, payload: TableExportRequest):
    _check_rows(request, payload.rows)
    config = payload.config.to_table_config()
    pipeline = TablePipeline(config)
    state = _resolve_state(payload.state, config, payload.rows, pipeline)
    result = pipeline.run(payload.rows, state)
    if result.total_rows > settings.EXPORTS_MAX_ROWS:
        raise AppError(
            ErrorCatalog.EXPORT_ROWS_LIMIT_EXCEEDED,
            details={"rows": result.total_rows, "max_rows": settings.EXPORTS_MAX_ROWS},
        )
    now = datetime.now().astimezone()
    content = render_csv(
        config, payload.rows, state, pipeline=pipeline, generated_at=now, selected_only=payload.selected_only
    )
    fallback = f"{config.entity_name_plural.lower().replace(' ', '_')}_{now.strftime('%Y%m%d_%H%M%S')}"
    file_name = sanitize_filename(payload.file_name, fallback=fallback)
    log_json(
        logger,
        {
            "event": "table_export",
            "trace_id": getattr(request.state, "trace_id", ""),
            "entity": config.entity_name_plural,
            "row_count": result.total_rows,
            "selected_only": payload.selected_only,
            "file_name": file_name,
        },
    )
    return Response(
        content=content.encode("utf-8-sig"),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )
