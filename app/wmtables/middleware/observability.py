from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.wmtables.core.logging import log_json

logger = logging.getLogger("wmtables.request")


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def build_request_log_payload(*, request: Request, response: Response | None, latency_ms: float) -> dict:
    state = request.state
    return {
        "event": "http_request",
        "trace_id": getattr(state, "trace_id", ""),
        "method": request.method,
        "route": _route_path(request),
        "status_code": response.status_code if response is not None else 500,
        "latency_ms": round(latency_ms, 2),
        "table_rows": getattr(state, "table_rows", None),
        "table_action": getattr(state, "table_action", None),
        "error_code": getattr(state, "error_code", None),
        "error_class": getattr(state, "error_class", None),
    }


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            log_json(logger, build_request_log_payload(request=request, response=response, latency_ms=elapsed_ms))
