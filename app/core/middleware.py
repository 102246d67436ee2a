from __future__ import annotations

import time
from uuid import uuid4

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.settings import settings
from app.utils.request_context import request_id_var


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id (echoed as x-request-id) and logs its duration."""

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("x-request-id") or str(uuid4())
        request.state.request_id = rid
        token = request_id_var.set(rid)

        t0 = time.perf_counter()
        status: int | str = "?"
        try:
            resp = await call_next(request)
            status = int(getattr(resp, "status_code", 0) or 0)
            resp.headers["x-request-id"] = rid
            return resp
        finally:
            request_id_var.reset(token)
            if getattr(settings, "PERF_LOG_ENABLED", True):
                dt_ms = (time.perf_counter() - t0) * 1000.0
                slow_ms = int(getattr(settings, "PERF_LOG_SLOW_MS", 250) or 250)
                lvl = "WARNING" if dt_ms >= float(slow_ms) else "INFO"
                logger.log(
                    lvl,
                    "HTTP {method} {path} -> {status} ({ms:.1f}ms) rid={rid}",
                    method=request.method.upper(),
                    path=request.url.path,
                    status=status,
                    ms=dt_ms,
                    rid=rid,
                )
