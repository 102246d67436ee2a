from __future__ import annotations

from contextvars import ContextVar

# Set per HTTP request by RequestLogMiddleware; read by perf spans.
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
