from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from loguru import logger

from app.core.settings import settings
from app.utils.request_context import request_id_var


@contextmanager
def perf_span(op: str, **tags: Any) -> Iterator[None]:
    """Time an internal block.

    Logs at WARNING when it takes >= PERF_LOG_SLOW_MS, or at DEBUG on every
    call when PERF_LOG_INNER_ALWAYS=true. Exceptions propagate unchanged.
    """

    enabled = bool(getattr(settings, "PERF_LOG_ENABLED", True)) and bool(getattr(settings, "PERF_LOG_INNER_ENABLED", True))
    if not enabled:
        yield
        return

    t0 = time.perf_counter()
    status = "ok"
    try:
        yield
    except Exception:
        status = "err"
        raise
    finally:
        dt_ms = (time.perf_counter() - t0) * 1000.0
        slow_ms = float(getattr(settings, "PERF_LOG_SLOW_MS", 250) or 250)
        if dt_ms >= slow_ms or bool(getattr(settings, "PERF_LOG_INNER_ALWAYS", False)):
            level = "WARNING" if dt_ms >= slow_ms else "DEBUG"
            extra = {k: v for k, v in tags.items() if v is not None}
            rid = request_id_var.get() or "-"
            logger.log(level, "PERF {op} {status}: {ms:.1f}ms rid={rid} tags={tags}", op=op, status=status, ms=dt_ms, rid=rid, tags=extra)
