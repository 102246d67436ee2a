from __future__ import annotations

import sys

from loguru import logger

from app.core.settings import settings


def configure_logging(level: str | None = None) -> None:
    """Route loguru to stderr; JSON lines when LOG_JSON=true."""

    logger.remove()
    logger.add(
        sys.stderr,
        level=str(level or settings.LOG_LEVEL).upper(),
        backtrace=False,
        diagnose=False,
        serialize=bool(getattr(settings, "LOG_JSON", False)),
    )
