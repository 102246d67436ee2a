from __future__ import annotations

from fastapi import APIRouter

from app.api import patterns

api_router = APIRouter(prefix="/api")
api_router.include_router(patterns.router)
