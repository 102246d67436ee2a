from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from app.ai.pattern_assessment import assess_payload
from app.ai.pattern_catalog import CANDLESTICK_CODES, FALLBACK_DEFINITION, PATTERN_DEFINITIONS
from app.ai.signal_context import NotApplicable

router = APIRouter(prefix="/patterns", tags=["patterns"])


class PatternContextRequest(BaseModel):
    analysis: dict[str, Any] | None = None
    signal: str | None = None
    market_context: dict[str, Any] | None = None


@router.get("/catalog")
def catalog() -> dict[str, Any]:
    defs = [*PATTERN_DEFINITIONS, FALLBACK_DEFINITION]
    return {
        "ok": True,
        "count": len(PATTERN_DEFINITIONS),
        "patterns": [
            {
                "name": d.name,
                "category": d.category,
                "description": d.description,
                "typical_duration_days": list(d.typical_duration_days),
                "success_rate": d.success_rate,
            }
            for d in defs
        ],
        "candlestick_codes": dict(CANDLESTICK_CODES),
    }


@router.post("/context")
def pattern_context(req: PatternContextRequest) -> dict[str, Any]:
    """Pattern name + strength/reliability scores for one analysis.

    Missing analysis or signal is not an error: the caller gets
    applicable=false and renders nothing.
    """

    try:
        res = assess_payload(req.analysis, req.signal, req.market_context)
    except NotApplicable:
        return {"ok": True, "applicable": False, "assessment": None}
    return {"ok": True, "applicable": True, "assessment": res.to_dict()}
