from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping

from loguru import logger

from app.ai.pattern_classifier import PatternMatch, classify
from app.ai.pattern_scoring import ReliabilityWeights, ScoreResult, StrengthWeights, score_reliability, score_strength
from app.ai.signal_context import SignalSnapshot, build_snapshot
from app.utils.perf import perf_span


@dataclass(frozen=True)
class PatternAssessment:
    pattern_match: PatternMatch
    strength: ScoreResult
    reliability: ScoreResult

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["pattern_match"]["typical_duration_days"] = list(self.pattern_match.typical_duration_days)
        out["strength"]["factors"] = list(self.strength.factors)
        out["reliability"]["factors"] = list(self.reliability.factors)
        return out


def assess(
    snapshot: SignalSnapshot,
    *,
    strength_weights: StrengthWeights | None = None,
    reliability_weights: ReliabilityWeights | None = None,
    strict_extremes_first: bool | None = None,
) -> PatternAssessment:
    """Classify the snapshot and score it; pure and deterministic."""

    out = PatternAssessment(
        pattern_match=classify(snapshot, strict_extremes_first=strict_extremes_first),
        strength=score_strength(snapshot, strength_weights),
        reliability=score_reliability(snapshot, reliability_weights),
    )
    logger.debug(
        "pattern assessment: {name} strength={s} ({sl}) reliability={r} ({rl})",
        name=out.pattern_match.pattern_name,
        s=out.strength.score,
        sl=out.strength.level,
        r=out.reliability.score,
        rl=out.reliability.level,
    )
    return out


def assess_payload(
    analysis: Mapping[str, Any] | None,
    signal: Any,
    market_context: Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> PatternAssessment:
    """Build a snapshot from raw payloads and assess it.

    Raises NotApplicable when there is no analysis or signal.
    """

    with perf_span("patterns.assess", signal=str(signal or "") or None):
        snapshot = build_snapshot(analysis, signal, market_context)
        return assess(snapshot, **kwargs)
