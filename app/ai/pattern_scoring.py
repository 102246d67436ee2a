from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Literal, Mapping, TypeVar

from loguru import logger

from app.ai.signal_context import MARKET_REGIMES, NIFTY_REGIMES, SignalSnapshot
from app.core.settings import settings


StrengthLevel = Literal["Strong", "Moderate", "Weak"]
ReliabilityLevel = Literal["High", "Moderate", "Low"]


@dataclass(frozen=True)
class StrengthWeights:
    momentum_strong: int = 25
    momentum_moderate: int = 15
    momentum_bearish: int = 25
    rsi_extreme: int = 20
    rsi_moderate: int = 10
    divergence: int = 20
    volatility: int = 15


@dataclass(frozen=True)
class ReliabilityWeights:
    base: int = 50
    regime_aligned: int = 20
    regime_sideways: int = -10
    vix_low_buy: int = 15
    vix_elevated_sell: int = 10
    vix_extreme: int = -15
    breadth_confirms: int = 15
    breadth_diverges: int = -10


@dataclass(frozen=True)
class ScoreRule:
    predicate: Callable[[SignalSnapshot], bool]
    delta: int
    label: str


@dataclass(frozen=True)
class ScoreResult:
    score: int
    level: str
    factors: tuple[str, ...]


W = TypeVar("W", StrengthWeights, ReliabilityWeights)


def _with_overrides(defaults: W, overrides: Mapping[str, Any] | None) -> W:
    if not overrides:
        return defaults
    known = {f.name for f in fields(defaults)}
    picked: dict[str, int] = {}
    for k, v in overrides.items():
        if k not in known:
            logger.warning("ignoring unknown {kind} override: {key}", kind=type(defaults).__name__, key=k)
            continue
        picked[k] = int(v)
    return replace(defaults, **picked)


def strength_weights_from_settings() -> StrengthWeights:
    return _with_overrides(StrengthWeights(), getattr(settings, "PATTERN_STRENGTH_WEIGHTS", None))


def reliability_weights_from_settings() -> ReliabilityWeights:
    return _with_overrides(ReliabilityWeights(), getattr(settings, "PATTERN_RELIABILITY_WEIGHTS", None))


def _clamp100(v: float) -> int:
    return int(max(0, min(100, round(v))))


def fold_rules(chains: list[list[ScoreRule]], snapshot: SignalSnapshot, *, base: int = 0) -> tuple[int, tuple[str, ...]]:
    """Left fold over categories; within a category only the first true rule fires.

    Returns the clamped total and the fired labels in evaluation order.
    """

    total = int(base)
    factors: list[str] = []
    for chain in chains:
        for rule in chain:
            if rule.predicate(snapshot):
                total += int(rule.delta)
                factors.append(rule.label)
                break
    return _clamp100(total), tuple(factors)


def strength_rules(w: StrengthWeights) -> list[list[ScoreRule]]:
    return [
        # Momentum alignment
        [
            ScoreRule(lambda s: s.signal == "BUY" and s.momentum_score > 60, w.momentum_strong, "Strong bullish momentum"),
            ScoreRule(lambda s: s.signal == "BUY" and s.momentum_score > 40, w.momentum_moderate, "Moderate momentum support"),
            ScoreRule(lambda s: s.signal == "SELL" and s.momentum_score < 40, w.momentum_bearish, "Weak momentum confirms bearish bias"),
        ],
        # RSI extremity
        [
            ScoreRule(lambda s: s.signal == "BUY" and s.rsi_level < 35, w.rsi_extreme, "RSI oversold reading"),
            ScoreRule(lambda s: s.signal == "SELL" and s.rsi_level > 65, w.rsi_extreme, "RSI overbought reading"),
            ScoreRule(
                lambda s: (s.signal == "BUY" and s.rsi_level < 45) or (s.signal == "SELL" and s.rsi_level > 55),
                w.rsi_moderate,
                "RSI moderately supportive",
            ),
        ],
        # Divergence
        [
            ScoreRule(lambda s: s.divergence_detected or s.rsi_divergence != "None", w.divergence, "RSI divergence detected"),
        ],
        # Volatility alignment
        [
            ScoreRule(lambda s: s.volatility_classification == "Low" and s.signal == "BUY", w.volatility, "Low volatility favors entries"),
            ScoreRule(lambda s: s.volatility_classification == "High" and s.signal == "SELL", w.volatility, "High volatility supports exit"),
        ],
    ]


def _regime_aligned(s: SignalSnapshot) -> bool:
    if s.signal == "BUY":
        return s.market_regime == "Trending Up" or s.nifty_regime == "Bullish"
    if s.signal == "SELL":
        return s.market_regime == "Trending Down" or s.nifty_regime == "Bearish"
    return False


def reliability_rules(w: ReliabilityWeights) -> list[list[ScoreRule]]:
    return [
        # Regime alignment
        [
            ScoreRule(_regime_aligned, w.regime_aligned, "Market regime supports signal"),
            ScoreRule(lambda s: s.market_regime == "Sideways", w.regime_sideways, "Choppy market reduces reliability"),
        ],
        # Volatility / VIX
        [
            ScoreRule(lambda s: s.vix_level < 15 and s.signal == "BUY", w.vix_low_buy, "Low VIX supports bullish setups"),
            ScoreRule(lambda s: s.vix_level > 25 and s.signal == "SELL", w.vix_elevated_sell, "Elevated VIX validates caution"),
            ScoreRule(lambda s: s.vix_level > 30, w.vix_extreme, "Extreme volatility increases uncertainty"),
        ],
        # Breadth alignment
        [
            ScoreRule(
                lambda s: (s.signal == "BUY" and s.advance_decline_ratio > 1.5) or (s.signal == "SELL" and s.advance_decline_ratio < 0.7),
                w.breadth_confirms,
                "Market breadth confirms direction",
            ),
            ScoreRule(
                lambda s: (s.signal == "BUY" and s.advance_decline_ratio < 0.8) or (s.signal == "SELL" and s.advance_decline_ratio > 1.3),
                w.breadth_diverges,
                "Market breadth diverges from signal",
            ),
        ],
    ]


def strength_level(score: int) -> StrengthLevel:
    if score > 70:
        return "Strong"
    if score > 40:
        return "Moderate"
    return "Weak"


def reliability_level(score: int) -> ReliabilityLevel:
    # An untouched base (50) reads as Moderate; only net-negative context is Low.
    if score > 70:
        return "High"
    if score >= 50:
        return "Moderate"
    return "Low"


def score_strength(snapshot: SignalSnapshot, weights: StrengthWeights | None = None) -> ScoreResult:
    """Internal indicator alignment with the signal (0-100, starts at 0)."""

    w = weights or strength_weights_from_settings()
    score, factors = fold_rules(strength_rules(w), snapshot)
    return ScoreResult(score=score, level=strength_level(score), factors=factors)


def score_reliability(snapshot: SignalSnapshot, weights: ReliabilityWeights | None = None) -> ScoreResult:
    """Market-context support for the signal (0-100, starts at the base weight)."""

    if snapshot.market_regime and snapshot.market_regime not in MARKET_REGIMES:
        logger.debug("unrecognized market regime label: {label}", label=snapshot.market_regime)
    if snapshot.nifty_regime and snapshot.nifty_regime not in NIFTY_REGIMES:
        logger.debug("unrecognized nifty regime label: {label}", label=snapshot.nifty_regime)

    w = weights or reliability_weights_from_settings()
    score, factors = fold_rules(reliability_rules(w), snapshot, base=w.base)
    return ScoreResult(score=score, level=reliability_level(score), factors=factors)
