from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from loguru import logger

from app.ai.pattern_catalog import FALLBACK_DEFINITION, definition_for
from app.ai.signal_context import SignalSnapshot
from app.core.settings import settings


@dataclass(frozen=True)
class PatternMatch:
    pattern_name: str
    category: str
    detail_text: str
    candlestick_pattern_name: str | None
    talib_code: str | None
    description: str
    typical_duration_days: tuple[int, int]
    success_rate: str


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    predicate: Callable[[SignalSnapshot], bool]
    detail: Callable[[SignalSnapshot], str]


def _strip_prefix(prefix: str) -> Callable[[SignalSnapshot], str]:
    return lambda s: s.strategy_signal_type.replace(prefix, "", 1)


def _fixed(text: str) -> Callable[[SignalSnapshot], str]:
    return lambda _s: text


def _rsi_note(note: str) -> Callable[[SignalSnapshot], str]:
    return lambda s: f"RSI at {s.rsi_level:.0f} - {note}"


def _has(s: SignalSnapshot, marker: str) -> bool:
    return marker in s.strategy_signal_type


RULES: list[ClassificationRule] = [
    ClassificationRule(
        "Mean Reversion",
        lambda s: _has(s, "Short Pattern") and s.signal == "BUY",
        _strip_prefix("Short Pattern: "),
    ),
    ClassificationRule(
        "Bullish Divergence",
        lambda s: s.rsi_divergence == "BullishDivergence",
        _fixed("RSI making higher lows while price makes lower lows"),
    ),
    ClassificationRule(
        "Bearish Divergence",
        lambda s: s.rsi_divergence == "BearishDivergence",
        _fixed("RSI making lower highs while price makes higher highs"),
    ),
    ClassificationRule(
        "Momentum Breakout",
        lambda s: _has(s, "Bullish Pattern") and s.momentum_score > 60,
        _strip_prefix("Bullish Pattern: "),
    ),
    ClassificationRule(
        "MACD Momentum Build",
        lambda s: s.macd_histogram_trend == "Building" and s.momentum_score > 55,
        _fixed("MACD histogram expanding, momentum accelerating"),
    ),
    ClassificationRule(
        "Strong Trend Continuation",
        lambda s: s.adx_strength == "Strong" and s.momentum_score > 65,
        lambda s: f"ADX showing {s.adx_strength} trend strength",
    ),
    ClassificationRule(
        "Oversold Bounce",
        lambda s: s.rsi_level < 30 and s.signal == "BUY",
        _rsi_note("extreme oversold"),
    ),
    ClassificationRule(
        "Extreme Oversold Recovery",
        lambda s: s.rsi_level < 20 and s.signal == "BUY",
        _rsi_note("panic selling exhaustion"),
    ),
    ClassificationRule(
        "Overbought Pullback",
        lambda s: s.rsi_level > 70 and s.signal == "SELL",
        _rsi_note("extreme overbought"),
    ),
    ClassificationRule(
        "Extreme Overbought Exhaustion",
        lambda s: s.rsi_level > 80 and s.signal == "SELL",
        _rsi_note("euphoric buying exhaustion"),
    ),
    ClassificationRule(
        "Bullish Continuation",
        lambda s: _has(s, "Bullish Pattern") and s.signal == "BUY",
        _strip_prefix("Bullish Pattern: "),
    ),
    ClassificationRule(
        "Bearish Continuation",
        lambda s: _has(s, "Short Pattern") and s.signal == "SELL",
        _strip_prefix("Short Pattern: "),
    ),
    ClassificationRule(
        "Pullback Entry",
        lambda s: s.signal == "BUY" and 40 < s.momentum_score < 60 and s.rsi_level < 50,
        _fixed("Buying weakness in a healthy uptrend"),
    ),
    ClassificationRule(
        "Consolidation Breakout",
        lambda s: _has(s, "Bullish Pattern") and s.adx_strength == "Weak" and s.momentum_score > 50,
        _fixed("Breaking out from sideways consolidation"),
    ),
    ClassificationRule(
        "Momentum Fade",
        lambda s: s.macd_histogram_trend == "Fading" and s.signal == "SELL",
        _fixed("MACD histogram contracting, momentum weakening"),
    ),
]

FALLBACK_RULE = ClassificationRule(
    FALLBACK_DEFINITION.name,
    lambda _s: True,
    lambda s: s.strategy_signal_type or "Multi-factor technical analysis",
)


def strict_extremes_order(rules: list[ClassificationRule]) -> list[ClassificationRule]:
    """Move each "Extreme ..." RSI rule ahead of its looser sibling.

    With the default order the looser rule (RSI < 30 / > 70) always wins, so
    the extreme variants can never match.
    """

    out = list(rules)
    for loose, strict in (("Oversold Bounce", "Extreme Oversold Recovery"), ("Overbought Pullback", "Extreme Overbought Exhaustion")):
        names = [r.name for r in out]
        i, j = names.index(loose), names.index(strict)
        if j > i:
            out.insert(i, out.pop(j))
    return out


def first_match(rules: Iterable[ClassificationRule], snapshot: SignalSnapshot) -> ClassificationRule | None:
    for rule in rules:
        if rule.predicate(snapshot):
            return rule
    return None


def classify(snapshot: SignalSnapshot, *, strict_extremes_first: bool | None = None) -> PatternMatch:
    """Run the first-match-wins cascade; always returns exactly one match."""

    if strict_extremes_first is None:
        strict_extremes_first = bool(getattr(settings, "PATTERN_STRICT_EXTREMES_FIRST", False))
    rules = strict_extremes_order(RULES) if strict_extremes_first else RULES

    rule = first_match(rules, snapshot) or FALLBACK_RULE
    d = definition_for(rule.name)
    logger.debug("pattern cascade matched {name} signal={signal}", name=rule.name, signal=snapshot.signal)
    return PatternMatch(
        pattern_name=d.name,
        category=d.category,
        detail_text=rule.detail(snapshot),
        candlestick_pattern_name=snapshot.candlestick_pattern_name,
        talib_code=snapshot.talib_code,
        description=d.description,
        typical_duration_days=d.typical_duration_days,
        success_rate=d.success_rate,
    )
