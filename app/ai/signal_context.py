from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Literal, Mapping

from app.ai.pattern_catalog import talib_code


TradeAction = Literal["BUY", "SELL", "HOLD"]
RsiDivergence = Literal["None", "BullishDivergence", "BearishDivergence"]
AdxStrength = Literal["Weak", "Moderate", "Strong"]
MacdHistogramTrend = Literal["Building", "Fading", "Stable"]
VolatilityClass = Literal["Low", "Normal", "High", "Extreme"]

_PATTERN_MARKER = "Pattern: "

# Canonical regime vocabulary. Labels outside it never align with a signal.
MARKET_REGIMES = ("Trending Up", "Trending Down", "Sideways")
NIFTY_REGIMES = ("Bullish", "Bearish")


class NotApplicable(ValueError):
    """Raised when there is no analysis or no signal to assess.

    Hosts treat this as "nothing to render", not as a user-facing error.
    """


@dataclass(frozen=True)
class SignalSnapshot:
    strategy_signal_type: str
    candlestick_pattern_name: str | None
    signal: TradeAction
    rsi_level: float = 50.0
    rsi_divergence: RsiDivergence = "None"
    # Any divergence label, including ones without a direction ("Hidden Divergence").
    divergence_detected: bool = False
    momentum_score: float = 50.0
    adx_strength: AdxStrength = "Moderate"
    macd_histogram_trend: MacdHistogramTrend = "Stable"
    volatility_classification: VolatilityClass = "Normal"
    market_regime: str = ""
    nifty_regime: str = ""
    vix_level: float = 15.0
    advance_decline_ratio: float = 1.0

    @property
    def talib_code(self) -> str | None:
        return talib_code(self.candlestick_pattern_name)


def _f(x: Any, default: float, *, positive: bool = False) -> float:
    if x is None or isinstance(x, bool):
        return float(default)
    try:
        v = float(x)
    except Exception:
        return float(default)
    if not math.isfinite(v):
        return float(default)
    # VIX and A/D ratio are never 0 in a live feed; 0 means the value dropped.
    if positive and v <= 0:
        return float(default)
    return v


def _s(x: Any) -> str:
    if x is None:
        return ""
    return str(x).strip()


def _section(obj: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        return {}
    v = obj.get(key)
    return v if isinstance(v, Mapping) else {}


def _signal(raw: Any) -> TradeAction:
    s = _s(raw).upper()
    if s in {"BUY", "SELL", "HOLD"}:
        return s  # type: ignore[return-value]
    return "HOLD"


def _divergence(raw: Any) -> RsiDivergence:
    # Upstream sends prose such as "Bullish Divergence detected" or "None".
    s = _s(raw).lower().replace(" ", "").replace("_", "")
    if "divergence" not in s:
        return "None"
    if "bullish" in s:
        return "BullishDivergence"
    if "bearish" in s:
        return "BearishDivergence"
    return "None"


def _divergence_detected(raw: Any) -> bool:
    s = _s(raw).lower()
    if "divergence" not in s:
        return False
    return "none" not in s and not s.startswith("no ")


def _regime(raw: Any, vocabulary: tuple[str, ...]) -> str:
    s = _s(raw)
    for label in vocabulary:
        if s.lower() == label.lower():
            return label
    return s


def _adx(raw: Any) -> AdxStrength:
    s = _s(raw).lower()
    if s == "strong":
        return "Strong"
    if s == "weak":
        return "Weak"
    return "Moderate"


def _macd_trend(raw: Any) -> MacdHistogramTrend:
    s = _s(raw).lower()
    if s == "building":
        return "Building"
    if s == "fading":
        return "Fading"
    return "Stable"


def _volatility(raw: Any) -> VolatilityClass:
    # "Low Volatility" and bare "Low" are both in circulation.
    s = _s(raw).lower()
    if s.endswith(" volatility"):
        s = s[: -len(" volatility")].strip()
    if s == "low":
        return "Low"
    if s == "high":
        return "High"
    if s == "extreme":
        return "Extreme"
    return "Normal"


def candlestick_name(strategy_type: str) -> str | None:
    """Candlestick name embedded as "...Pattern: <name>", if any."""

    if _PATTERN_MARKER not in strategy_type:
        return None
    name = strategy_type.split(_PATTERN_MARKER, 1)[1].strip()
    return name or None


def build_snapshot(
    analysis: Mapping[str, Any] | None,
    signal: Any,
    market_context: Mapping[str, Any] | None = None,
) -> SignalSnapshot:
    """Normalize the raw analysis + market-context payloads into a SignalSnapshot.

    Every field the downstream rules read is defaulted here; nothing past this
    point deals with missing data. Raises NotApplicable when the analysis
    object or the signal is absent.
    """

    if not isinstance(analysis, Mapping):
        raise NotApplicable("analysis payload is missing")
    if not _s(signal):
        raise NotApplicable("signal is missing")

    strategy = _section(analysis, "strategy_signal")
    momentum = _section(analysis, "momentum_analysis")
    rsi_a = _section(momentum, "rsi_analysis")
    vol_regime = _section(_section(analysis, "volatility_analysis"), "volatility_regime")

    ctx: Mapping[str, Any] = market_context if isinstance(market_context, Mapping) else {}
    breadth = _section(ctx, "breadth_indicators")

    strategy_type = _s(strategy.get("type"))

    return SignalSnapshot(
        strategy_signal_type=strategy_type,
        candlestick_pattern_name=candlestick_name(strategy_type),
        signal=_signal(signal),
        rsi_level=_f(rsi_a.get("current_rsi"), 50.0),
        rsi_divergence=_divergence(rsi_a.get("divergence")),
        divergence_detected=_divergence_detected(rsi_a.get("divergence")),
        momentum_score=_f(momentum.get("momentum_score"), 50.0),
        adx_strength=_adx(_section(momentum, "adx_analysis").get("strength")),
        macd_histogram_trend=_macd_trend(_section(momentum, "macd_histogram_analysis").get("trend")),
        volatility_classification=_volatility(vol_regime.get("classification")),
        market_regime=_regime(ctx.get("regime"), MARKET_REGIMES),
        nifty_regime=_regime(ctx.get("nifty_regime"), NIFTY_REGIMES),
        vix_level=_f(ctx.get("current_vix_level"), 15.0, positive=True),
        advance_decline_ratio=_f(breadth.get("advance_decline_ratio"), 1.0, positive=True),
    )
