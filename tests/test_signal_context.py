from __future__ import annotations

import pytest

from app.ai.signal_context import NotApplicable, build_snapshot, candlestick_name


def _analysis() -> dict:
    return {
        "strategy_signal": {"type": "Bullish Pattern: Morning Star"},
        "momentum_analysis": {
            "momentum_score": 68,
            "rsi_analysis": {"current_rsi": 41.5, "divergence": "Bullish Divergence detected"},
            "adx_analysis": {"strength": "Strong"},
            "macd_histogram_analysis": {"trend": "Building"},
        },
        "volatility_analysis": {"volatility_regime": {"classification": "Low Volatility"}},
    }


def test_full_payload_is_normalized():
    market = {
        "regime": "Trending Up",
        "nifty_regime": "Bullish",
        "current_vix_level": 13.2,
        "breadth_indicators": {"advance_decline_ratio": 1.8},
    }
    s = build_snapshot(_analysis(), "buy", market)

    assert s.signal == "BUY"
    assert s.strategy_signal_type == "Bullish Pattern: Morning Star"
    assert s.candlestick_pattern_name == "Morning Star"
    assert s.talib_code == "CDLMORNINGSTAR"
    assert s.momentum_score == 68.0
    assert s.rsi_level == 41.5
    assert s.rsi_divergence == "BullishDivergence"
    assert s.adx_strength == "Strong"
    assert s.macd_histogram_trend == "Building"
    assert s.volatility_classification == "Low"
    assert s.market_regime == "Trending Up"
    assert s.nifty_regime == "Bullish"
    assert s.vix_level == 13.2
    assert s.advance_decline_ratio == 1.8


def test_empty_payloads_take_defaults():
    s = build_snapshot({}, "SELL", None)
    assert s.signal == "SELL"
    assert s.strategy_signal_type == ""
    assert s.candlestick_pattern_name is None
    assert s.talib_code is None
    assert s.rsi_level == 50.0
    assert s.rsi_divergence == "None"
    assert s.momentum_score == 50.0
    assert s.adx_strength == "Moderate"
    assert s.macd_histogram_trend == "Stable"
    assert s.volatility_classification == "Normal"
    assert s.market_regime == ""
    assert s.nifty_regime == ""
    assert s.vix_level == 15.0
    assert s.advance_decline_ratio == 1.0


def test_missing_analysis_or_signal_is_not_applicable():
    for analysis, signal in [(None, "BUY"), ({}, None), ({}, ""), ({}, "   "), ("not a dict", "BUY")]:
        with pytest.raises(NotApplicable):
            build_snapshot(analysis, signal, {})


def test_garbage_numbers_fall_back_to_defaults():
    analysis = {
        "momentum_analysis": {
            "momentum_score": "n/a",
            "rsi_analysis": {"current_rsi": float("nan")},
        }
    }
    market = {"current_vix_level": None, "breadth_indicators": {"advance_decline_ratio": float("inf")}}
    s = build_snapshot(analysis, "BUY", market)
    assert s.momentum_score == 50.0
    assert s.rsi_level == 50.0
    assert s.vix_level == 15.0
    assert s.advance_decline_ratio == 1.0


def test_zero_momentum_is_kept_but_zero_vix_and_breadth_default():
    market = {"current_vix_level": 0, "breadth_indicators": {"advance_decline_ratio": 0}}
    s = build_snapshot({"momentum_analysis": {"momentum_score": 0, "rsi_analysis": {"current_rsi": 0}}}, "BUY", market)
    assert s.momentum_score == 0.0
    assert s.rsi_level == 0.0
    assert s.vix_level == 15.0
    assert s.advance_decline_ratio == 1.0

    s = build_snapshot({}, "BUY", {"current_vix_level": -3, "breadth_indicators": {"advance_decline_ratio": "-0.5"}})
    assert s.vix_level == 15.0
    assert s.advance_decline_ratio == 1.0


def test_sub_objects_of_wrong_type_are_ignored():
    s = build_snapshot({"strategy_signal": "Bullish Pattern: Hammer", "momentum_analysis": [1, 2]}, "BUY", {"breadth_indicators": 3})
    assert s.strategy_signal_type == ""
    assert s.momentum_score == 50.0
    assert s.advance_decline_ratio == 1.0


def test_unknown_signal_label_is_hold():
    assert build_snapshot({}, "STRONG BUY").signal == "HOLD"


def test_divergence_labels():
    # (raw label, direction, any divergence at all)
    cases = [
        ("Bearish Divergence", "BearishDivergence", True),
        ("BullishDivergence", "BullishDivergence", True),
        ("hidden bullish divergence", "BullishDivergence", True),
        ("Hidden Divergence", "None", True),
        ("divergence", "None", True),
        ("None", "None", False),
        ("No Divergence", "None", False),
        ("Divergence: None", "None", False),
        (None, "None", False),
    ]
    for raw, direction, detected in cases:
        s = build_snapshot({"momentum_analysis": {"rsi_analysis": {"divergence": raw}}}, "HOLD")
        assert s.rsi_divergence == direction, raw
        assert s.divergence_detected is detected, raw


def test_volatility_labels():
    cases = [
        ("Low Volatility", "Low"),
        ("high volatility", "High"),
        ("Extreme Volatility", "Extreme"),
        ("High", "High"),
        ("Normal Volatility", "Normal"),
        ("choppy", "Normal"),
    ]
    for raw, expected in cases:
        s = build_snapshot({"volatility_analysis": {"volatility_regime": {"classification": raw}}}, "HOLD")
        assert s.volatility_classification == expected, raw


def test_candlestick_name_extraction():
    assert candlestick_name("Short Pattern: Hanging Man") == "Hanging Man"
    assert candlestick_name("Bullish Pattern: Doji Sandwich") == "Doji Sandwich"
    assert candlestick_name("Bullish Pattern") is None
    assert candlestick_name("") is None


def test_regime_labels_are_canonicalized():
    cases = [
        ({"regime": "trending up"}, "Trending Up", ""),
        ({"regime": "  TRENDING DOWN "}, "Trending Down", ""),
        ({"regime": "sideways", "nifty_regime": "bearish"}, "Sideways", "Bearish"),
        ({"nifty_regime": "BULLISH"}, "", "Bullish"),
        # Outside the vocabulary: kept as sent, never translated.
        ({"regime": "Uptrend", "nifty_regime": "Neutral"}, "Uptrend", "Neutral"),
    ]
    for market, regime, nifty in cases:
        s = build_snapshot({}, "BUY", market)
        assert s.market_regime == regime, market
        assert s.nifty_regime == nifty, market
