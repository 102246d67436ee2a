from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PatternDefinition:
    name: str
    category: str
    description: str
    typical_duration_days: tuple[int, int]
    success_rate: str


# Candlestick names emitted by the upstream screener -> TA-Lib function codes.
# Engulfing shares one code for both directions.
CANDLESTICK_CODES: dict[str, str] = {
    # Bullish
    "Hammer": "CDLHAMMER",
    "Inverted Hammer": "CDLINVERTEDHAMMER",
    "Morning Star": "CDLMORNINGSTAR",
    "Three White Soldiers": "CDL3WHITESOLDIERS",
    "Bullish Engulfing": "CDLENGULFING",
    "Piercing Pattern": "CDLPIERCING",
    # Bearish
    "Hanging Man": "CDLHANGINGMAN",
    "Shooting Star": "CDLSHOOTINGSTAR",
    "Evening Star": "CDLEVENINGSTAR",
    "Three Black Crows": "CDL3BLACKCROWS",
    "Bearish Engulfing": "CDLENGULFING",
    "Dark Cloud Cover": "CDLDARKCLOUDCOVER",
}


def _build_definitions() -> list[PatternDefinition]:
    # Cascade order; pattern_classifier.py pairs each entry with its predicate.
    return [
        PatternDefinition("Mean Reversion", "Contrarian", "Buying the dip after oversold panic selling", (3, 7), "Moderate (55-65%)"),
        PatternDefinition("Bullish Divergence", "Reversal", "Momentum shifting despite price weakness", (5, 10), "High (65-75%)"),
        PatternDefinition("Bearish Divergence", "Reversal", "Momentum weakening despite price strength", (5, 10), "High (65-75%)"),
        PatternDefinition("Momentum Breakout", "Continuation", "Strong momentum continuation setup", (5, 15), "High (70-80%)"),
        PatternDefinition("MACD Momentum Build", "Continuation", "Momentum gaining strength with MACD confirmation", (3, 10), "Moderate-High (60-70%)"),
        PatternDefinition("Strong Trend Continuation", "Trend Following", "Powerful directional trend confirmed by ADX", (10, 20), "Very High (75-85%)"),
        PatternDefinition("Oversold Bounce", "Mean Reversion", "Technical rebound from oversold levels", (2, 5), "Moderate (55-65%)"),
        PatternDefinition("Extreme Oversold Recovery", "Mean Reversion", "Severe oversold condition creating strong bounce potential", (3, 7), "High (65-75%)"),
        PatternDefinition("Overbought Pullback", "Mean Reversion", "Profit-taking after extended rally", (2, 5), "Moderate (55-65%)"),
        PatternDefinition("Extreme Overbought Exhaustion", "Mean Reversion", "Excessive bullishness creating pullback risk", (3, 7), "High (65-75%)"),
        PatternDefinition("Bullish Continuation", "Trend Following", "Riding the established uptrend", (5, 15), "High (65-75%)"),
        PatternDefinition("Bearish Continuation", "Trend Following", "Following the established downtrend", (5, 15), "High (65-75%)"),
        PatternDefinition("Pullback Entry", "Trend Retracement", "Tactical entry on temporary weakness", (3, 7), "Moderate-High (60-70%)"),
        PatternDefinition("Consolidation Breakout", "Range Expansion", "Explosive move after compression phase", (5, 12), "Moderate-High (60-70%)"),
        PatternDefinition("Momentum Fade", "Reversal Warning", "Early warning of potential trend reversal", (3, 8), "Moderate (50-60%)"),
    ]


PATTERN_DEFINITIONS: list[PatternDefinition] = _build_definitions()

FALLBACK_DEFINITION = PatternDefinition(
    "Technical Setup", "Standard", "Comprehensive technical signal", (3, 10), "Moderate (50-60%)"
)

_BY_NAME: dict[str, PatternDefinition] = {d.name: d for d in [*PATTERN_DEFINITIONS, FALLBACK_DEFINITION]}


def talib_code(candlestick_name: str | None) -> str | None:
    if not candlestick_name:
        return None
    return CANDLESTICK_CODES.get(str(candlestick_name).strip())


def definition_for(pattern_name: str) -> PatternDefinition:
    """Catalog entry for a cascade pattern name.

    Raises KeyError for names that are not part of the cascade.
    """

    return _BY_NAME[pattern_name]
