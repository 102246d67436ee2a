from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Performance logging (console)
    # Logs request durations in ms. Useful for diagnosing sluggishness.
    PERF_LOG_ENABLED: bool = True
    # Log slow operations at WARNING when >= this threshold.
    PERF_LOG_SLOW_MS: int = 250
    # Internal (non-request) spans, e.g. pattern assessment.
    PERF_LOG_INNER_ENABLED: bool = True
    # If true, logs all internal spans (can be noisy). If false, logs only slow spans.
    PERF_LOG_INNER_ALWAYS: bool = False

    # CORS
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    # Pattern context
    # Evaluate "Extreme Oversold Recovery" / "Extreme Overbought Exhaustion" before
    # their looser siblings. Off by default: the looser rule wins, as it always has.
    PATTERN_STRICT_EXTREMES_FIRST: bool = False
    # Weight overrides as JSON objects keyed by field name, e.g.
    # PATTERN_STRENGTH_WEIGHTS='{"momentum_strong": 30}'
    # PATTERN_RELIABILITY_WEIGHTS='{"base": 45, "vix_extreme": -20}'
    PATTERN_STRENGTH_WEIGHTS: dict[str, int] = {}
    PATTERN_RELIABILITY_WEIGHTS: dict[str, int] = {}


settings = Settings()
