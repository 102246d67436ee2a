import os
import sys

import pytest

# Ensure repository root is on sys.path so `import app` works when running pytest.
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Pin pattern settings to their defaults.

    A developer .env may override weights or rule order; tests assert the
    stock behavior unless they opt in explicitly.
    """

    from app.core.settings import settings as app_settings

    monkeypatch.setattr(app_settings, "APP_ENV", "test", raising=False)
    monkeypatch.setattr(app_settings, "PATTERN_STRICT_EXTREMES_FIRST", False, raising=False)
    monkeypatch.setattr(app_settings, "PATTERN_STRENGTH_WEIGHTS", {}, raising=False)
    monkeypatch.setattr(app_settings, "PATTERN_RELIABILITY_WEIGHTS", {}, raising=False)
    yield
