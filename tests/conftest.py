"""
Pytest setup shared by every test area.
Puts the repository root on `sys.path`, points the policy path at the repo YAML, and clears market data sources
so tests never reach a real database or snapshot file by accident.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

TEST_ENV_DEFAULTS = {
    "PROJECT_NAME": "test-project",
    "ENV": "test",
    "LOG_LEVEL": "INFO",
    "PRICING_POLICY_PATH": str(ROOT_DIR / "configs" / "pricing_policy.yaml"),
}

# The API module builds its app at import time, before fixtures run.
for _key, _value in TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _value)


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key, value in TEST_ENV_DEFAULTS.items():
        if os.getenv(key) is None:
            monkeypatch.setenv(key, value)
    monkeypatch.delenv("MARKET_DATA_DATABASE_URL", raising=False)
    monkeypatch.delenv("MARKET_SNAPSHOT_PATH", raising=False)
