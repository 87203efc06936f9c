# This file provides shared helpers for API endpoint tests.
# It exists so tests can override the pricing service without touching real market data stores.
# The helpers build consistent config objects, in-memory engines, and scoped TestClient contexts.

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi.testclient import TestClient

from src.api.api_config import ApiConfig
from src.api.app import app
from src.api.dependencies import get_config, get_pricing_service
from src.api.services.pricing_service import PricingService
from src.marketplace_pricing.market_data import MarketDataProvider
from src.marketplace_pricing.market_data_sources import StaticMarketDataProvider, market_data_from_dict
from src.marketplace_pricing.models import Location, MarketData
from src.marketplace_pricing.pricing_config import PricingConfig
from src.marketplace_pricing.recommendation import create_pricing_engine

PLUMBING_94103 = market_data_from_dict(
    {
        "average_prices": {"plumbing": 100.0},
        "competitor_prices": [
            {"provider_id": "c-1", "price": 95.0, "rating": 4.4, "booking_rate": 0.6},
            {"provider_id": "c-2", "price": 105.0, "rating": 4.6, "booking_rate": 0.7},
        ],
        "demand_index": 0.6,
        "supply_index": 0.5,
        "price_elasticity": 0.4,
    }
)


def build_test_config() -> ApiConfig:
    """Create deterministic API config for tests."""

    return ApiConfig(
        api_name="Test Pricing API",
        api_version_path="/api/v1",
        schema_version="1.0.0",
        environment="test",
        market_database_url=None,
        market_stats_table_name="market_price_stats",
        competitor_table_name="competitor_listings",
        market_snapshot_path=None,
        pricing_policy_path="configs/pricing_policy.yaml",
        allowed_origins=[],
        app_version="0.1.0",
    )


class FakeSqlProvider:
    """Market provider stand-in that reports a configurable connection state."""

    def __init__(self, *, connected: bool = True) -> None:
        self._connected = connected

    def can_connect(self) -> bool:
        return self._connected

    async def fetch_market_data(self, category: str, location: Location) -> MarketData:
        if not self._connected:
            raise ConnectionError("market database unreachable")
        return PLUMBING_94103


def build_test_service(
    *,
    config: ApiConfig | None = None,
    provider: MarketDataProvider | None = None,
) -> PricingService:
    resolved_provider = provider or StaticMarketDataProvider({("plumbing", "94103"): PLUMBING_94103})
    engine = create_pricing_engine(provider=resolved_provider, config=PricingConfig())
    return PricingService(config=config or build_test_config(), engine=engine)


@contextmanager
def api_test_client(
    *,
    config: ApiConfig | None = None,
    pricing_service: Any | None = None,
) -> Iterator[TestClient]:
    """Yield a TestClient with scoped dependency overrides."""

    resolved_config = config or build_test_config()
    resolved_service = pricing_service or build_test_service(config=resolved_config)

    app.dependency_overrides[get_config] = lambda: resolved_config
    app.dependency_overrides[get_pricing_service] = lambda: resolved_service

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
