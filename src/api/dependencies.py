# This file wires the pricing policy, market data source, engine, and service for FastAPI dependency injection.
# Each factory is cached so the market data cache is shared by every request in the process.
# Tests replace `get_config` and `get_pricing_service` through `app.dependency_overrides`.

from __future__ import annotations

from functools import lru_cache

from src.api.api_config import ApiConfig, get_api_config
from src.api.services.pricing_service import PricingService
from src.marketplace_pricing.market_data import MarketDataProvider
from src.marketplace_pricing.market_data_sources import build_market_data_provider
from src.marketplace_pricing.pricing_config import PricingConfig, load_pricing_config
from src.marketplace_pricing.recommendation import PricingEngine, create_pricing_engine


@lru_cache(maxsize=1)
def get_pricing_config() -> PricingConfig:
    config = get_api_config()
    return load_pricing_config(config_path=config.pricing_policy_path)


@lru_cache(maxsize=1)
def get_market_data_provider() -> MarketDataProvider:
    config = get_api_config()
    return build_market_data_provider(
        database_url=config.market_database_url,
        snapshot_path=config.market_snapshot_path,
        stats_table_name=config.market_stats_table_name,
        competitor_table_name=config.competitor_table_name,
    )


@lru_cache(maxsize=1)
def get_pricing_engine() -> PricingEngine:
    return create_pricing_engine(provider=get_market_data_provider(), config=get_pricing_config())


@lru_cache(maxsize=1)
def get_pricing_service() -> PricingService:
    config = get_api_config()
    return PricingService(config=config, engine=get_pricing_engine())


def get_config() -> ApiConfig:
    return get_api_config()
