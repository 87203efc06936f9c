# This module derives the pre-adjustment price for a job.
# It starts from the market category average and scales it by complexity, provider quality, and client preference.
# The calculation is pure and rounds half-up to the nearest currency unit.

from __future__ import annotations

from src.marketplace_pricing.inputs import round_half_up
from src.marketplace_pricing.models import JobCharacteristics, MarketData, ProviderMetrics
from src.marketplace_pricing.pricing_config import PricingConfig


def market_reference_price(job: JobCharacteristics, market_data: MarketData) -> float:
    average = market_data.average_prices.get(job.category)
    if average is not None and average > 0:
        return float(average)
    return job.budget.midpoint


def quality_adjustment(provider: ProviderMetrics, config: PricingConfig) -> float:
    return 1 + (provider.quality_score - 0.5) * config.quality_adjustment_weight


def calculate_base_price(
    job: JobCharacteristics,
    provider: ProviderMetrics,
    market_data: MarketData,
    config: PricingConfig,
) -> float:
    base_price = market_reference_price(job, market_data)
    base_price *= config.complexity_multiplier(job.complexity)
    base_price *= quality_adjustment(provider, config)
    base_price *= config.client_preference_multiplier(job.client_profile.preferred_price)
    return round_half_up(base_price)
