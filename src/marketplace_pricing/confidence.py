# This module scores how much market and provider history backs a recommendation.
# It exists so consumers can weigh a suggested price against the data volume behind it.
# The score is additive from a base and capped below 1.0; the engine never claims full certainty.

from __future__ import annotations

from src.marketplace_pricing.competition import priced_competitors
from src.marketplace_pricing.models import AdjustmentSet, JobCharacteristics, MarketData, ProviderMetrics
from src.marketplace_pricing.pricing_config import PricingConfig

MIN_COMPETITORS_FOR_CONFIDENCE = 5
MIN_PRICE_HISTORY_POINTS = 10
STRONG_RATING = 4.5
STRONG_COMPLETION_RATE = 0.95
LOW_PRICE_ELASTICITY = 0.3


def calculate_confidence(
    job: JobCharacteristics,
    provider: ProviderMetrics,
    market_data: MarketData,
    adjustments: AdjustmentSet,
    config: PricingConfig,
) -> float:
    confidence = config.confidence_base

    if len(priced_competitors(market_data)) >= MIN_COMPETITORS_FOR_CONFIDENCE:
        confidence += 0.1
    if len(provider.price_history) > MIN_PRICE_HISTORY_POINTS:
        confidence += 0.1

    if provider.rating >= STRONG_RATING:
        confidence += 0.1
    if provider.completion_rate >= STRONG_COMPLETION_RATE:
        confidence += 0.05

    if market_data.price_elasticity < LOW_PRICE_ELASTICITY:
        confidence += 0.05

    return round(max(0.0, min(config.confidence_cap, confidence)), 4)


def confidence_label(confidence: float) -> str:
    if confidence >= 0.85:
        return "high"
    if confidence >= 0.7:
        return "medium"
    return "low"
