# This module translates pricing signals into short human-readable notes.
# It exists so providers can see which conditions drove a recommendation without reading multipliers.
# Every note is tied to a fixed threshold; nothing is emitted unless its metric crosses that threshold.
# Wording lives here only, so the API and the CLI never disagree about an explanation.

from __future__ import annotations

from src.marketplace_pricing.competition import priced_competitors
from src.marketplace_pricing.models import (
    AdjustmentSet,
    JobCharacteristics,
    MarketData,
    PricingFactors,
    ProviderMetrics,
)

FALLBACK_INSIGHT = "Using fallback pricing due to limited market data"

HIGH_DEMAND_THRESHOLD = 0.7
LOW_DEMAND_THRESHOLD = 0.3
HIGH_COMPETITION_COUNT = 10
LOW_COMPETITION_COUNT = 3
EXCELLENT_RATING = 4.8
EXCELLENT_COMPLETION_RATE = 0.98
OFF_HOURS_MULTIPLIER = 1.1
PEAK_SEASON_THRESHOLD = 0.7
PRICE_TREND_THRESHOLD = 0.05


def _percent(value: float) -> int:
    return round(value * 100)


def generate_insights(
    job: JobCharacteristics,
    provider: ProviderMetrics,
    factors: PricingFactors,
    market_data: MarketData,
    adjustments: AdjustmentSet,
    *,
    multiplier_clamped: bool = False,
) -> list[str]:
    insights: list[str] = []

    if factors.demand > HIGH_DEMAND_THRESHOLD:
        insights.append(f"High demand detected in {job.category} - consider premium pricing")
    elif factors.demand < LOW_DEMAND_THRESHOLD:
        insights.append("Low demand period - competitive pricing recommended")

    if adjustments.demand_surge_multiplier > 1.0:
        insights.append(
            f"Demand exceeds available supply ({adjustments.demand_surge_level} surge, "
            f"+{_percent(adjustments.demand_surge_multiplier - 1)}%)"
        )

    competitor_count = len(priced_competitors(market_data))
    if competitor_count > HIGH_COMPETITION_COUNT:
        insights.append(f"High competition with {competitor_count} active providers")
    elif competitor_count < LOW_COMPETITION_COUNT:
        insights.append("Low competition - opportunity for premium pricing")

    if provider.rating >= EXCELLENT_RATING:
        insights.append(f"Your excellent rating ({provider.rating:g}) supports premium pricing")

    if provider.completion_rate >= EXCELLENT_COMPLETION_RATE:
        insights.append("Near-perfect completion rate enables higher pricing confidence")

    if factors.urgency in {"high", "critical"}:
        insights.append(f"High urgency allows for {_percent(adjustments.urgency_bonus - 1)}% urgency premium")

    if adjustments.time_based_multiplier > OFF_HOURS_MULTIPLIER:
        insights.append(f"Off-hours timing enables {_percent(adjustments.time_based_multiplier - 1)}% premium")

    if factors.seasonality > PEAK_SEASON_THRESHOLD:
        insights.append(f"Peak season - demand is {_percent(factors.seasonality)}% of annual high")

    price_change = market_data.trends.price_change_7d
    if abs(price_change) >= PRICE_TREND_THRESHOLD:
        direction = "up" if price_change > 0 else "down"
        insights.append(f"Market prices are {direction} {abs(_percent(price_change))}% over the last 7 days")

    if multiplier_clamped:
        insights.append("Combined adjustments exceeded policy bounds and were capped")

    return insights
