# This module converts live market conditions into seven independent pricing multipliers.
# It exists to isolate signal-to-multiplier logic from base pricing and from the final assembly step.
# Stepwise rules are expressed as band ladders from the pricing policy so each factor can be tuned alone.
# The combined product is clamped to policy bounds before it touches the base price.

from __future__ import annotations

from dataclasses import dataclass

from src.marketplace_pricing.bands import band_value, select_band
from src.marketplace_pricing.competition import summarize_competition
from src.marketplace_pricing.inputs import round_half_up
from src.marketplace_pricing.models import (
    AdjustmentSet,
    JobCharacteristics,
    MarketData,
    PricingFactors,
    ProviderMetrics,
)
from src.marketplace_pricing.pricing_config import PricingConfig

WEEKEND_DAYS = {0, 6}


@dataclass(frozen=True)
class AppliedAdjustment:
    price: float
    total_multiplier: float
    raw_total_multiplier: float

    @property
    def clamped(self) -> bool:
        return self.total_multiplier != self.raw_total_multiplier


def calculate_time_multiplier(hour: int, day_of_week: int) -> float:
    multiplier = 1.0
    if 9 <= hour <= 17:
        multiplier += 0.1
    if hour < 8 or hour > 20 or day_of_week in WEEKEND_DAYS:
        multiplier += 0.15
    if hour < 6 or hour > 22:
        multiplier += 0.25
    return multiplier


def demand_supply_ratio(demand: float, supply: float, config: PricingConfig) -> float:
    return demand / max(supply, config.demand_surge_supply_floor)


def calculate_demand_surge(demand: float, supply: float, config: PricingConfig) -> tuple[float, str]:
    ratio = demand_supply_ratio(demand, supply, config)
    band = select_band(ratio, config.demand_surge_bands)
    if band is None:
        return 1.0, "none"
    return band.value, band.label or "none"


def calculate_quality_premium(provider: ProviderMetrics, config: PricingConfig) -> float:
    premium = 1.0
    premium += band_value(provider.rating, config.quality_rating_bands, default=0.0)
    premium += band_value(provider.completion_rate, config.quality_completion_bands, default=0.0)
    premium += band_value(provider.experience_years, config.quality_experience_bands, default=0.0)
    premium += band_value(provider.demand_score, config.quality_demand_score_bands, default=0.0)
    return max(config.quality_premium_floor, min(config.quality_premium_ceiling, premium))


def calculate_seasonal_multiplier(seasonality: float) -> float:
    return 0.9 + seasonality * 0.2


def calculate_weather_multiplier(weather_impact: float | None) -> float:
    if weather_impact is None:
        return 1.0
    return 0.95 + weather_impact * 0.1


def calculate_competition_adjustment(market_data: MarketData, config: PricingConfig) -> float:
    # Dispersion is checked before crowding; a dispersed crowded market gets the dispersion multiplier.
    summary = summarize_competition(market_data)
    if summary is None:
        return 1.0
    if summary.price_dispersion > config.competition_dispersion_threshold:
        return config.competition_dispersion_multiplier
    if summary.competitor_count > config.competition_crowded_count:
        return config.competition_crowded_multiplier
    return 1.0


def calculate_adjustments(
    job: JobCharacteristics,
    provider: ProviderMetrics,
    factors: PricingFactors,
    market_data: MarketData,
    config: PricingConfig,
) -> AdjustmentSet:
    surge_multiplier, surge_level = calculate_demand_surge(factors.demand, factors.supply, config)
    return AdjustmentSet(
        time_based_multiplier=calculate_time_multiplier(factors.time_of_day, factors.day_of_week),
        demand_surge_multiplier=surge_multiplier,
        quality_premium=calculate_quality_premium(provider, config),
        urgency_bonus=config.urgency_multiplier(factors.urgency),
        seasonal_multiplier=calculate_seasonal_multiplier(factors.seasonality),
        weather_multiplier=calculate_weather_multiplier(factors.weather_impact),
        competition_adjustment=calculate_competition_adjustment(market_data, config),
        demand_surge_level=surge_level,
    )


def apply_adjustments(base_price: float, adjustments: AdjustmentSet, config: PricingConfig) -> AppliedAdjustment:
    raw_total = adjustments.product()
    total = max(config.min_total_multiplier, min(config.max_total_multiplier, raw_total))
    price = max(config.min_price, round_half_up(base_price * total))
    return AppliedAdjustment(price=price, total_multiplier=total, raw_total_multiplier=raw_total)
