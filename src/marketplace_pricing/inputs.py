# This module clamps caller-supplied inputs into the ranges the calculators assume.
# It exists because the engine is advisory: malformed values are corrected, never rejected.
# Each helper returns a new frozen record so the caller's snapshot stays untouched.
# Unknown enum values fall back to the neutral level for that field.

from __future__ import annotations

import math
from dataclasses import replace

from src.marketplace_pricing.models import (
    COMPLEXITY_LEVELS,
    PRICE_PREFERENCES,
    URGENCY_LEVELS,
    Budget,
    JobCharacteristics,
    PricingFactors,
    ProviderMetrics,
)


def clamp(value: float | None, lower: float, upper: float, *, default: float | None = None) -> float:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        if default is None:
            return lower
        return default
    return max(lower, min(upper, float(value)))


def round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def as_amount(value: object) -> float:
    """Non-negative money amount; missing, unparseable, or NaN values become 0."""

    try:
        amount = float(value or 0.0)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount):
        return 0.0
    return max(0.0, amount)


def _normalize_level(value: str, allowed: tuple[str, ...], default: str) -> str:
    normalized = str(value or "").strip().lower()
    return normalized if normalized in allowed else default


def clamp_factors(factors: PricingFactors) -> PricingFactors:
    weather = factors.weather_impact
    return replace(
        factors,
        demand=clamp(factors.demand, 0.0, 1.0),
        supply=clamp(factors.supply, 0.0, 1.0),
        urgency=_normalize_level(factors.urgency, URGENCY_LEVELS, "low"),
        time_of_day=int(clamp(factors.time_of_day, 0, 23)),
        day_of_week=int(clamp(factors.day_of_week, 0, 6)),
        seasonality=clamp(factors.seasonality, 0.0, 1.0, default=0.5),
        weather_impact=None if weather is None else clamp(weather, 0.0, 1.0),
    )


def clamp_provider(provider: ProviderMetrics) -> ProviderMetrics:
    return replace(
        provider,
        rating=clamp(provider.rating, 0.0, 5.0),
        completion_rate=clamp(provider.completion_rate, 0.0, 1.0),
        response_time_hours=max(0.0, float(provider.response_time_hours or 0.0)),
        demand_score=clamp(provider.demand_score, 0.0, 1.0),
        quality_score=clamp(provider.quality_score, 0.0, 1.0, default=0.5),
        reliability_score=clamp(provider.reliability_score, 0.0, 1.0, default=0.5),
        experience_years=max(0.0, float(provider.experience_years or 0.0)),
    )


def clamp_budget(budget: Budget) -> Budget:
    low = as_amount(budget.min)
    high = as_amount(budget.max)
    if high < low:
        low, high = high, low
    return replace(budget, min=low, max=high)


def clamp_job(job: JobCharacteristics) -> JobCharacteristics:
    client = job.client_profile
    return replace(
        job,
        complexity=_normalize_level(job.complexity, COMPLEXITY_LEVELS, "moderate"),
        budget=clamp_budget(job.budget),
        client_profile=replace(
            client,
            rating=clamp(client.rating, 0.0, 5.0),
            preferred_price=_normalize_level(client.preferred_price, PRICE_PREFERENCES, "value"),
        ),
    )
