# This file provides record builders shared by the pricing engine tests.
# It exists so each test states only the fields it cares about and inherits neutral defaults for the rest.
# The defaults describe a plain weekday job with no surge, no urgency, and no competitors.

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any

from src.marketplace_pricing.models import (
    Budget,
    ClientProfile,
    CompetitorPrice,
    JobCharacteristics,
    Location,
    MarketData,
    PricePoint,
    PricingFactors,
    ProviderMetrics,
    Timeline,
)

FIXED_NOW = datetime(2025, 3, 4, 12, 0, tzinfo=UTC)


def make_job(**overrides: Any) -> JobCharacteristics:
    job = JobCharacteristics(
        category="plumbing",
        complexity="moderate",
        location=Location(lat=37.77, lng=-122.41, city="San Francisco", postal_code="94103"),
        timeline=Timeline(),
        requirements=(),
        budget=Budget(min=80.0, max=120.0),
        client_profile=ClientProfile(
            rating=4.0,
            payment_history="good",
            repeat_customer=False,
            preferred_price="value",
        ),
    )
    return replace(job, **overrides)


def make_provider(**overrides: Any) -> ProviderMetrics:
    provider = ProviderMetrics(
        provider_id="p-1",
        rating=4.2,
        completion_rate=0.92,
        response_time_hours=2.0,
        price_history=(),
        demand_score=0.5,
        quality_score=0.5,
        reliability_score=0.8,
    )
    return replace(provider, **overrides)


def make_factors(**overrides: Any) -> PricingFactors:
    factors = PricingFactors(
        demand=0.5,
        supply=0.5,
        urgency="low",
        time_of_day=8,
        day_of_week=2,
        seasonality=0.5,
    )
    return replace(factors, **overrides)


def make_competitors(prices: list[float], *, rating: float = 4.3) -> tuple[CompetitorPrice, ...]:
    return tuple(
        CompetitorPrice(provider_id=f"c-{index}", price=price, rating=rating, booking_rate=0.6)
        for index, price in enumerate(prices)
    )


def make_market_data(**overrides: Any) -> MarketData:
    market_data = MarketData(
        average_prices={"plumbing": 100.0},
        competitor_prices=(),
        demand_index=0.5,
        supply_index=0.5,
        price_elasticity=0.5,
    )
    return replace(market_data, **overrides)


def make_price_history(count: int) -> tuple[PricePoint, ...]:
    return tuple(
        PricePoint(price=100.0 + index, timestamp=FIXED_NOW - timedelta(days=index), job_type="plumbing")
        for index in range(count)
    )


class FrozenClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: datetime = FIXED_NOW) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)
