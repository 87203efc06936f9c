# This module builds the labeled pricing alternatives shown next to a recommendation.
# Each strategy carries a projected booking rate so alternatives can be ranked by expected revenue.
# Strategies that need competitor data or a strong rating are only emitted when that signal exists.

from __future__ import annotations

from src.marketplace_pricing.competition import summarize_competition
from src.marketplace_pricing.inputs import round_half_up
from src.marketplace_pricing.models import (
    JobCharacteristics,
    MarketData,
    PricingStrategy,
    ProviderMetrics,
)

PREMIUM_RATING_THRESHOLD = 4.5

COMPETITIVE_PRICE_FACTOR = 0.95
PREMIUM_PRICE_FACTOR = 1.2
DYNAMIC_PRICE_FACTOR = 1.1

COMPETITIVE_BOOKING_RATE = 0.75
PREMIUM_BOOKING_RATE = 0.45
VALUE_BOOKING_RATE = 0.6
DYNAMIC_BOOKING_RATE = 0.65


def _money(value: float) -> float:
    return round(value, 2)


def rank_strategies(strategies: list[PricingStrategy]) -> list[PricingStrategy]:
    return sorted(strategies, key=lambda strategy: strategy.expected_revenue, reverse=True)


def generate_strategies(
    base_price: float,
    job: JobCharacteristics,
    provider: ProviderMetrics,
    market_data: MarketData,
) -> list[PricingStrategy]:
    strategies: list[PricingStrategy] = []
    currency = job.budget.currency

    competition = summarize_competition(market_data)
    if competition is not None:
        price = _money(competition.average_price * COMPETITIVE_PRICE_FACTOR)
        strategies.append(
            PricingStrategy(
                type="competitive",
                price=price,
                description=f"Price at {int(round_half_up(price))} {currency} (5% below market average)",
                expected_outcome="Higher booking probability, moderate profit margin",
                risk_level="low",
                expected_booking_rate=COMPETITIVE_BOOKING_RATE,
            )
        )

    if provider.rating >= PREMIUM_RATING_THRESHOLD:
        price = _money(base_price * PREMIUM_PRICE_FACTOR)
        strategies.append(
            PricingStrategy(
                type="premium",
                price=price,
                description=f"Price at {int(round_half_up(price))} {currency} (20% premium for quality)",
                expected_outcome="Lower booking rate but higher profit per job",
                risk_level="medium",
                expected_booking_rate=PREMIUM_BOOKING_RATE,
            )
        )

    strategies.append(
        PricingStrategy(
            type="value",
            price=_money(base_price),
            description=f"Price at {int(round_half_up(base_price))} {currency} (balanced value proposition)",
            expected_outcome="Balanced booking rate and profit margin",
            risk_level="low",
            expected_booking_rate=VALUE_BOOKING_RATE,
        )
    )

    strategies.append(
        PricingStrategy(
            type="dynamic",
            price=_money(base_price * DYNAMIC_PRICE_FACTOR),
            description="Adaptive pricing that adjusts to live demand, supply, and timing conditions",
            expected_outcome="Maximized revenue through continuous price adjustments",
            risk_level="medium",
            expected_booking_rate=DYNAMIC_BOOKING_RATE,
        )
    )

    return rank_strategies(strategies)
