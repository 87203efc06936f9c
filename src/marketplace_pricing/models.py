# This module defines the value objects exchanged by the pricing-decision engine.
# It exists so calculators, the assembler, the CLI, and the API share one typed vocabulary.
# Every record is a frozen dataclass; the engine never mutates caller-supplied snapshots.
# Output records expose `to_dict` so transports can serialize them without reaching into internals.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

URGENCY_LEVELS = ("low", "medium", "high", "critical")
COMPLEXITY_LEVELS = ("simple", "moderate", "complex", "expert")
PRICE_PREFERENCES = ("budget", "value", "premium")
STRATEGY_TYPES = ("competitive", "premium", "penetration", "value", "dynamic")
RISK_LEVELS = ("low", "medium", "high")


@dataclass(frozen=True)
class EconomicIndicators:
    local_unemployment: float
    average_income: float
    competition_index: float


@dataclass(frozen=True)
class PricingFactors:
    demand: float
    supply: float
    urgency: str
    time_of_day: int
    day_of_week: int
    seasonality: float
    weather_impact: float | None = None
    economic_indicators: EconomicIndicators | None = None


@dataclass(frozen=True)
class PricePoint:
    price: float
    timestamp: datetime
    job_type: str


@dataclass(frozen=True)
class ProviderMetrics:
    provider_id: str
    rating: float
    completion_rate: float
    response_time_hours: float
    price_history: tuple[PricePoint, ...]
    demand_score: float
    quality_score: float
    reliability_score: float
    specializations: tuple[str, ...] = ()
    experience_years: float = 0.0
    certifications: tuple[str, ...] = ()


@dataclass(frozen=True)
class Location:
    lat: float
    lng: float
    city: str
    postal_code: str


@dataclass(frozen=True)
class Timeline:
    start_date: datetime | None = None
    deadline: datetime | None = None
    flexibility: str = "flexible"


@dataclass(frozen=True)
class Budget:
    min: float
    max: float
    currency: str = "USD"

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


@dataclass(frozen=True)
class ClientProfile:
    rating: float
    payment_history: str
    repeat_customer: bool
    preferred_price: str


@dataclass(frozen=True)
class JobCharacteristics:
    category: str
    complexity: str
    location: Location
    timeline: Timeline
    requirements: tuple[str, ...]
    budget: Budget
    client_profile: ClientProfile


@dataclass(frozen=True)
class CompetitorPrice:
    provider_id: str
    price: float
    rating: float
    booking_rate: float


@dataclass(frozen=True)
class MarketTrends:
    price_change_7d: float = 0.0
    price_change_30d: float = 0.0
    demand_change_7d: float = 0.0
    demand_change_30d: float = 0.0


@dataclass(frozen=True)
class MarketData:
    average_prices: dict[str, float]
    competitor_prices: tuple[CompetitorPrice, ...]
    demand_index: float
    supply_index: float
    price_elasticity: float
    trends: MarketTrends = field(default_factory=MarketTrends)

    @classmethod
    def empty(cls) -> MarketData:
        return cls(
            average_prices={},
            competitor_prices=(),
            demand_index=0.5,
            supply_index=0.5,
            price_elasticity=0.5,
        )


@dataclass(frozen=True)
class AdjustmentSet:
    time_based_multiplier: float
    demand_surge_multiplier: float
    quality_premium: float
    urgency_bonus: float
    seasonal_multiplier: float
    weather_multiplier: float
    competition_adjustment: float
    demand_surge_level: str = "none"

    @classmethod
    def neutral(cls) -> AdjustmentSet:
        return cls(
            time_based_multiplier=1.0,
            demand_surge_multiplier=1.0,
            quality_premium=1.0,
            urgency_bonus=1.0,
            seasonal_multiplier=1.0,
            weather_multiplier=1.0,
            competition_adjustment=1.0,
        )

    def multipliers(self) -> tuple[float, ...]:
        return (
            self.time_based_multiplier,
            self.demand_surge_multiplier,
            self.quality_premium,
            self.urgency_bonus,
            self.seasonal_multiplier,
            self.weather_multiplier,
            self.competition_adjustment,
        )

    def product(self) -> float:
        total = 1.0
        for value in self.multipliers():
            total *= value
        return total

    def to_dict(self) -> dict[str, float]:
        return {
            "time_based_multiplier": self.time_based_multiplier,
            "demand_surge_multiplier": self.demand_surge_multiplier,
            "quality_premium": self.quality_premium,
            "urgency_bonus": self.urgency_bonus,
            "seasonal_multiplier": self.seasonal_multiplier,
            "weather_multiplier": self.weather_multiplier,
            "competition_adjustment": self.competition_adjustment,
        }


@dataclass(frozen=True)
class PriceRange:
    min: float
    max: float
    optimal: float


@dataclass(frozen=True)
class FactorBreakdown:
    market_demand: float
    provider_quality: float
    urgency_premium: float
    competitive_landscape: float
    seasonal_adjustment: float


@dataclass(frozen=True)
class PricingStrategy:
    type: str
    price: float
    description: str
    expected_outcome: str
    risk_level: str
    expected_booking_rate: float

    @property
    def expected_revenue(self) -> float:
        return self.price * self.expected_booking_rate

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "price": self.price,
            "description": self.description,
            "expected_outcome": self.expected_outcome,
            "risk_level": self.risk_level,
            "expected_booking_rate": self.expected_booking_rate,
            "expected_revenue": self.expected_revenue,
        }


@dataclass(frozen=True)
class CompetitionSummary:
    competitor_count: int
    average_price: float
    median_price: float
    lowest_price: float
    highest_price: float
    price_dispersion: float
    average_rating: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "competitor_count": self.competitor_count,
            "average_price": self.average_price,
            "median_price": self.median_price,
            "lowest_price": self.lowest_price,
            "highest_price": self.highest_price,
            "price_dispersion": self.price_dispersion,
            "average_rating": self.average_rating,
        }


@dataclass(frozen=True)
class PricingRecommendation:
    recommended_price: float
    price_range: PriceRange
    confidence: float
    factors: FactorBreakdown
    insights: tuple[str, ...]
    strategies: tuple[PricingStrategy, ...]
    dynamic_adjustments: AdjustmentSet
    currency: str = "USD"
    base_price: float | None = None
    market_analysis: CompetitionSummary | None = None
    valid_until: datetime | None = None
    is_fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "recommended_price": self.recommended_price,
            "price_range": {
                "min": self.price_range.min,
                "max": self.price_range.max,
                "optimal": self.price_range.optimal,
            },
            "confidence": self.confidence,
            "factors": {
                "market_demand": self.factors.market_demand,
                "provider_quality": self.factors.provider_quality,
                "urgency_premium": self.factors.urgency_premium,
                "competitive_landscape": self.factors.competitive_landscape,
                "seasonal_adjustment": self.factors.seasonal_adjustment,
            },
            "insights": list(self.insights),
            "strategies": [strategy.to_dict() for strategy in self.strategies],
            "dynamic_adjustments": self.dynamic_adjustments.to_dict(),
            "demand_surge_level": self.dynamic_adjustments.demand_surge_level,
            "currency": self.currency,
            "base_price": self.base_price,
            "market_analysis": self.market_analysis.to_dict() if self.market_analysis else None,
            "valid_until": self.valid_until,
            "is_fallback": self.is_fallback,
        }


@dataclass(frozen=True)
class BidSuggestion:
    suggested_bid: float
    reasoning: str
    confidence: float
    regime: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "suggested_bid": self.suggested_bid,
            "reasoning": self.reasoning,
            "confidence": self.confidence,
            "regime": self.regime,
        }
