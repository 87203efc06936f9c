# This file defines pricing endpoint schemas for request bodies and response envelopes.
# It exists so pricing payloads are strongly typed and backward-compatible for clients.
# Request models convert into the engine's frozen records through `to_domain`; value ranges are clamped later, not here.
# Keeping these models explicit helps catch accidental payload drift during development.

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.api.schemas.common import EnvelopeFields
from src.marketplace_pricing.models import (
    Budget,
    ClientProfile,
    EconomicIndicators,
    JobCharacteristics,
    Location,
    PricePoint,
    PricingFactors,
    ProviderMetrics,
    Timeline,
)


class LocationV1(BaseModel):
    lat: float = 0.0
    lng: float = 0.0
    city: str = ""
    postal_code: str

    def to_domain(self) -> Location:
        return Location(lat=self.lat, lng=self.lng, city=self.city, postal_code=self.postal_code)


class TimelineV1(BaseModel):
    start_date: datetime | None = None
    deadline: datetime | None = None
    flexibility: str = "flexible"

    def to_domain(self) -> Timeline:
        return Timeline(start_date=self.start_date, deadline=self.deadline, flexibility=self.flexibility)


class BudgetV1(BaseModel):
    min: float
    max: float
    currency: str = "USD"

    def to_domain(self) -> Budget:
        return Budget(min=self.min, max=self.max, currency=self.currency)


class ClientProfileV1(BaseModel):
    rating: float = 0.0
    payment_history: str = "unknown"
    repeat_customer: bool = False
    preferred_price: str = "value"

    def to_domain(self) -> ClientProfile:
        return ClientProfile(
            rating=self.rating,
            payment_history=self.payment_history,
            repeat_customer=self.repeat_customer,
            preferred_price=self.preferred_price,
        )


class JobCharacteristicsV1(BaseModel):
    category: str = Field(min_length=1)
    complexity: str = "moderate"
    location: LocationV1
    timeline: TimelineV1 = Field(default_factory=TimelineV1)
    requirements: list[str] = Field(default_factory=list)
    budget: BudgetV1
    client_profile: ClientProfileV1 = Field(default_factory=ClientProfileV1)

    def to_domain(self) -> JobCharacteristics:
        return JobCharacteristics(
            category=self.category,
            complexity=self.complexity,
            location=self.location.to_domain(),
            timeline=self.timeline.to_domain(),
            requirements=tuple(self.requirements),
            budget=self.budget.to_domain(),
            client_profile=self.client_profile.to_domain(),
        )


class PricePointV1(BaseModel):
    price: float
    timestamp: datetime
    job_type: str = ""


class ProviderMetricsV1(BaseModel):
    provider_id: str
    rating: float = 0.0
    completion_rate: float = 0.0
    response_time_hours: float = 0.0
    price_history: list[PricePointV1] = Field(default_factory=list)
    demand_score: float = 0.5
    quality_score: float = 0.5
    reliability_score: float = 0.5
    specializations: list[str] = Field(default_factory=list)
    experience_years: float = 0.0
    certifications: list[str] = Field(default_factory=list)

    def to_domain(self) -> ProviderMetrics:
        return ProviderMetrics(
            provider_id=self.provider_id,
            rating=self.rating,
            completion_rate=self.completion_rate,
            response_time_hours=self.response_time_hours,
            price_history=tuple(
                PricePoint(price=point.price, timestamp=point.timestamp, job_type=point.job_type)
                for point in self.price_history
            ),
            demand_score=self.demand_score,
            quality_score=self.quality_score,
            reliability_score=self.reliability_score,
            specializations=tuple(self.specializations),
            experience_years=self.experience_years,
            certifications=tuple(self.certifications),
        )


class EconomicIndicatorsV1(BaseModel):
    local_unemployment: float = 0.0
    average_income: float = 0.0
    competition_index: float = 0.0


class PricingFactorsV1(BaseModel):
    demand: float = 0.5
    supply: float = 0.5
    urgency: str = "low"
    time_of_day: int = 12
    day_of_week: int = 2
    seasonality: float = 0.5
    weather_impact: float | None = None
    economic_indicators: EconomicIndicatorsV1 | None = None

    def to_domain(self) -> PricingFactors:
        indicators = None
        if self.economic_indicators is not None:
            indicators = EconomicIndicators(
                local_unemployment=self.economic_indicators.local_unemployment,
                average_income=self.economic_indicators.average_income,
                competition_index=self.economic_indicators.competition_index,
            )
        return PricingFactors(
            demand=self.demand,
            supply=self.supply,
            urgency=self.urgency,
            time_of_day=self.time_of_day,
            day_of_week=self.day_of_week,
            seasonality=self.seasonality,
            weather_impact=self.weather_impact,
            economic_indicators=indicators,
        )


class PricingRecommendationRequestV1(BaseModel):
    model_config = ConfigDict(extra="ignore")

    job: JobCharacteristicsV1
    provider: ProviderMetricsV1
    factors: PricingFactorsV1 = Field(default_factory=PricingFactorsV1)


class BidOptimizationRequestV1(BaseModel):
    model_config = ConfigDict(extra="ignore")

    current_bid: float = 0.0
    competing_bids: list[float] = Field(default_factory=list)
    time_remaining_seconds: float
    job: JobCharacteristicsV1


class PriceRangeV1(BaseModel):
    min: float
    max: float
    optimal: float


class FactorBreakdownV1(BaseModel):
    market_demand: float
    provider_quality: float
    urgency_premium: float
    competitive_landscape: float
    seasonal_adjustment: float


class PricingStrategyV1(BaseModel):
    type: str
    price: float
    description: str
    expected_outcome: str
    risk_level: str
    expected_booking_rate: float
    expected_revenue: float


class DynamicAdjustmentsV1(BaseModel):
    time_based_multiplier: float
    demand_surge_multiplier: float
    quality_premium: float
    urgency_bonus: float
    seasonal_multiplier: float
    weather_multiplier: float
    competition_adjustment: float


class MarketAnalysisV1(BaseModel):
    competitor_count: int
    average_price: float
    median_price: float
    lowest_price: float
    highest_price: float
    price_dispersion: float
    average_rating: float


class PricingRecommendationV1(BaseModel):
    recommended_price: float
    price_range: PriceRangeV1
    confidence: float
    confidence_label: str
    factors: FactorBreakdownV1
    insights: list[str]
    strategies: list[PricingStrategyV1]
    dynamic_adjustments: DynamicAdjustmentsV1
    demand_surge_level: str
    currency: str
    base_price: float | None = None
    market_analysis: MarketAnalysisV1 | None = None
    valid_until: datetime | None = None
    is_fallback: bool
    pricing_policy_version: str


class PricingRecommendationResponseV1(EnvelopeFields):
    data: PricingRecommendationV1


class BidSuggestionV1(BaseModel):
    suggested_bid: float
    reasoning: str
    confidence: float
    regime: str
    highest_competing_bid: float | None = None
    competing_bid_count: int


class BidSuggestionResponseV1(EnvelopeFields):
    data: BidSuggestionV1


class PricingPolicyResponseV1(EnvelopeFields):
    data: dict[str, Any]
