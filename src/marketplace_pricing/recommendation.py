# This module is the entrypoint of the pricing-decision engine.
# It runs input clamping, market lookup, base pricing, dynamic adjustments, strategies, confidence, and insights in one flow.
# Any failure along the way is logged and converted into a budget-midpoint fallback so callers always get a result.
# The fallback builder only reads clamped values, so it cannot raise on the inputs that sent it there.
# The engine holds no mutable state of its own; the injected market data cache is the only shared resource.

from __future__ import annotations

import logging
from collections.abc import Sequence

from src.marketplace_pricing.adjustments import apply_adjustments, calculate_adjustments
from src.marketplace_pricing.base_price import calculate_base_price
from src.marketplace_pricing.bid_optimizer import DEFAULT_BID_CONFIDENCE, optimize_bid_price
from src.marketplace_pricing.competition import competitive_landscape_score, summarize_competition
from src.marketplace_pricing.confidence import calculate_confidence
from src.marketplace_pricing.inputs import (
    as_amount,
    clamp_budget,
    clamp_factors,
    clamp_job,
    clamp_provider,
    round_half_up,
)
from src.marketplace_pricing.insights import FALLBACK_INSIGHT, generate_insights
from src.marketplace_pricing.market_data import MarketDataCache, MarketDataProvider
from src.marketplace_pricing.metrics import PRICING_RECOMMENDATIONS_TOTAL
from src.marketplace_pricing.models import (
    AdjustmentSet,
    BidSuggestion,
    Budget,
    FactorBreakdown,
    JobCharacteristics,
    PriceRange,
    PricingFactors,
    PricingRecommendation,
    PricingStrategy,
    ProviderMetrics,
)
from src.marketplace_pricing.pricing_config import PricingConfig
from src.marketplace_pricing.strategies import generate_strategies

LOGGER = logging.getLogger("pricing")


class PricingEngine:
    """Produces pricing recommendations and bid suggestions for marketplace jobs."""

    def __init__(self, *, market_cache: MarketDataCache, config: PricingConfig) -> None:
        self.market_cache = market_cache
        self.config = config

    async def generate_pricing_recommendation(
        self,
        job: JobCharacteristics,
        provider: ProviderMetrics,
        factors: PricingFactors,
    ) -> PricingRecommendation:
        try:
            recommendation = await self._recommend(job, provider, factors)
        except Exception:
            LOGGER.exception(
                "Pricing pipeline failed for category=%s provider_id=%s; using fallback",
                getattr(job, "category", "unknown"),
                getattr(provider, "provider_id", "unknown"),
            )
            PRICING_RECOMMENDATIONS_TOTAL.labels(outcome="fallback").inc()
            return self.build_fallback_recommendation(job, provider)

        PRICING_RECOMMENDATIONS_TOTAL.labels(outcome="computed").inc()
        return recommendation

    async def _recommend(
        self,
        job: JobCharacteristics,
        provider: ProviderMetrics,
        factors: PricingFactors,
    ) -> PricingRecommendation:
        config = self.config
        job = clamp_job(job)
        provider = clamp_provider(provider)
        factors = clamp_factors(factors)

        market_data = await self.market_cache.get_market_data(job.category, job.location)

        base_price = calculate_base_price(job, provider, market_data, config)
        adjustments = calculate_adjustments(job, provider, factors, market_data, config)
        applied = apply_adjustments(base_price, adjustments, config)
        recommended_price = applied.price

        strategies = generate_strategies(base_price, job, provider, market_data)
        confidence = calculate_confidence(job, provider, market_data, adjustments, config)
        insights = generate_insights(
            job,
            provider,
            factors,
            market_data,
            adjustments,
            multiplier_clamped=applied.clamped,
        )

        LOGGER.debug(
            "Priced category=%s provider_id=%s base=%.2f multiplier=%.4f price=%.2f confidence=%.2f",
            job.category,
            provider.provider_id,
            base_price,
            applied.total_multiplier,
            recommended_price,
            confidence,
        )

        return PricingRecommendation(
            recommended_price=recommended_price,
            price_range=PriceRange(
                min=recommended_price * config.price_range_min_factor,
                max=recommended_price * config.price_range_max_factor,
                optimal=recommended_price,
            ),
            confidence=confidence,
            factors=FactorBreakdown(
                market_demand=factors.demand,
                provider_quality=provider.quality_score,
                urgency_premium=adjustments.urgency_bonus,
                competitive_landscape=competitive_landscape_score(market_data),
                seasonal_adjustment=factors.seasonality,
            ),
            insights=tuple(insights),
            strategies=tuple(strategies),
            dynamic_adjustments=adjustments,
            currency=job.budget.currency,
            base_price=base_price,
            market_analysis=summarize_competition(market_data),
            valid_until=self.market_cache.expires_at(job.category, job.location),
            is_fallback=False,
        )

    def build_fallback_recommendation(
        self,
        job: JobCharacteristics,
        provider: ProviderMetrics,
    ) -> PricingRecommendation:
        config = self.config
        raw_budget = getattr(job, "budget", None)
        budget = clamp_budget(raw_budget) if isinstance(raw_budget, Budget) else Budget(min=0.0, max=0.0)
        fallback_price = max(config.min_price, budget.midpoint)
        quality = min(1.0, as_amount(getattr(provider, "quality_score", 0.5)))
        return PricingRecommendation(
            recommended_price=fallback_price,
            price_range=PriceRange(
                min=fallback_price * config.fallback_range_min_factor,
                max=fallback_price * config.fallback_range_max_factor,
                optimal=fallback_price,
            ),
            confidence=config.fallback_confidence,
            factors=FactorBreakdown(
                market_demand=0.5,
                provider_quality=quality,
                urgency_premium=1.0,
                competitive_landscape=0.5,
                seasonal_adjustment=0.5,
            ),
            insights=(FALLBACK_INSIGHT,),
            strategies=(
                PricingStrategy(
                    type="value",
                    price=fallback_price,
                    description="Standard market pricing",
                    expected_outcome="Baseline pricing strategy",
                    risk_level="low",
                    expected_booking_rate=config.fallback_booking_rate,
                ),
            ),
            dynamic_adjustments=AdjustmentSet.neutral(),
            currency=budget.currency or "USD",
            base_price=None,
            market_analysis=None,
            valid_until=None,
            is_fallback=True,
        )

    def optimize_bid_price(
        self,
        current_bid: float,
        competing_bids: Sequence[float],
        time_remaining_seconds: float,
        job: JobCharacteristics,
    ) -> BidSuggestion:
        try:
            return optimize_bid_price(current_bid, competing_bids, time_remaining_seconds, job, self.config)
        except Exception:
            LOGGER.exception("Bid optimization failed; holding current bid")
            return BidSuggestion(
                suggested_bid=round_half_up(as_amount(current_bid)),
                reasoning="Unable to analyze competing bids - holding current bid.",
                confidence=DEFAULT_BID_CONFIDENCE,
                regime="unknown",
            )


def create_pricing_engine(*, provider: MarketDataProvider, config: PricingConfig) -> PricingEngine:
    cache = MarketDataCache(
        provider=provider,
        ttl_seconds=config.market_cache_ttl_seconds,
        fetch_timeout_seconds=config.market_fetch_timeout_seconds,
    )
    return PricingEngine(market_cache=cache, config=config)
