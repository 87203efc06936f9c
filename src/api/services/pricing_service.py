# This file implements the service behind the pricing endpoints.
# It exists so routers can stay transport-focused while domain conversion and payload shaping live in one layer.
# The service delegates every pricing decision to the shared engine and only adds envelope-level fields.
# Fallback recommendations are returned with a warning so clients can tell degraded prices apart.

from __future__ import annotations

from typing import Any

from src.api.api_config import ApiConfig
from src.api.schemas.pricing_schemas import BidOptimizationRequestV1, PricingRecommendationRequestV1
from src.marketplace_pricing.confidence import confidence_label
from src.marketplace_pricing.recommendation import PricingEngine

FALLBACK_WARNING = "Market data unavailable; fallback pricing applied."


class PricingService:
    """Engine access and shaping for pricing API routes."""

    def __init__(self, *, config: ApiConfig, engine: PricingEngine) -> None:
        self.config = config
        self.engine = engine

    async def recommend(self, request: PricingRecommendationRequestV1) -> dict[str, Any]:
        recommendation = await self.engine.generate_pricing_recommendation(
            request.job.to_domain(),
            request.provider.to_domain(),
            request.factors.to_domain(),
        )
        row = recommendation.to_dict()
        row["confidence_label"] = confidence_label(recommendation.confidence)
        row["pricing_policy_version"] = self.policy_version
        warnings = [FALLBACK_WARNING] if recommendation.is_fallback else None
        return {"row": row, "warnings": warnings}

    def optimize_bid(self, request: BidOptimizationRequestV1) -> dict[str, Any]:
        suggestion = self.engine.optimize_bid_price(
            request.current_bid,
            request.competing_bids,
            request.time_remaining_seconds,
            request.job.to_domain(),
        )
        row = suggestion.to_dict()
        row["highest_competing_bid"] = max(request.competing_bids) if request.competing_bids else None
        row["competing_bid_count"] = len(request.competing_bids)
        return {"row": row, "warnings": None}

    @property
    def policy_version(self) -> str:
        return self.engine.config.pricing_policy_version

    def get_policy(self) -> dict[str, Any]:
        return self.engine.config.to_dict()

    def market_source_status(self) -> tuple[str, bool]:
        provider = self.engine.market_cache.provider
        can_connect = getattr(provider, "can_connect", None)
        if can_connect is None:
            return type(provider).__name__, True
        return type(provider).__name__, bool(can_connect())
