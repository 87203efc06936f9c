# This file defines pricing endpoints under the versioned API path.
# It exists so marketplace clients can request price recommendations and live-auction bid suggestions.
# Pricing failures surface as fallback recommendations with a warning, never as error responses.

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request

from src.api.api_config import ApiConfig
from src.api.dependencies import get_config, get_pricing_service
from src.api.response_envelope import build_object_envelope
from src.api.schemas.pricing_schemas import (
    BidOptimizationRequestV1,
    BidSuggestionResponseV1,
    PricingPolicyResponseV1,
    PricingRecommendationRequestV1,
    PricingRecommendationResponseV1,
)
from src.api.services.pricing_service import PricingService

router = APIRouter(prefix="/pricing", tags=["pricing"])
PricingServiceDep = Annotated[PricingService, Depends(get_pricing_service)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]


def _envelope(
    request: Request,
    config: ApiConfig,
    data: dict[str, Any],
    warnings: list[str] | None = None,
) -> dict[str, object]:
    return build_object_envelope(
        api_version_path=config.api_version_path,
        schema_version=config.schema_version,
        request_id=request.state.request_id,
        data=data,
        warnings=warnings,
    )


@router.post("/recommendations", response_model=PricingRecommendationResponseV1)
async def pricing_recommendation(
    payload: PricingRecommendationRequestV1,
    request: Request,
    service: PricingServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    result = await service.recommend(payload)
    return _envelope(request, config, result["row"], result["warnings"])


@router.post("/bids/optimize", response_model=BidSuggestionResponseV1)
def pricing_bid_optimize(
    payload: BidOptimizationRequestV1,
    request: Request,
    service: PricingServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    result = service.optimize_bid(payload)
    return _envelope(request, config, result["row"], result["warnings"])


@router.get("/policy", response_model=PricingPolicyResponseV1)
def pricing_policy(request: Request, service: PricingServiceDep, config: ConfigDep) -> dict[str, object]:
    return _envelope(request, config, service.get_policy())
