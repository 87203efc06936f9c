# This file defines liveness, readiness, and version endpoints for API operations.
# Readiness means the configured market data source answers and a pricing policy is loaded.
# A static snapshot source is always ready; a SQL source is probed with a trivial query.

from __future__ import annotations

import subprocess
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.api.api_config import ApiConfig
from src.api.dependencies import get_config, get_pricing_service
from src.api.response_envelope import build_trace_fields, utc_now
from src.api.schemas.health_schemas import HealthResponse, ReadinessResponse, VersionResponse
from src.api.services.pricing_service import PricingService

router = APIRouter(tags=["health"])
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
PricingServiceDep = Annotated[PricingService, Depends(get_pricing_service)]


@lru_cache(maxsize=1)
def _git_commit() -> str | None:
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            check=True,
            capture_output=True,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return completed.stdout.strip() or None


@router.get("/health", response_model=HealthResponse)
def health(request: Request, config: ConfigDep) -> dict[str, object]:
    return {
        **build_trace_fields(request, config),
        "timestamp": utc_now(),
        "status": "ok",
        "environment": config.environment,
        "service_name": config.api_name,
    }


@router.get("/ready", response_model=ReadinessResponse)
def ready(request: Request, config: ConfigDep, service: PricingServiceDep) -> dict[str, object]:
    market_source, connected = service.market_source_status()
    return {
        **build_trace_fields(request, config),
        "timestamp": utc_now(),
        "ready": connected,
        "market_source": market_source,
        "market_source_connected": connected,
        "pricing_policy_version": service.policy_version,
    }


@router.get("/version", response_model=VersionResponse)
def version(request: Request, config: ConfigDep, service: PricingServiceDep) -> dict[str, object]:
    return {
        **build_trace_fields(request, config),
        "timestamp": utc_now(),
        "service_name": config.api_name,
        "api_version_path": config.api_version_path,
        "app_version": config.app_version,
        "pricing_policy_version": service.policy_version,
        "git_commit": _git_commit(),
    }
