# This file builds the FastAPI application for the marketplace pricing API.
# Every request gets a request id, a timing header, and Prometheus request metrics labelled by route template.
# The pricing policy is loaded at startup so an invalid policy file fails fast instead of on the first request.

from __future__ import annotations

import logging
import time
import uuid

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import RequestResponseEndpoint

from src.api.api_config import ApiConfig, get_api_config
from src.api.dependencies import get_pricing_config
from src.api.error_handlers import register_error_handlers
from src.api.routers.health import router as health_router
from src.api.routers.pricing import router as pricing_router
from src.common.logging import configure_logging

LOGGER = logging.getLogger("api")

REQUEST_ID_HEADER = "x-request-id"
UNMATCHED_ROUTE = "unmatched"

API_HTTP_REQUESTS_TOTAL = Counter(
    "api_http_requests_total",
    "HTTP requests handled by the pricing API.",
    ["method", "route", "status_code"],
)
API_HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "api_http_request_duration_seconds",
    "Pricing API request latency in seconds.",
    ["method", "route"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5),
)
API_HTTP_INFLIGHT_REQUESTS = Gauge(
    "api_http_inflight_requests",
    "Pricing API requests currently in flight.",
    ["method"],
)


def _route_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


async def request_context_middleware(request: Request, call_next: RequestResponseEndpoint) -> Response:
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    request.state.request_id = request_id

    inflight = API_HTTP_INFLIGHT_REQUESTS.labels(method=request.method)
    inflight.inc()
    started = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
    finally:
        elapsed = time.perf_counter() - started
        inflight.dec()
        route = _route_label(request)
        API_HTTP_REQUESTS_TOTAL.labels(method=request.method, route=route, status_code=str(status_code)).inc()
        API_HTTP_REQUEST_DURATION_SECONDS.labels(method=request.method, route=route).observe(elapsed)

    response.headers[REQUEST_ID_HEADER] = request_id
    response.headers["x-response-time-ms"] = f"{elapsed * 1000.0:.2f}"
    LOGGER.debug(
        "%s %s status=%s duration_ms=%.2f request_id=%s",
        request.method,
        request.url.path,
        status_code,
        elapsed * 1000.0,
        request_id,
    )
    return response


def _build_fastapi(config: ApiConfig) -> FastAPI:
    return FastAPI(
        title=config.api_name,
        description=(
            "Versioned API for marketplace price recommendations and live-auction bid suggestions. "
            "Responses carry explanatory insights, ranked strategies, and schema metadata."
        ),
        version=config.app_version,
        openapi_tags=[
            {"name": "health", "description": "Service liveness, readiness, and version metadata."},
            {
                "name": "pricing",
                "description": "Price recommendations, bid optimization, and the active pricing policy.",
            },
        ],
    )


def create_app() -> FastAPI:
    configure_logging()
    config = get_api_config()
    app = _build_fastapi(config)

    if config.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.allowed_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )
    app.middleware("http")(request_context_middleware)
    register_error_handlers(app)

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.on_event("startup")
    def load_pricing_policy() -> None:
        policy = get_pricing_config()
        LOGGER.info("Pricing policy %s loaded", policy.pricing_policy_version)

    app.include_router(health_router)
    app.include_router(pricing_router, prefix=config.api_version_path)
    return app


app = create_app()
