# This file tests the pricing recommendation, bid optimization, and policy endpoints.
# It exists to validate envelope shape, engine wiring, and the fallback warning contract.
# Services are built over in-memory market data so responses are deterministic.

from __future__ import annotations

from typing import Any

from src.api.services.pricing_service import FALLBACK_WARNING
from tests.api.support import FakeSqlProvider, api_test_client, build_test_service

JOB: dict[str, Any] = {
    "category": "plumbing",
    "complexity": "moderate",
    "location": {"lat": 37.77, "lng": -122.41, "city": "San Francisco", "postal_code": "94103"},
    "timeline": {"flexibility": "flexible"},
    "requirements": ["licensed"],
    "budget": {"min": 80, "max": 120, "currency": "USD"},
    "client_profile": {
        "rating": 4.5,
        "payment_history": "good",
        "repeat_customer": True,
        "preferred_price": "value",
    },
}

PROVIDER: dict[str, Any] = {
    "provider_id": "p-1",
    "rating": 4.2,
    "completion_rate": 0.92,
    "response_time_hours": 1.5,
    "price_history": [{"price": 98.0, "timestamp": "2025-03-01T10:00:00Z", "job_type": "plumbing"}],
    "demand_score": 0.5,
    "quality_score": 0.5,
    "reliability_score": 0.8,
}

FACTORS: dict[str, Any] = {
    "demand": 0.5,
    "supply": 0.5,
    "urgency": "low",
    "time_of_day": 8,
    "day_of_week": 2,
    "seasonality": 0.5,
}


def test_recommendation_returns_envelope_and_priced_job() -> None:
    with api_test_client() as client:
        response = client.post(
            "/api/v1/pricing/recommendations",
            json={"job": JOB, "provider": PROVIDER, "factors": FACTORS},
        )

    assert response.status_code == 200
    payload = response.json()
    assert payload["api_version"] == "v1"
    assert payload["schema_version"] == "1.0.0"
    assert payload["request_id"]
    assert payload["warnings"] is None

    data = payload["data"]
    assert data["recommended_price"] == 100.0
    assert data["price_range"]["min"] <= data["price_range"]["optimal"] <= data["price_range"]["max"]
    assert data["is_fallback"] is False
    assert data["currency"] == "USD"
    assert data["market_analysis"]["competitor_count"] == 2
    assert data["confidence_label"] in {"low", "medium", "high"}
    assert data["pricing_policy_version"] == "mp1"
    revenues = [strategy["expected_revenue"] for strategy in data["strategies"]]
    assert revenues == sorted(revenues, reverse=True)


def test_recommendation_with_critical_urgency() -> None:
    factors = dict(FACTORS, urgency="critical")
    with api_test_client() as client:
        response = client.post(
            "/api/v1/pricing/recommendations",
            json={"job": JOB, "provider": PROVIDER, "factors": factors},
        )

    data = response.json()["data"]
    assert data["recommended_price"] == 150.0
    assert data["dynamic_adjustments"]["urgency_bonus"] == 1.5
    assert "High urgency allows for 50% urgency premium" in data["insights"]


def test_recommendation_falls_back_with_warning_when_market_is_down() -> None:
    service = build_test_service(provider=FakeSqlProvider(connected=False))
    with api_test_client(pricing_service=service) as client:
        response = client.post(
            "/api/v1/pricing/recommendations",
            json={"job": JOB, "provider": PROVIDER, "factors": FACTORS},
        )

    assert response.status_code == 200
    payload = response.json()
    assert payload["warnings"] == [FALLBACK_WARNING]
    assert payload["data"]["is_fallback"] is True
    assert payload["data"]["recommended_price"] == 100.0
    assert payload["data"]["confidence"] == 0.5


def test_recommendation_clamps_out_of_range_values() -> None:
    factors = dict(FACTORS, demand=3.5, supply=-2, urgency="asap")
    with api_test_client() as client:
        response = client.post(
            "/api/v1/pricing/recommendations",
            json={"job": JOB, "provider": dict(PROVIDER, rating=11), "factors": factors},
        )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["factors"]["market_demand"] == 1.0
    assert data["demand_surge_level"] == "high"


def test_recommendation_rejects_structurally_invalid_body() -> None:
    with api_test_client() as client:
        response = client.post("/api/v1/pricing/recommendations", json={"provider": PROVIDER})

    assert response.status_code == 422
    payload = response.json()
    assert payload["error_code"] == "VALIDATION_ERROR"
    assert payload["request_id"]
    assert payload["details"]


def test_bid_optimization_returns_suggestion() -> None:
    job = dict(JOB, budget={"min": 100, "max": 400})
    with api_test_client() as client:
        response = client.post(
            "/api/v1/pricing/bids/optimize",
            json={"current_bid": 150, "competing_bids": [180, 160], "time_remaining_seconds": 1800, "job": job},
        )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["suggested_bid"] == 200.0
    assert data["regime"] == "closing"
    assert data["confidence"] == 0.8
    assert data["highest_competing_bid"] == 180.0
    assert data["competing_bid_count"] == 2


def test_bid_optimization_without_competitors() -> None:
    with api_test_client() as client:
        response = client.post(
            "/api/v1/pricing/bids/optimize",
            json={"current_bid": 120, "time_remaining_seconds": 200000, "job": JOB},
        )

    data = response.json()["data"]
    assert data["suggested_bid"] == 120.0
    assert data["highest_competing_bid"] is None
    assert data["competing_bid_count"] == 0


def test_policy_endpoint_returns_active_policy() -> None:
    with api_test_client() as client:
        response = client.get("/api/v1/pricing/policy")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["pricing_policy_version"] == "mp1"
    assert data["urgency_multipliers"]["critical"] == 1.5
    assert data["demand_surge_bands"][0]["label"] == "high"


def test_metrics_endpoint_exposes_pricing_counters() -> None:
    with api_test_client() as client:
        client.post(
            "/api/v1/pricing/recommendations",
            json={"job": JOB, "provider": PROVIDER, "factors": FACTORS},
        )
        response = client.get("/metrics")

    assert response.status_code == 200
    assert "pricing_recommendations_total" in response.text
    assert "api_http_requests_total" in response.text


def test_unknown_route_uses_error_body() -> None:
    with api_test_client() as client:
        response = client.get("/api/v1/pricing/unknown", headers={"x-request-id": "req-404"})

    assert response.status_code == 404
    payload = response.json()
    assert payload["error_code"] == "HTTP_ERROR"
    assert payload["request_id"] == "req-404"
