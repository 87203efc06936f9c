# This file tests API health, readiness, and version endpoints.
# It exists to validate operational contracts used by orchestration and monitoring.
# The tests confirm request IDs and version metadata are always returned.

from __future__ import annotations

from tests.api.support import FakeSqlProvider, api_test_client, build_test_config, build_test_service


def test_health_endpoint_returns_expected_fields() -> None:
    config = build_test_config()
    with api_test_client(config=config) as client:
        response = client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["environment"] == "test"
    assert payload["service_name"] == config.api_name
    assert payload["api_version"] == "v1"
    assert payload["schema_version"] == config.schema_version
    assert payload["request_id"]
    assert "timestamp" in payload


def test_ready_with_static_market_source() -> None:
    with api_test_client() as client:
        response = client.get("/ready")

    assert response.status_code == 200
    payload = response.json()
    assert payload["market_source"] == "StaticMarketDataProvider"
    assert payload["market_source_connected"] is True
    assert payload["pricing_policy_version"] == "mp1"
    assert payload["ready"] is True


def test_ready_reflects_unreachable_market_database() -> None:
    service = build_test_service(provider=FakeSqlProvider(connected=False))
    with api_test_client(pricing_service=service) as client:
        response = client.get("/ready")

    assert response.status_code == 200
    payload = response.json()
    assert payload["market_source"] == "FakeSqlProvider"
    assert payload["market_source_connected"] is False
    assert payload["ready"] is False


def test_version_endpoint_returns_version_metadata() -> None:
    config = build_test_config()
    with api_test_client(config=config) as client:
        response = client.get("/version")

    assert response.status_code == 200
    payload = response.json()
    assert payload["api_version_path"] == "/api/v1"
    assert payload["schema_version"] == config.schema_version
    assert payload["app_version"] == config.app_version
    assert payload["service_name"] == config.api_name
    assert payload["pricing_policy_version"] == "mp1"
    assert "git_commit" in payload


def test_request_id_header_is_echoed() -> None:
    with api_test_client() as client:
        response = client.get("/health", headers={"x-request-id": "req-123"})

    assert response.headers["x-request-id"] == "req-123"
    assert response.json()["request_id"] == "req-123"
    assert "x-response-time-ms" in response.headers
