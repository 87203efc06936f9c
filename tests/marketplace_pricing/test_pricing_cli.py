# This test file smoke-tests the pricing command-line entrypoint.
# It exists to keep request-file parsing, market snapshot wiring, and JSON output working end to end.

from __future__ import annotations

import json
from pathlib import Path

import pytest

from src.marketplace_pricing.pricing_job import main

ROOT_DIR = Path(__file__).resolve().parents[2]

JOB = {
    "category": "plumbing",
    "complexity": "moderate",
    "location": {"lat": 37.77, "lng": -122.41, "city": "San Francisco", "postal_code": "94103"},
    "budget": {"min": 80, "max": 120, "currency": "USD"},
}


def _write(tmp_path: Path, name: str, payload: dict[str, object]) -> str:
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_recommend_command_prints_recommendation(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    request_path = _write(
        tmp_path,
        "request.json",
        {
            "job": JOB,
            "provider": {"provider_id": "p-1", "rating": 4.2, "completion_rate": 0.92},
            "factors": {"demand": 0.5, "supply": 0.5, "urgency": "critical", "time_of_day": 8, "day_of_week": 2},
        },
    )
    snapshot_path = _write(tmp_path, "market.json", {"average_prices": {"plumbing": 100.0}})

    exit_code = main(["recommend", "--input", request_path, "--market-data", snapshot_path])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["recommended_price"] == 150.0
    assert payload["is_fallback"] is False


def test_recommend_command_uses_example_snapshot(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    request_path = _write(tmp_path, "request.json", {"job": JOB, "provider": {"provider_id": "p-1"}})

    exit_code = main(
        [
            "recommend",
            "--input",
            request_path,
            "--market-data",
            str(ROOT_DIR / "configs" / "market_snapshot.example.json"),
        ]
    )

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["market_analysis"]["competitor_count"] == 5
    assert payload["base_price"] > 0


def test_bid_command_prints_suggestion(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bid_job = dict(JOB, budget={"min": 100, "max": 400})
    request_path = _write(
        tmp_path,
        "bid.json",
        {"current_bid": 150, "competing_bids": [180, 160], "time_remaining_seconds": 1800, "job": bid_job},
    )

    exit_code = main(["bid", "--input", request_path])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["suggested_bid"] == 200.0
    assert payload["regime"] == "closing"


def test_policy_command_prints_active_policy(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["policy"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["pricing_policy_version"] == "mp1"


def test_invalid_request_file_returns_error_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    request_path = _write(tmp_path, "request.json", {"job": {"category": "plumbing"}})

    assert main(["recommend", "--input", request_path]) == 2
    assert capsys.readouterr().out == ""
