# This module is the command-line entrypoint for the pricing engine.
# It exists so operators can price a job or test a bid from a JSON file without running the API.
# Requests are validated with the same pydantic models the API uses, then handed to the shared engine.
# Market data comes from a snapshot file or, when configured, the SQL market store.

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from src.api.schemas.pricing_schemas import BidOptimizationRequestV1, PricingRecommendationRequestV1
from src.common.logging import configure_logging
from src.common.settings import get_settings
from src.marketplace_pricing.market_data_sources import build_market_data_provider
from src.marketplace_pricing.pricing_config import PricingConfig, load_pricing_config
from src.marketplace_pricing.recommendation import PricingEngine, create_pricing_engine

LOGGER = logging.getLogger("pricing")


def _read_json(path: str) -> dict[str, Any]:
    with Path(path).open(encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return payload


def _emit(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def build_engine(*, config: PricingConfig, market_data_path: str | None) -> PricingEngine:
    settings = get_settings()
    provider = build_market_data_provider(
        database_url=settings.MARKET_DATA_DATABASE_URL,
        snapshot_path=market_data_path or settings.MARKET_SNAPSHOT_PATH,
    )
    return create_pricing_engine(provider=provider, config=config)


def run_recommend(*, input_path: str, market_data_path: str | None, config: PricingConfig) -> dict[str, Any]:
    request = PricingRecommendationRequestV1.model_validate(_read_json(input_path))
    engine = build_engine(config=config, market_data_path=market_data_path)
    recommendation = asyncio.run(
        engine.generate_pricing_recommendation(
            request.job.to_domain(),
            request.provider.to_domain(),
            request.factors.to_domain(),
        )
    )
    LOGGER.info(
        "Recommended %.2f %s for provider_id=%s fallback=%s",
        recommendation.recommended_price,
        recommendation.currency,
        request.provider.provider_id,
        recommendation.is_fallback,
    )
    return recommendation.to_dict()


def run_bid(*, input_path: str, config: PricingConfig) -> dict[str, Any]:
    request = BidOptimizationRequestV1.model_validate(_read_json(input_path))
    engine = build_engine(config=config, market_data_path=None)
    suggestion = engine.optimize_bid_price(
        request.current_bid,
        request.competing_bids,
        request.time_remaining_seconds,
        request.job.to_domain(),
    )
    return suggestion.to_dict()


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Marketplace pricing engine utilities")
    parser.add_argument("--policy", default=None, help="Path to the pricing policy YAML file")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL for this run")
    subparsers = parser.add_subparsers(dest="command", required=True)

    recommend = subparsers.add_parser("recommend", help="Price a job for a provider")
    recommend.add_argument("--input", required=True, help="JSON file with job, provider, and factors")
    recommend.add_argument("--market-data", default=None, help="JSON market snapshot file")

    bid = subparsers.add_parser("bid", help="Suggest the next bid in a live auction")
    bid.add_argument("--input", required=True, help="JSON file with current bid, competing bids, and job")

    subparsers.add_parser("policy", help="Print the active pricing policy")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    cfg = load_pricing_config(config_path=args.policy or get_settings().PRICING_POLICY_PATH)

    try:
        if args.command == "recommend":
            _emit(run_recommend(input_path=args.input, market_data_path=args.market_data, config=cfg))
        elif args.command == "bid":
            _emit(run_bid(input_path=args.input, config=cfg))
        else:
            _emit(cfg.to_dict())
    except ValidationError as exc:
        LOGGER.error("Invalid request file %s: %s", args.input, exc)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
