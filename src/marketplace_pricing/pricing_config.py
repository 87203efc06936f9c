# This file defines runtime policy for the marketplace pricing engine.
# It exists so the API, the CLI, and tests all price jobs against one consistent policy surface.
# The loader merges YAML defaults with environment overrides and validates the safety bounds.
# Keeping multipliers and ladders here makes pricing behavior reproducible and easy to tune.

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from src.marketplace_pricing.bands import Band, bands_to_dicts, parse_bands

LOGGER = logging.getLogger("pricing")

DEFAULT_CONFIG_PATH = "configs/pricing_policy.yaml"

DEFAULT_COMPLEXITY_MULTIPLIERS: dict[str, float] = {
    "simple": 0.8,
    "moderate": 1.0,
    "complex": 1.3,
    "expert": 1.6,
}
DEFAULT_CLIENT_PREFERENCE_MULTIPLIERS: dict[str, float] = {
    "budget": 0.85,
    "value": 1.0,
    "premium": 1.2,
}
DEFAULT_URGENCY_MULTIPLIERS: dict[str, float] = {
    "low": 1.0,
    "medium": 1.1,
    "high": 1.25,
    "critical": 1.5,
}

DEFAULT_DEMAND_SURGE_BANDS: tuple[Band, ...] = (
    Band(value=1.5, label="high", above=2.0),
    Band(value=1.3, label="medium", above=1.5),
    Band(value=1.15, label="low", above=1.2),
    Band(value=0.9, label="discount", below=0.8),
)
DEFAULT_RATING_BANDS: tuple[Band, ...] = (
    Band(value=0.2, label="excellent", above=4.8, inclusive=True),
    Band(value=0.1, label="strong", above=4.5, inclusive=True),
    Band(value=-0.1, label="weak", below=4.0),
)
DEFAULT_COMPLETION_BANDS: tuple[Band, ...] = (
    Band(value=0.1, label="reliable", above=0.98, inclusive=True),
    Band(value=-0.15, label="unreliable", below=0.9),
)
DEFAULT_EXPERIENCE_BANDS: tuple[Band, ...] = (
    Band(value=0.1, label="veteran", above=10, inclusive=True),
    Band(value=0.05, label="seasoned", above=5, inclusive=True),
)
DEFAULT_DEMAND_SCORE_BANDS: tuple[Band, ...] = (
    Band(value=0.15, label="sought_after", above=0.8, inclusive=True),
)


def _load_yaml(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config at {path} must be a mapping, got: {type(loaded).__name__}")
    return dict(loaded)


def _env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _as_float_mapping(value: Any, field_name: str, default: dict[str, float]) -> dict[str, float]:
    if value is None:
        return dict(default)
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a mapping of string->float")
    mapped = dict(default)
    for key, raw in value.items():
        mapped[str(key)] = float(raw)
    return mapped


def _as_bands(value: Any, field_name: str, default: tuple[Band, ...]) -> tuple[Band, ...]:
    if value is None:
        return default
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be a list of band mappings")
    return parse_bands(value, field_name)


@dataclass(frozen=True)
class PricingConfig:
    pricing_policy_version: str = "mp1"

    market_cache_ttl_seconds: float = 900.0
    market_fetch_timeout_seconds: float = 2.0

    min_price: float = 1.0
    min_total_multiplier: float = 0.5
    max_total_multiplier: float = 3.0
    price_range_min_factor: float = 0.85
    price_range_max_factor: float = 1.25

    complexity_multipliers: dict[str, float] | None = None
    client_preference_multipliers: dict[str, float] | None = None
    urgency_multipliers: dict[str, float] | None = None
    quality_adjustment_weight: float = 0.4

    demand_surge_bands: tuple[Band, ...] = DEFAULT_DEMAND_SURGE_BANDS
    demand_surge_supply_floor: float = 0.1
    quality_rating_bands: tuple[Band, ...] = DEFAULT_RATING_BANDS
    quality_completion_bands: tuple[Band, ...] = DEFAULT_COMPLETION_BANDS
    quality_experience_bands: tuple[Band, ...] = DEFAULT_EXPERIENCE_BANDS
    quality_demand_score_bands: tuple[Band, ...] = DEFAULT_DEMAND_SCORE_BANDS
    quality_premium_floor: float = 0.7
    quality_premium_ceiling: float = 1.5

    competition_dispersion_threshold: float = 0.3
    competition_dispersion_multiplier: float = 1.1
    competition_crowded_count: int = 10
    competition_crowded_multiplier: float = 0.95

    confidence_base: float = 0.7
    confidence_cap: float = 0.95

    fallback_confidence: float = 0.5
    fallback_booking_rate: float = 0.5
    fallback_range_min_factor: float = 0.8
    fallback_range_max_factor: float = 1.3

    bid_closing_seconds: int = 3600
    bid_early_seconds: int = 86400
    bid_top_up_budget_pct: float = 0.05
    bid_top_up_cap: float = 50.0
    bid_early_pullback_trigger: float = 1.1
    bid_early_pullback_target: float = 1.05
    bid_high_competition_count: int = 10
    bid_high_competition_budget_pct: float = 0.8

    def __post_init__(self) -> None:
        # Frozen dataclass: fill mapping defaults through object.__setattr__.
        if self.complexity_multipliers is None:
            object.__setattr__(self, "complexity_multipliers", dict(DEFAULT_COMPLEXITY_MULTIPLIERS))
        if self.client_preference_multipliers is None:
            object.__setattr__(
                self, "client_preference_multipliers", dict(DEFAULT_CLIENT_PREFERENCE_MULTIPLIERS)
            )
        if self.urgency_multipliers is None:
            object.__setattr__(self, "urgency_multipliers", dict(DEFAULT_URGENCY_MULTIPLIERS))

    def complexity_multiplier(self, complexity: str) -> float:
        return float((self.complexity_multipliers or {}).get(complexity, 1.0))

    def client_preference_multiplier(self, preference: str) -> float:
        return float((self.client_preference_multipliers or {}).get(preference, 1.0))

    def urgency_multiplier(self, urgency: str) -> float:
        return float((self.urgency_multipliers or {}).get(urgency, 1.0))

    def to_dict(self) -> dict[str, Any]:
        return {
            "pricing_policy_version": self.pricing_policy_version,
            "market_cache_ttl_seconds": self.market_cache_ttl_seconds,
            "market_fetch_timeout_seconds": self.market_fetch_timeout_seconds,
            "min_price": self.min_price,
            "min_total_multiplier": self.min_total_multiplier,
            "max_total_multiplier": self.max_total_multiplier,
            "price_range_min_factor": self.price_range_min_factor,
            "price_range_max_factor": self.price_range_max_factor,
            "complexity_multipliers": dict(self.complexity_multipliers or {}),
            "client_preference_multipliers": dict(self.client_preference_multipliers or {}),
            "urgency_multipliers": dict(self.urgency_multipliers or {}),
            "quality_adjustment_weight": self.quality_adjustment_weight,
            "demand_surge_bands": bands_to_dicts(self.demand_surge_bands),
            "demand_surge_supply_floor": self.demand_surge_supply_floor,
            "quality_rating_bands": bands_to_dicts(self.quality_rating_bands),
            "quality_completion_bands": bands_to_dicts(self.quality_completion_bands),
            "quality_experience_bands": bands_to_dicts(self.quality_experience_bands),
            "quality_demand_score_bands": bands_to_dicts(self.quality_demand_score_bands),
            "quality_premium_floor": self.quality_premium_floor,
            "quality_premium_ceiling": self.quality_premium_ceiling,
            "competition_dispersion_threshold": self.competition_dispersion_threshold,
            "competition_dispersion_multiplier": self.competition_dispersion_multiplier,
            "competition_crowded_count": self.competition_crowded_count,
            "competition_crowded_multiplier": self.competition_crowded_multiplier,
            "confidence_base": self.confidence_base,
            "confidence_cap": self.confidence_cap,
            "fallback_confidence": self.fallback_confidence,
            "fallback_booking_rate": self.fallback_booking_rate,
            "fallback_range_min_factor": self.fallback_range_min_factor,
            "fallback_range_max_factor": self.fallback_range_max_factor,
            "bid_closing_seconds": self.bid_closing_seconds,
            "bid_early_seconds": self.bid_early_seconds,
            "bid_top_up_budget_pct": self.bid_top_up_budget_pct,
            "bid_top_up_cap": self.bid_top_up_cap,
            "bid_early_pullback_trigger": self.bid_early_pullback_trigger,
            "bid_early_pullback_target": self.bid_early_pullback_target,
            "bid_high_competition_count": self.bid_high_competition_count,
            "bid_high_competition_budget_pct": self.bid_high_competition_budget_pct,
        }


def validate_pricing_config(config: PricingConfig) -> PricingConfig:
    if config.market_cache_ttl_seconds <= 0:
        raise ValueError("market_cache_ttl_seconds must be > 0")
    if config.market_fetch_timeout_seconds <= 0:
        raise ValueError("market_fetch_timeout_seconds must be > 0")
    if config.min_price <= 0:
        raise ValueError("min_price must be > 0")
    if not (0 < config.min_total_multiplier <= 1 <= config.max_total_multiplier):
        raise ValueError("total multiplier bounds must satisfy 0 < min <= 1 <= max")
    if not (0 < config.price_range_min_factor <= 1 <= config.price_range_max_factor):
        raise ValueError("price range factors must bracket 1.0")
    if not (0 < config.fallback_range_min_factor <= 1 <= config.fallback_range_max_factor):
        raise ValueError("fallback range factors must bracket 1.0")
    if not (0 < config.quality_premium_floor <= 1 <= config.quality_premium_ceiling):
        raise ValueError("quality premium bounds must bracket 1.0")
    if not (0 <= config.confidence_base <= config.confidence_cap < 1):
        raise ValueError("confidence_cap must be >= confidence_base and below 1")
    if not (0 <= config.fallback_confidence <= config.confidence_cap):
        raise ValueError("fallback_confidence must be within [0, confidence_cap]")
    if config.demand_surge_supply_floor <= 0:
        raise ValueError("demand_surge_supply_floor must be > 0")
    if config.bid_closing_seconds < 0 or config.bid_early_seconds <= config.bid_closing_seconds:
        raise ValueError("bid_early_seconds must be greater than bid_closing_seconds")
    if config.bid_top_up_cap < 0 or config.bid_top_up_budget_pct < 0:
        raise ValueError("bid top-up settings must be nonnegative")
    for name, mapping in (
        ("complexity_multipliers", config.complexity_multipliers),
        ("client_preference_multipliers", config.client_preference_multipliers),
        ("urgency_multipliers", config.urgency_multipliers),
    ):
        for key, value in (mapping or {}).items():
            if value <= 0:
                raise ValueError(f"{name}[{key!r}] must be > 0")
    return config


def load_pricing_config(*, config_path: str | None = None) -> PricingConfig:
    resolved_path = config_path or _env_str("PRICING_POLICY_PATH", DEFAULT_CONFIG_PATH) or DEFAULT_CONFIG_PATH
    if Path(resolved_path).exists():
        cfg = _load_yaml(resolved_path)
    else:
        LOGGER.info("Pricing policy file %s not found; using built-in defaults", resolved_path)
        cfg = {}

    defaults = PricingConfig()
    cache_cfg = dict(cfg.get("market_cache", {}))
    bounds_cfg = dict(cfg.get("bounds", {}))
    quality_cfg = dict(cfg.get("quality_premium", {}))
    competition_cfg = dict(cfg.get("competition", {}))
    confidence_cfg = dict(cfg.get("confidence", {}))
    fallback_cfg = dict(cfg.get("fallback", {}))
    bid_cfg = dict(cfg.get("bid_optimizer", {}))

    config = PricingConfig(
        pricing_policy_version=str(
            _env_str("PRICING_POLICY_VERSION", str(cfg.get("pricing_policy_version", defaults.pricing_policy_version)))
        ),
        market_cache_ttl_seconds=_env_float(
            "PRICING_MARKET_CACHE_TTL_SECONDS",
            float(cache_cfg.get("ttl_seconds", defaults.market_cache_ttl_seconds)),
        ),
        market_fetch_timeout_seconds=_env_float(
            "PRICING_MARKET_FETCH_TIMEOUT_SECONDS",
            float(cache_cfg.get("fetch_timeout_seconds", defaults.market_fetch_timeout_seconds)),
        ),
        min_price=_env_float("PRICING_MIN_PRICE", float(bounds_cfg.get("min_price", defaults.min_price))),
        min_total_multiplier=_env_float(
            "PRICING_MIN_TOTAL_MULTIPLIER",
            float(bounds_cfg.get("min_total_multiplier", defaults.min_total_multiplier)),
        ),
        max_total_multiplier=_env_float(
            "PRICING_MAX_TOTAL_MULTIPLIER",
            float(bounds_cfg.get("max_total_multiplier", defaults.max_total_multiplier)),
        ),
        price_range_min_factor=float(bounds_cfg.get("price_range_min_factor", defaults.price_range_min_factor)),
        price_range_max_factor=float(bounds_cfg.get("price_range_max_factor", defaults.price_range_max_factor)),
        complexity_multipliers=_as_float_mapping(
            cfg.get("complexity_multipliers"), "complexity_multipliers", DEFAULT_COMPLEXITY_MULTIPLIERS
        ),
        client_preference_multipliers=_as_float_mapping(
            cfg.get("client_preference_multipliers"),
            "client_preference_multipliers",
            DEFAULT_CLIENT_PREFERENCE_MULTIPLIERS,
        ),
        urgency_multipliers=_as_float_mapping(
            cfg.get("urgency_multipliers"), "urgency_multipliers", DEFAULT_URGENCY_MULTIPLIERS
        ),
        quality_adjustment_weight=float(cfg.get("quality_adjustment_weight", defaults.quality_adjustment_weight)),
        demand_surge_bands=_as_bands(cfg.get("demand_surge_bands"), "demand_surge_bands", DEFAULT_DEMAND_SURGE_BANDS),
        demand_surge_supply_floor=float(cfg.get("demand_surge_supply_floor", defaults.demand_surge_supply_floor)),
        quality_rating_bands=_as_bands(quality_cfg.get("rating_bands"), "quality_premium.rating_bands", DEFAULT_RATING_BANDS),
        quality_completion_bands=_as_bands(
            quality_cfg.get("completion_bands"), "quality_premium.completion_bands", DEFAULT_COMPLETION_BANDS
        ),
        quality_experience_bands=_as_bands(
            quality_cfg.get("experience_bands"), "quality_premium.experience_bands", DEFAULT_EXPERIENCE_BANDS
        ),
        quality_demand_score_bands=_as_bands(
            quality_cfg.get("demand_score_bands"), "quality_premium.demand_score_bands", DEFAULT_DEMAND_SCORE_BANDS
        ),
        quality_premium_floor=float(quality_cfg.get("floor", defaults.quality_premium_floor)),
        quality_premium_ceiling=float(quality_cfg.get("ceiling", defaults.quality_premium_ceiling)),
        competition_dispersion_threshold=float(
            competition_cfg.get("dispersion_threshold", defaults.competition_dispersion_threshold)
        ),
        competition_dispersion_multiplier=float(
            competition_cfg.get("dispersion_multiplier", defaults.competition_dispersion_multiplier)
        ),
        competition_crowded_count=int(competition_cfg.get("crowded_count", defaults.competition_crowded_count)),
        competition_crowded_multiplier=float(
            competition_cfg.get("crowded_multiplier", defaults.competition_crowded_multiplier)
        ),
        confidence_base=float(confidence_cfg.get("base", defaults.confidence_base)),
        confidence_cap=float(confidence_cfg.get("cap", defaults.confidence_cap)),
        fallback_confidence=float(fallback_cfg.get("confidence", defaults.fallback_confidence)),
        fallback_booking_rate=float(fallback_cfg.get("booking_rate", defaults.fallback_booking_rate)),
        fallback_range_min_factor=float(fallback_cfg.get("range_min_factor", defaults.fallback_range_min_factor)),
        fallback_range_max_factor=float(fallback_cfg.get("range_max_factor", defaults.fallback_range_max_factor)),
        bid_closing_seconds=_env_int(
            "PRICING_BID_CLOSING_SECONDS", int(bid_cfg.get("closing_seconds", defaults.bid_closing_seconds))
        ),
        bid_early_seconds=_env_int(
            "PRICING_BID_EARLY_SECONDS", int(bid_cfg.get("early_seconds", defaults.bid_early_seconds))
        ),
        bid_top_up_budget_pct=float(bid_cfg.get("top_up_budget_pct", defaults.bid_top_up_budget_pct)),
        bid_top_up_cap=float(bid_cfg.get("top_up_cap", defaults.bid_top_up_cap)),
        bid_early_pullback_trigger=float(bid_cfg.get("early_pullback_trigger", defaults.bid_early_pullback_trigger)),
        bid_early_pullback_target=float(bid_cfg.get("early_pullback_target", defaults.bid_early_pullback_target)),
        bid_high_competition_count=int(bid_cfg.get("high_competition_count", defaults.bid_high_competition_count)),
        bid_high_competition_budget_pct=float(
            bid_cfg.get("high_competition_budget_pct", defaults.bid_high_competition_budget_pct)
        ),
    )
    return validate_pricing_config(config)
