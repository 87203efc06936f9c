# This test file validates the seven dynamic multipliers and how they combine.
# It exists to keep each signal independently tunable and the combined product inside policy bounds.
# Competition branches are exercised separately so dispersion and crowding cannot mask each other.

from __future__ import annotations

import pytest

from src.marketplace_pricing.adjustments import (
    apply_adjustments,
    calculate_adjustments,
    calculate_competition_adjustment,
    calculate_demand_surge,
    calculate_quality_premium,
    calculate_seasonal_multiplier,
    calculate_time_multiplier,
    calculate_weather_multiplier,
)
from src.marketplace_pricing.models import AdjustmentSet
from src.marketplace_pricing.pricing_config import PricingConfig
from tests.marketplace_pricing.support import (
    make_competitors,
    make_factors,
    make_job,
    make_market_data,
    make_provider,
)


@pytest.mark.parametrize(
    ("hour", "day_of_week", "expected"),
    [
        (8, 2, 1.0),
        (12, 2, 1.1),
        (12, 6, 1.25),
        (21, 3, 1.15),
        (23, 2, 1.4),
        (3, 0, 1.4),
    ],
)
def test_time_multiplier_is_additive(hour: int, day_of_week: int, expected: float) -> None:
    assert calculate_time_multiplier(hour, day_of_week) == pytest.approx(expected)


def test_high_demand_against_thin_supply_surges() -> None:
    assert calculate_demand_surge(0.9, 0.3, PricingConfig()) == (1.5, "high")


@pytest.mark.parametrize(
    ("demand", "supply", "expected"),
    [
        (0.9, 0.5, (1.3, "medium")),
        (0.65, 0.5, (1.15, "low")),
        (0.5, 0.5, (1.0, "none")),
        (0.2, 0.5, (0.9, "discount")),
    ],
)
def test_surge_ladder_steps(demand: float, supply: float, expected: tuple[float, str]) -> None:
    assert calculate_demand_surge(demand, supply, PricingConfig()) == expected


def test_zero_supply_uses_floor_instead_of_dividing_by_zero() -> None:
    assert calculate_demand_surge(0.3, 0.0, PricingConfig()) == (1.5, "high")


def test_quality_premium_is_neutral_for_average_provider() -> None:
    assert calculate_quality_premium(make_provider(), PricingConfig()) == pytest.approx(1.0)


def test_quality_premium_is_capped_at_ceiling() -> None:
    provider = make_provider(rating=4.9, completion_rate=0.99, experience_years=12, demand_score=0.9)
    assert calculate_quality_premium(provider, PricingConfig()) == 1.5


def test_quality_premium_penalizes_weak_record() -> None:
    provider = make_provider(rating=3.5, completion_rate=0.5)
    assert calculate_quality_premium(provider, PricingConfig()) == pytest.approx(0.75)


def test_seasonal_and_weather_multipliers() -> None:
    assert calculate_seasonal_multiplier(0.0) == pytest.approx(0.9)
    assert calculate_seasonal_multiplier(1.0) == pytest.approx(1.1)
    assert calculate_weather_multiplier(None) == 1.0
    assert calculate_weather_multiplier(0.0) == pytest.approx(0.95)
    assert calculate_weather_multiplier(1.0) == pytest.approx(1.05)


def test_competition_neutral_without_competitors() -> None:
    assert calculate_competition_adjustment(make_market_data(), PricingConfig()) == 1.0


def test_competition_dispersed_prices_raise_multiplier() -> None:
    market_data = make_market_data(competitor_prices=make_competitors([50.0, 150.0]))
    assert calculate_competition_adjustment(market_data, PricingConfig()) == 1.1


def test_competition_crowded_market_lowers_multiplier() -> None:
    market_data = make_market_data(competitor_prices=make_competitors([100.0] * 11))
    assert calculate_competition_adjustment(market_data, PricingConfig()) == 0.95


def test_competition_ten_uniform_competitors_is_neutral() -> None:
    market_data = make_market_data(competitor_prices=make_competitors([100.0] * 10))
    assert calculate_competition_adjustment(market_data, PricingConfig()) == 1.0


def test_competition_dispersion_wins_over_crowding() -> None:
    market_data = make_market_data(competitor_prices=make_competitors([50.0, 150.0] * 6))
    assert calculate_competition_adjustment(market_data, PricingConfig()) == 1.1


def test_critical_urgency_alone_scales_price_by_one_and_a_half() -> None:
    config = PricingConfig()
    adjustments = calculate_adjustments(
        make_job(),
        make_provider(),
        make_factors(urgency="critical"),
        make_market_data(),
        config,
    )

    assert adjustments.urgency_bonus == 1.5
    assert adjustments.product() == pytest.approx(1.5)
    assert apply_adjustments(100.0, adjustments, config).price == 150.0


def test_missing_weather_leaves_multiplier_neutral() -> None:
    adjustments = calculate_adjustments(
        make_job(), make_provider(), make_factors(), make_market_data(), PricingConfig()
    )
    assert adjustments.weather_multiplier == 1.0
    assert adjustments.demand_surge_level == "none"


def test_combined_multiplier_is_clamped_to_policy_bounds() -> None:
    config = PricingConfig()
    high = AdjustmentSet(
        time_based_multiplier=2.0,
        demand_surge_multiplier=2.0,
        quality_premium=2.0,
        urgency_bonus=2.0,
        seasonal_multiplier=2.0,
        weather_multiplier=2.0,
        competition_adjustment=2.0,
    )
    low = AdjustmentSet(
        time_based_multiplier=0.5,
        demand_surge_multiplier=0.5,
        quality_premium=0.5,
        urgency_bonus=0.5,
        seasonal_multiplier=0.5,
        weather_multiplier=0.5,
        competition_adjustment=0.5,
    )

    applied_high = apply_adjustments(100.0, high, config)
    applied_low = apply_adjustments(100.0, low, config)

    assert applied_high.price == 300.0
    assert applied_high.clamped is True
    assert applied_low.price == 50.0
    assert applied_low.total_multiplier == 0.5


def test_price_never_drops_below_minimum() -> None:
    applied = apply_adjustments(0.0, AdjustmentSet.neutral(), PricingConfig())
    assert applied.price == 1.0
    assert applied.clamped is False
