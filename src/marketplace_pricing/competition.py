# This module summarizes competitor listings for one market.
# It exists so the competition multiplier, the competitive strategy, and the API market analysis read one set of statistics.
# Dispersion is the coefficient of variation (population standard deviation over mean).
# Listings priced at or below zero are ignored regardless of which provider supplied them.

from __future__ import annotations

import numpy as np

from src.marketplace_pricing.models import CompetitionSummary, CompetitorPrice, MarketData


def price_dispersion(prices: np.ndarray) -> float:
    if prices.size == 0:
        return 0.0
    mean = float(np.mean(prices))
    if mean <= 0:
        return 0.0
    return float(np.std(prices)) / mean


def priced_competitors(market_data: MarketData) -> tuple[CompetitorPrice, ...]:
    return tuple(item for item in market_data.competitor_prices if item.price > 0)


def summarize_competition(market_data: MarketData) -> CompetitionSummary | None:
    competitors = priced_competitors(market_data)
    if not competitors:
        return None

    prices = np.array([item.price for item in competitors], dtype=float)
    ratings = np.array([item.rating for item in competitors], dtype=float)
    return CompetitionSummary(
        competitor_count=int(prices.size),
        average_price=float(np.mean(prices)),
        median_price=float(np.median(prices)),
        lowest_price=float(np.min(prices)),
        highest_price=float(np.max(prices)),
        price_dispersion=price_dispersion(prices),
        average_rating=float(np.mean(ratings)),
    )


def competitive_landscape_score(market_data: MarketData) -> float:
    """Share of the market left uncontested; 0.5 when no competitors are known."""

    count = len(priced_competitors(market_data))
    if count == 0:
        return 0.5
    return max(0.0, min(1.0, 1.0 - count / 100))
