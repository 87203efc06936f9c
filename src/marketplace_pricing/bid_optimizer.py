# This module suggests the next bid for a provider competing in a live job auction.
# Behavior depends on the auction regime: closing (top up to win), early (pull back), or mid-range (hold).
# A high-competition rule applies on top of any regime and caps the bid against the client's budget.
# Reasoning accumulates one sentence per rule that fired so the suggestion is explainable.

from __future__ import annotations

import logging
from collections.abc import Sequence

from src.marketplace_pricing.inputs import as_amount, clamp_budget, round_half_up
from src.marketplace_pricing.metrics import BID_SUGGESTIONS_TOTAL
from src.marketplace_pricing.models import BidSuggestion, JobCharacteristics
from src.marketplace_pricing.pricing_config import PricingConfig

LOGGER = logging.getLogger("pricing")

DEFAULT_BID_CONFIDENCE = 0.7
CLOSING_CONFIDENCE = 0.8
EARLY_CONFIDENCE = 0.6


def auction_regime(time_remaining_seconds: float, config: PricingConfig) -> str:
    if time_remaining_seconds < config.bid_closing_seconds:
        return "closing"
    if time_remaining_seconds > config.bid_early_seconds:
        return "early"
    return "mid_range"


def optimize_bid_price(
    current_bid: float,
    competing_bids: Sequence[float],
    time_remaining_seconds: float,
    job: JobCharacteristics,
    config: PricingConfig,
) -> BidSuggestion:
    current_bid = as_amount(current_bid)
    time_remaining_seconds = as_amount(time_remaining_seconds)
    bids = sorted((max(0.0, float(bid)) for bid in competing_bids), reverse=True)
    budget = clamp_budget(job.budget)
    highest_bid = bids[0] if bids else 0.0

    regime = auction_regime(time_remaining_seconds, config)
    suggested_bid = current_bid
    confidence = DEFAULT_BID_CONFIDENCE
    reasons: list[str] = []

    if regime == "closing":
        if current_bid < highest_bid:
            top_up = min(budget.max * config.bid_top_up_budget_pct, config.bid_top_up_cap)
            suggested_bid = highest_bid + top_up
            confidence = CLOSING_CONFIDENCE
            reasons.append("Auction ending soon - aggressive bid to secure win.")
    elif regime == "early":
        if bids and current_bid > highest_bid * config.bid_early_pullback_trigger:
            suggested_bid = highest_bid * config.bid_early_pullback_target
            confidence = EARLY_CONFIDENCE
            reasons.append("Early auction - conservative bid to stay competitive.")

    if len(bids) > config.bid_high_competition_count:
        suggested_bid = min(suggested_bid, budget.max * config.bid_high_competition_budget_pct)
        reasons.append("High competition detected - price discipline recommended.")

    if not reasons:
        reasons.append("Current bid is well positioned - no change suggested.")

    BID_SUGGESTIONS_TOTAL.labels(regime=regime).inc()
    LOGGER.debug(
        "Bid suggestion regime=%s current=%.2f highest=%.2f suggested=%.2f",
        regime,
        current_bid,
        highest_bid,
        suggested_bid,
    )
    return BidSuggestion(
        suggested_bid=max(0.0, round_half_up(suggested_bid)),
        reasoning=" ".join(reasons),
        confidence=confidence,
        regime=regime,
    )
