# This module declares Prometheus collectors for the pricing engine.
# It exists so degraded pricing and cache behavior are visible on the API /metrics endpoint.

from __future__ import annotations

from prometheus_client import Counter

MARKET_CACHE_LOOKUPS_TOTAL = Counter(
    "pricing_market_cache_lookups_total",
    "Market data cache lookups by result.",
    ["result"],
)
PRICING_RECOMMENDATIONS_TOTAL = Counter(
    "pricing_recommendations_total",
    "Pricing recommendations produced, split by whether the fallback path was used.",
    ["outcome"],
)
BID_SUGGESTIONS_TOTAL = Counter(
    "pricing_bid_suggestions_total",
    "Bid suggestions produced by auction regime.",
    ["regime"],
)
