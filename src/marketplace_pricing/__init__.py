"""
Marketplace pricing-decision engine: price recommendations, strategies, confidence, and live-auction bids.
"""
