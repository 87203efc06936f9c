# This module memoizes market statistics per (category, postal code) for the pricing engine.
# It exists so repeated pricing requests in the same market reuse one fetch within a bounded staleness window.
# The cache is an explicit object handed to the engine, so tests can inject providers and clocks.
# Fetch failures and timeouts surface as MarketDataUnavailableError and are never cached.

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from src.marketplace_pricing.metrics import MARKET_CACHE_LOOKUPS_TOTAL
from src.marketplace_pricing.models import Location, MarketData

LOGGER = logging.getLogger("market_data")


class MarketDataUnavailableError(RuntimeError):
    """Raised when market statistics cannot be obtained from the provider."""


class MarketDataProvider(Protocol):
    async def fetch_market_data(self, category: str, location: Location) -> MarketData: ...


@dataclass(frozen=True)
class CacheEntry:
    market_data: MarketData
    fetched_at: datetime
    expires_at: datetime


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def cache_key(category: str, location: Location) -> tuple[str, str]:
    return (str(category), str(location.postal_code))


class MarketDataCache:
    """TTL-bounded, write-once-per-window cache in front of a market data provider."""

    def __init__(
        self,
        *,
        provider: MarketDataProvider,
        ttl_seconds: float,
        fetch_timeout_seconds: float,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self._provider = provider
        self._ttl = timedelta(seconds=ttl_seconds)
        self._fetch_timeout_seconds = fetch_timeout_seconds
        self._clock = clock
        self._entries: dict[tuple[str, str], CacheEntry] = {}

    @property
    def provider(self) -> MarketDataProvider:
        return self._provider

    def __len__(self) -> int:
        return len(self._entries)

    def peek(self, category: str, location: Location) -> CacheEntry | None:
        key = cache_key(category, location)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            # Expired entries are evicted on read.
            self._entries.pop(key, None)
            return None
        return entry

    def expires_at(self, category: str, location: Location) -> datetime | None:
        entry = self.peek(category, location)
        return entry.expires_at if entry is not None else None

    def invalidate(self, category: str, location: Location) -> None:
        self._entries.pop(cache_key(category, location), None)

    def clear(self) -> None:
        self._entries.clear()

    async def get_market_data(self, category: str, location: Location) -> MarketData:
        key = cache_key(category, location)
        entry = self.peek(category, location)
        if entry is not None:
            MARKET_CACHE_LOOKUPS_TOTAL.labels(result="hit").inc()
            return entry.market_data

        MARKET_CACHE_LOOKUPS_TOTAL.labels(result="miss").inc()
        try:
            market_data = await asyncio.wait_for(
                self._provider.fetch_market_data(category, location),
                timeout=self._fetch_timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            LOGGER.warning(
                "Market data fetch timed out after %.2fs for category=%s postal_code=%s",
                self._fetch_timeout_seconds,
                key[0],
                key[1],
            )
            raise MarketDataUnavailableError(f"Market data fetch timed out for {key}") from exc
        except MarketDataUnavailableError:
            raise
        except Exception as exc:
            LOGGER.warning("Market data fetch failed for category=%s postal_code=%s: %s", key[0], key[1], exc)
            raise MarketDataUnavailableError(f"Market data fetch failed for {key}: {exc}") from exc

        fetched_at = self._clock()
        self._entries[key] = CacheEntry(
            market_data=market_data,
            fetched_at=fetched_at,
            expires_at=fetched_at + self._ttl,
        )
        LOGGER.debug("Cached market data for category=%s postal_code=%s", key[0], key[1])
        return market_data
