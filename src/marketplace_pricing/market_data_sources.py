# This module provides concrete market data providers behind the cache.
# It exists so the engine can be pointed at a SQL store in production and at JSON snapshots in tests and the CLI.
# SQL reads use parameterized queries and allowlisted identifiers, and run on a worker thread.
# Markets without statistics yield an empty snapshot; the base price then falls back to the budget midpoint.

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pandas as pd
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from src.marketplace_pricing.models import CompetitorPrice, Location, MarketData, MarketTrends

LOGGER = logging.getLogger("market_data")

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def _safe_identifier(identifier: str) -> str:
    if not _IDENTIFIER_RE.match(identifier):
        raise ValueError(f"Unsafe SQL identifier: {identifier!r}")
    return identifier


def _float_or(value: Any, default: float) -> float:
    if value is None or pd.isna(value):
        return default
    return float(value)


def market_data_from_dict(payload: Mapping[str, Any]) -> MarketData:
    trends = dict(payload.get("trends") or payload.get("market_trends") or {})
    competitors = [
        CompetitorPrice(
            provider_id=str(item.get("provider_id", item.get("providerId", ""))),
            price=float(item["price"]),
            rating=_float_or(item.get("rating"), 0.0),
            booking_rate=_float_or(item.get("booking_rate", item.get("bookingRate")), 0.0),
        )
        for item in list(payload.get("competitor_prices", []))
    ]
    return MarketData(
        average_prices={str(key): float(value) for key, value in dict(payload.get("average_prices", {})).items()},
        competitor_prices=tuple(competitors),
        demand_index=_float_or(payload.get("demand_index"), 0.5),
        supply_index=_float_or(payload.get("supply_index"), 0.5),
        price_elasticity=_float_or(payload.get("price_elasticity"), 0.5),
        trends=MarketTrends(
            price_change_7d=_float_or(trends.get("price_change_7d"), 0.0),
            price_change_30d=_float_or(trends.get("price_change_30d"), 0.0),
            demand_change_7d=_float_or(trends.get("demand_change_7d"), 0.0),
            demand_change_30d=_float_or(trends.get("demand_change_30d"), 0.0),
        ),
    )


class StaticMarketDataProvider:
    """In-memory provider keyed by (category, postal code)."""

    def __init__(
        self,
        snapshots: Mapping[tuple[str, str], MarketData] | None = None,
        *,
        default: MarketData | None = None,
    ) -> None:
        self._snapshots = dict(snapshots or {})
        self._default = default
        self.fetch_count = 0

    async def fetch_market_data(self, category: str, location: Location) -> MarketData:
        self.fetch_count += 1
        snapshot = self._snapshots.get((category, location.postal_code))
        if snapshot is not None:
            return snapshot
        if self._default is not None:
            return self._default
        return MarketData.empty()


class SqlMarketDataProvider:
    """Reads aggregate market statistics and competitor listings through SQLAlchemy."""

    def __init__(
        self,
        *,
        engine: Engine,
        stats_table_name: str = "market_price_stats",
        competitor_table_name: str = "competitor_listings",
    ) -> None:
        self._engine = engine
        self._stats_table = _safe_identifier(stats_table_name)
        self._competitor_table = _safe_identifier(competitor_table_name)

    @classmethod
    def from_url(cls, database_url: str, **kwargs: str) -> SqlMarketDataProvider:
        return cls(engine=create_engine(database_url, pool_pre_ping=True, future=True), **kwargs)

    @property
    def engine(self) -> Engine:
        return self._engine

    def can_connect(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    async def fetch_market_data(self, category: str, location: Location) -> MarketData:
        return await asyncio.to_thread(self.load_market_data, category, location.postal_code)

    def load_market_data(self, category: str, postal_code: str) -> MarketData:
        stats = pd.read_sql_query(
            text(
                f"""
                SELECT
                    category,
                    average_price,
                    demand_index,
                    supply_index,
                    price_elasticity,
                    price_change_7d,
                    price_change_30d,
                    demand_change_7d,
                    demand_change_30d,
                    updated_at
                FROM {self._stats_table}
                WHERE postal_code = :postal_code
                ORDER BY category, updated_at DESC
                """
            ),
            con=self._engine,
            params={"postal_code": postal_code},
        )
        competitors = pd.read_sql_query(
            text(
                f"""
                SELECT provider_id, price, rating, booking_rate
                FROM {self._competitor_table}
                WHERE category = :category
                  AND postal_code = :postal_code
                  AND price > 0
                ORDER BY provider_id
                """
            ),
            con=self._engine,
            params={"category": category, "postal_code": postal_code},
        )

        if stats.empty and competitors.empty:
            LOGGER.info("No market statistics for category=%s postal_code=%s", category, postal_code)
            return MarketData.empty()

        latest = stats.drop_duplicates(subset=["category"], keep="first")
        average_prices = {
            str(row["category"]): float(row["average_price"])
            for _, row in latest.iterrows()
            if not pd.isna(row["average_price"])
        }

        category_rows = latest[latest["category"].astype(str) == category]
        row: dict[str, Any] = category_rows.iloc[0].to_dict() if not category_rows.empty else {}

        competitor_prices = tuple(
            CompetitorPrice(
                provider_id=str(item["provider_id"]),
                price=float(item["price"]),
                rating=_float_or(item["rating"], 0.0),
                booking_rate=_float_or(item["booking_rate"], 0.0),
            )
            for item in competitors.to_dict(orient="records")
        )

        return MarketData(
            average_prices=average_prices,
            competitor_prices=competitor_prices,
            demand_index=_float_or(row.get("demand_index"), 0.5),
            supply_index=_float_or(row.get("supply_index"), 0.5),
            price_elasticity=_float_or(row.get("price_elasticity"), 0.5),
            trends=MarketTrends(
                price_change_7d=_float_or(row.get("price_change_7d"), 0.0),
                price_change_30d=_float_or(row.get("price_change_30d"), 0.0),
                demand_change_7d=_float_or(row.get("demand_change_7d"), 0.0),
                demand_change_30d=_float_or(row.get("demand_change_30d"), 0.0),
            ),
        )


def load_market_snapshots(path: str | Path) -> StaticMarketDataProvider:
    """Build a static provider from a JSON snapshot file.

    The file holds either a single market-data object, applied to every market, or
    ``{"default": {...}, "markets": [{"category": ..., "postal_code": ..., ...}]}``.
    """

    with Path(path).open(encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Market snapshot file {path} must contain a JSON object")

    if "markets" not in payload:
        return StaticMarketDataProvider(default=market_data_from_dict(payload))

    snapshots: dict[tuple[str, str], MarketData] = {}
    for entry in list(payload["markets"]):
        if "category" not in entry or "postal_code" not in entry:
            raise ValueError("Each market snapshot requires category and postal_code")
        snapshots[(str(entry["category"]), str(entry["postal_code"]))] = market_data_from_dict(entry)

    default_payload = payload.get("default")
    default = market_data_from_dict(default_payload) if default_payload else None
    LOGGER.info("Loaded %s market snapshots from %s", len(snapshots), path)
    return StaticMarketDataProvider(snapshots, default=default)


def build_market_data_provider(
    *,
    database_url: str | None = None,
    snapshot_path: str | Path | None = None,
    stats_table_name: str = "market_price_stats",
    competitor_table_name: str = "competitor_listings",
) -> SqlMarketDataProvider | StaticMarketDataProvider:
    if database_url:
        return SqlMarketDataProvider.from_url(
            database_url,
            stats_table_name=stats_table_name,
            competitor_table_name=competitor_table_name,
        )
    if snapshot_path:
        return load_market_snapshots(snapshot_path)
    LOGGER.warning("No market data source configured; base prices will use budget midpoints")
    return StaticMarketDataProvider()
