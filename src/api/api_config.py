# This file defines runtime settings for the pricing API layer.
# Values come from `.env` and the process environment; every field has a local-development default.
# Table names are checked against a strict identifier pattern because they are interpolated into SQL.

from __future__ import annotations

import os
import re
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

# Field name -> environment variable.
ENV_FIELDS: dict[str, str] = {
    "api_name": "API_NAME",
    "api_version_path": "API_VERSION_PATH",
    "schema_version": "API_SCHEMA_VERSION",
    "environment": "ENV",
    "market_database_url": "MARKET_DATA_DATABASE_URL",
    "market_stats_table_name": "MARKET_STATS_TABLE_NAME",
    "competitor_table_name": "COMPETITOR_TABLE_NAME",
    "market_snapshot_path": "MARKET_SNAPSHOT_PATH",
    "pricing_policy_path": "PRICING_POLICY_PATH",
    "app_version": "APP_VERSION",
}


class ApiConfig(BaseModel):
    """Typed API runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    api_name: str = "Marketplace Pricing API"
    api_version_path: str = "/api/v1"
    schema_version: str = "1.0.0"
    environment: str = "local"
    market_database_url: str | None = None
    market_stats_table_name: str = "market_price_stats"
    competitor_table_name: str = "competitor_listings"
    market_snapshot_path: str | None = None
    pricing_policy_path: str = "configs/pricing_policy.yaml"
    allowed_origins: list[str] = Field(default_factory=list)
    app_version: str = "0.1.0"

    @field_validator("api_version_path")
    @classmethod
    def validate_api_version_path(cls, value: str) -> str:
        parts = [part for part in value.split("/") if part]
        if not value.startswith("/") or len(parts) < 2 or not parts[-1].startswith("v"):
            raise ValueError("api_version_path must look like '/api/v1'.")
        return "/" + "/".join(parts)

    @field_validator("market_stats_table_name", "competitor_table_name")
    @classmethod
    def validate_table_name(cls, value: str) -> str:
        if not _IDENTIFIER_RE.match(value):
            raise ValueError(f"Unsafe SQL identifier: {value!r}")
        return value


def _env_value(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip()


def load_api_config(*, load_env: bool = True) -> ApiConfig:
    """Load API configuration from `.env` and the process environment.

    Unset or blank variables fall back to the model defaults.
    `API_ALLOWED_ORIGINS` is a comma-separated list.
    """

    if load_env:
        load_dotenv()

    values: dict[str, object] = {}
    for field_name, env_name in ENV_FIELDS.items():
        value = _env_value(env_name)
        if value is not None:
            values[field_name] = value

    origins = _env_value("API_ALLOWED_ORIGINS")
    if origins is not None:
        values["allowed_origins"] = [item.strip() for item in origins.split(",") if item.strip()]

    return ApiConfig.model_validate(values)


@lru_cache(maxsize=1)
def get_api_config() -> ApiConfig:
    return load_api_config()
