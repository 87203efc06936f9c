"""
Process-level settings shared by the pricing CLI and the API.
Values come from `.env` and the environment; the three required variables must be set before anything starts.
Market data location and the pricing policy path are optional and fall back to repository defaults.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Final

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

REQUIRED_ENV_VARS: Final[tuple[str, ...]] = (
    "PROJECT_NAME",
    "ENV",
    "LOG_LEVEL",
)


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    PROJECT_NAME: str
    ENV: str
    LOG_LEVEL: str
    PRICING_POLICY_PATH: str = "configs/pricing_policy.yaml"
    MARKET_DATA_DATABASE_URL: str | None = None
    MARKET_SNAPSHOT_PATH: str | None = None

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @field_validator("MARKET_DATA_DATABASE_URL", "MARKET_SNAPSHOT_PATH", mode="before")
    @classmethod
    def blank_as_none(cls, value: str | None) -> str | None:
        if value is None or not str(value).strip():
            return None
        return str(value).strip()


def load_settings(*, load_env: bool = True) -> Settings:
    if load_env:
        load_dotenv()

    missing = [key for key in REQUIRED_ENV_VARS if not os.getenv(key)]
    if missing:
        missing_values = ", ".join(sorted(missing))
        raise RuntimeError(
            f"Missing required environment variables: {missing_values}. "
            "Populate these values in `.env` before starting the application."
        )

    try:
        return Settings.model_validate(dict(os.environ))
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
