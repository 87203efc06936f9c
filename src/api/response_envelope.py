# This file builds response envelopes and version metadata for API endpoints.
# It exists so downstream systems always receive version and request tracing fields next to pricing data.
# Version labels are derived from the configured path, so `/api/v1` always reports `v1`.

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import Request

from src.api.api_config import ApiConfig


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def api_version_label(api_version_path: str) -> str:
    """Convert `/api/v1` style paths into `v1` labels."""

    parts = [part for part in api_version_path.split("/") if part]
    if not parts:
        raise ValueError(f"Invalid api_version_path: {api_version_path!r}")
    return parts[-1]


def build_version_fields(*, api_version_path: str, schema_version: str) -> dict[str, str]:
    return {
        "api_version": api_version_label(api_version_path),
        "schema_version": schema_version,
    }


def build_trace_fields(request: Request, config: ApiConfig) -> dict[str, Any]:
    """Version block plus the request id assigned by the request middleware."""

    return {
        **build_version_fields(api_version_path=config.api_version_path, schema_version=config.schema_version),
        "request_id": request.state.request_id,
    }


def build_object_envelope(
    *,
    api_version_path: str,
    schema_version: str,
    request_id: str,
    data: dict[str, Any] | None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    return {
        **build_version_fields(api_version_path=api_version_path, schema_version=schema_version),
        "request_id": request_id,
        "generated_at": utc_now(),
        "data": data,
        "warnings": warnings,
    }
