# This file defines response schemas for health, readiness, and version endpoints.
# Every operational payload shares the trace fields so monitors can correlate probes with logs.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class TraceFields(BaseModel):
    api_version: str
    schema_version: str
    request_id: str
    timestamp: datetime


class HealthResponse(TraceFields):
    status: str
    environment: str
    service_name: str


class ReadinessResponse(TraceFields):
    ready: bool
    market_source: str
    market_source_connected: bool
    pricing_policy_version: str


class VersionResponse(TraceFields):
    service_name: str
    api_version_path: str
    app_version: str
    pricing_policy_version: str
    git_commit: str | None = None
