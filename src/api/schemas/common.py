# This file holds schema pieces shared by every pricing API response.
# Envelope metadata and error bodies are declared once so success and failure payloads trace the same way.

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class EnvelopeFields(BaseModel):
    api_version: str
    schema_version: str
    request_id: str
    generated_at: datetime
    warnings: list[str] | None = None


class ErrorResponse(BaseModel):
    """Body returned by every registered error handler."""

    error_code: str
    message: str
    details: Any | None = None
    request_id: str
    timestamp: datetime
