"""
Domain models for reef fish explorer.

Pydantic models for query parameters and operation results. Record-level
data stays in raw OBIS dicts and pandas frames; these models only cover the
values that cross module boundaries.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from pydantic import BaseModel, Field

# =============================================================================
# Query parameters
# =============================================================================


class QueryParams(BaseModel):
    """Parameters of one OBIS occurrence query; also the cache key."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    dataset_id: str = Field(..., min_length=1, description="OBIS dataset UUID")
    include_measurements: bool = Field(
        default=True, description="Request measurement-or-fact records (mof)"
    )

    def canonical(self) -> str:
        """Deterministic JSON serialization of the parameters."""
        return json.dumps(self.model_dump(), sort_keys=True, separators=(",", ":"))

    def cache_key(self) -> str:
        """SHA-256 hex digest of the canonical serialization."""
        return hashlib.sha256(self.canonical().encode("utf-8")).hexdigest()


# =============================================================================
# Results
# =============================================================================


class Result(BaseModel):
    """Generic result wrapper for operations."""

    success: bool
    message: str
    data: dict[str, Any] | None = None
    error: str | None = None
