"""
app/schemas/orders.py

Request/response schemas for per-day order rollups.
"""

from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, Field


class DailyRollupRequest(BaseModel):
    """
    Rows (raw or normalized) and the field -> header mapping to apply.
    """

    rows: list[dict[str, Any]] = Field(default_factory=list)
    mapping: dict[str, str]
    default_date: dt.date | None = Field(
        default=None,
        description="Date used for rows without a mapped or parseable order date",
    )


class DailyRollupResponse(BaseModel):
    date: dt.date
    orders: int = Field(..., ge=0)
    units: int = Field(..., ge=0)
    gross: float
    fees: float
    net: float
    asp: float


class DailyRollupListResponse(BaseModel):
    rollups: list[DailyRollupResponse] = Field(default_factory=list)
    total_orders: int = Field(..., ge=0)
