"""
app/schemas/csv_ingestion.py

Response schemas for CSV profiling endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ColumnRollupResponse(BaseModel):
    """
    API response model for one numeric column's aggregates.
    """

    column: str
    count: int = Field(..., ge=0)
    sum: float
    min: float | None = None
    max: float | None = None
    avg: float


class CSVProfileResponse(BaseModel):
    """
    API response model for a profiled CSV upload.
    """

    status: str
    headers: list[str] = Field(default_factory=list)
    total_rows: int = Field(..., ge=0)
    preview: list[dict[str, Any]] = Field(default_factory=list)
    sample: list[dict[str, Any]] = Field(default_factory=list)
    rollups: list[ColumnRollupResponse] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
