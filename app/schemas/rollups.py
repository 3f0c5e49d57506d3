"""
app/schemas/rollups.py

Request/response schemas for the rollup reporting endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RollupRowPayload(BaseModel):
    """
    One column's aggregates; ``min``/``max`` are null for empty columns.
    """

    model_config = ConfigDict(allow_inf_nan=False, extra="ignore")

    column: str
    count: int = Field(..., ge=0)
    sum: float
    min: float | None = None
    max: float | None = None
    avg: float


class FileMetaPayload(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False, extra="allow")

    name: str
    size: int = Field(..., ge=0)
    type: str | None = None


class RollupsPayload(BaseModel):
    """
    Summary posted after an ingestion run; raw rows are never sent.
    """

    model_config = ConfigDict(allow_inf_nan=False, populate_by_name=True, extra="ignore")

    rollups: list[RollupRowPayload]
    total_rows: int = Field(..., ge=0, alias="totalRows")
    headers: list[str] | None = None
    file_meta: FileMetaPayload | None = Field(default=None, alias="fileMeta")


class RollupsReceived(BaseModel):
    rows: int
    cols: int


class RollupsAcceptedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    received: RollupsReceived
    report_id: str | None = Field(default=None, alias="reportId")


class RollupsHealthResponse(BaseModel):
    ok: bool = True
    method: str = "GET"
    route: str = "/rollups"
