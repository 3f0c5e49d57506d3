"""
app/schemas/mapping.py

Request/response schemas for header mapping and mapping presets.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class MappingSuggestRequest(BaseModel):
    headers: list[str] = Field(..., min_length=1)
    overrides: dict[str, str] = Field(default_factory=dict)


class MappingErrorResponse(BaseModel):
    code: str
    message: str
    field: str | None = None
    source_column: str | None = None
    context: dict[str, Any] | None = None


class MappingResolutionResponse(BaseModel):
    """
    Field -> header mapping with per-field match strategy.
    """

    mapping: dict[str, str]
    strategies: dict[str, str] = Field(default_factory=dict)
    unmapped_fields: list[str] = Field(default_factory=list)
    missing_preset_headers: list[str] = Field(default_factory=list)
    errors: list[MappingErrorResponse] = Field(default_factory=list)
    is_valid: bool


class MappingPresetRequest(BaseModel):
    mapping: dict[str, str]
    headers: list[str] = Field(default_factory=list)


class MappingPresetResponse(BaseModel):
    name: str
    namespace: str
    mapping: dict[str, str]
    headers: list[str] = Field(default_factory=list)


class MappingPresetListResponse(BaseModel):
    namespace: str
    names: list[str] = Field(default_factory=list)


class ApplyPresetRequest(BaseModel):
    headers: list[str] = Field(..., min_length=1)
