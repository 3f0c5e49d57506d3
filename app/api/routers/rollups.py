"""
app/api/routers/rollups.py

Rollup reporting endpoint.

GET  -> health check
POST -> accept a column rollup summary (never raw rows)

Payload problems are answered with ``400 {"ok": false, "error": ...}``
rather than the framework's default 422 body.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.api.dependencies import get_optional_db
from app.schemas.rollups import (
    RollupsAcceptedResponse,
    RollupsHealthResponse,
    RollupsPayload,
    RollupsReceived,
)
from app.services.rollup_report_service import (
    RollupPersistenceError,
    RollupReportService,
    get_rollup_report_service,
)

router = APIRouter(prefix="/rollups", tags=["rollups"])


@router.get("", response_model=RollupsHealthResponse)
def rollups_health() -> RollupsHealthResponse:
    return RollupsHealthResponse()


@router.post("", response_model=RollupsAcceptedResponse, response_model_by_alias=True)
def post_rollups(
    body: Any = Body(default=None),
    db: Session | None = Depends(get_optional_db),
    service: RollupReportService = Depends(get_rollup_report_service),
) -> RollupsAcceptedResponse:
    """
    Validate and accept one rollup summary.
    """

    if not isinstance(body, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"ok": False, "error": "Body must be an object"},
        )
    try:
        payload = RollupsPayload.model_validate(body)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"ok": False, "error": _describe(exc)},
        ) from exc

    try:
        receipt = service.accept(payload, db)
    except RollupPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"ok": False, "error": "Unable to persist rollup report."},
        ) from exc

    return RollupsAcceptedResponse(
        ok=True,
        received=RollupsReceived(rows=receipt.rows, cols=receipt.cols),
        report_id=receipt.report_id,
    )


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location} {first.get('msg', 'is invalid')}".strip()
