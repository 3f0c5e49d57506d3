"""
app/api/routers/orders.py

Per-day order rollups over mapped rows.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from app.mappers.field_mapper import ORDER_FIELDS, OrderFieldMapper
from app.schemas.orders import DailyRollupListResponse, DailyRollupRequest, DailyRollupResponse
from app.services.order_rollup_service import compute_daily_rollups

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/daily-rollups", response_model=DailyRollupListResponse)
def daily_rollups(body: DailyRollupRequest) -> DailyRollupListResponse:
    """
    Map rows to orders and roll them up by day.
    """

    unknown = sorted(set(body.mapping) - set(ORDER_FIELDS))
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown mapping fields: {', '.join(unknown)}.",
        )
    if not body.mapping.get("item_price"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Mapping must include item_price.",
        )

    orders = OrderFieldMapper.map_rows(body.rows, body.mapping)
    rollups = compute_daily_rollups(orders, default_date=body.default_date)
    return DailyRollupListResponse(
        rollups=[DailyRollupResponse(**rollup.to_dict()) for rollup in rollups],
        total_orders=len(orders),
    )
