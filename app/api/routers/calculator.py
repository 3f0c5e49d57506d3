"""
app/api/routers/calculator.py

Fee/profit calculator endpoints.

Both endpoints are pure computations: no storage, and the engine never
raises for any combination of field values.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from app.schemas.calculator import (
    CalculatorRequest,
    CalculatorResponse,
    SimpleCalculatorRequest,
    SimpleCalculatorResponse,
)
from fees.engine import compute
from fees.simple import compute_simple

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calculator", tags=["calculator"])


@router.post("/compute", response_model=CalculatorResponse)
def compute_fees(body: CalculatorRequest) -> CalculatorResponse:
    """
    Full bucket model -> fee breakdown and profit rollup.
    """

    output = compute(body.to_buckets())
    logger.debug(
        "Calculator computed net=%s margin_pct=%s confidence=%s",
        output.rollup.net,
        output.rollup.margin_pct,
        output.rollup.confidence,
    )
    return CalculatorResponse.model_validate(output.to_dict())


@router.post("/simple", response_model=SimpleCalculatorResponse)
def compute_simple_fees(body: SimpleCalculatorRequest) -> SimpleCalculatorResponse:
    """
    Single-item calculator with whole-number percentage rates.
    """

    result = compute_simple(body.to_inputs())
    return SimpleCalculatorResponse.model_validate(result.to_dict())
