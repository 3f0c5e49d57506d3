"""
app/services/order_rollup_service.py

Per-day money rollups over mapped order rows.

Every order goes through the simple calculator, so the daily figures use
exactly the same fee and rounding rules as a single manual calculation.
Orders without a usable date are grouped under ``default_date`` (today
unless the caller supplies one).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from app.domain.orders import DailyOrderRollup, OrderRecord
from fees.engine import average_selling_price
from fees.numbers import round_money
from fees.simple import SimpleCalcInputs, compute_simple

logger = logging.getLogger(__name__)


@dataclass
class _DayTotals:
    orders: int = 0
    units: int = 0
    item_revenue: float = 0.0
    gross: float = 0.0
    fees: float = 0.0
    net: float = 0.0


def to_simple_inputs(order: OrderRecord) -> SimpleCalcInputs:
    return SimpleCalcInputs(
        price=order.item_price,
        quantity=order.quantity,
        cogs=order.cogs,
        shipping_charge_to_buyer=order.shipping_charged,
        your_shipping_cost=order.shipping_cost,
        final_value_fee_rate=order.fee_rate,
    )


def compute_daily_rollups(
    orders: Iterable[OrderRecord],
    *,
    default_date: date | None = None,
) -> list[DailyOrderRollup]:
    """
    Group orders by date and sum gross, fees and net; sorted by date.

    ``asp`` is item revenue per unit sold on that day.
    """

    fallback = default_date or date.today()
    days: dict[date, _DayTotals] = {}
    undated = 0

    for order in orders:
        day = order.order_date
        if day is None:
            undated += 1
            day = fallback
        result = compute_simple(to_simple_inputs(order))
        totals = days.setdefault(day, _DayTotals())
        totals.orders += 1
        totals.units += result.qty
        totals.item_revenue += order.item_price * result.qty
        totals.gross += result.gross
        totals.fees += result.fees
        totals.net += result.net

    if undated:
        logger.info("Grouped %d undated orders under %s", undated, fallback.isoformat())

    return [
        DailyOrderRollup(
            date=day,
            orders=totals.orders,
            units=totals.units,
            gross=round_money(totals.gross),
            fees=round_money(totals.fees),
            net=round_money(totals.net),
            asp=average_selling_price(totals.item_revenue, totals.units),
        )
        for day, totals in sorted(days.items())
    ]
