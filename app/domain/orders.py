"""
app/domain/orders.py

Domain models for mapped order rows and their per-day rollups.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any


@dataclass(frozen=True)
class OrderRecord:
    """
    One order row after header mapping.

    ``fee_rate`` is a whole-number percentage; ``cogs`` is per unit.
    ``order_date`` is ``None`` when the row has no usable date.
    """

    item_price: float = 0.0
    shipping_charged: float = 0.0
    shipping_cost: float = 0.0
    cogs: float = 0.0
    fee_rate: float = 0.0
    quantity: int = 1
    order_date: date | None = None


@dataclass(frozen=True)
class DailyOrderRollup:
    """
    Aggregated money figures for every order that shares a date.
    """

    date: date
    orders: int
    units: int
    gross: float
    fees: float
    net: float
    asp: float

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["date"] = self.date.isoformat()
        return payload
