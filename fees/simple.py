"""
fees/simple.py

Single-item calculator used by the manual entry flow and by per-order
rollups of mapped CSV rows.

Inputs use whole-number percentages (``13.25`` means 13.25 %).  They are
converted to the decimal convention of :mod:`fees.models` here and the
resulting buckets go through :func:`fees.engine.compute`, so rounding and
sign conventions are identical to the full model.

Returns and disputes are expected values: a 10 % return rate with a 50 %
average refund costs ``0.1 * 0.5 * gross`` on every order.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from fees.engine import compute, order_quantity
from fees.models import (
    AdjustmentsDisputes,
    AdvertisingFees,
    AttributionKnobs,
    CalcInputBuckets,
    CostOfGoods,
    CrossBorderCurrency,
    PaymentProcessing,
    RefundsReturns,
    SaleAmounts,
    SellerFees,
    ShippingCosts,
    StoreOverhead,
)
from fees.numbers import as_flag, as_number, clamp, round_money


@dataclass(frozen=True)
class SimpleCalcInputs:
    price: float = 0.0
    quantity: float = 1.0
    cogs: float = 0.0
    """Cost of goods per unit."""
    buyer_pays_shipping: bool = True
    shipping_charge_to_buyer: float = 0.0
    handling_fee_to_buyer: float = 0.0
    your_shipping_cost: float = 0.0
    packaging_cost_per_order: float = 0.0
    insurance_cost: float = 0.0
    misc_fixed_cost_per_order: float = 0.0
    final_value_fee_rate: float = 0.0
    category_fee_override_rate: float = 0.0
    promoted_listings_rate: float = 0.0
    promo_share: float = 0.0
    payment_processing_rate: float = 0.0
    payment_fixed_fee: float = 0.0
    misc_percent_of_gross: float = 0.0
    intl_fee_percent: float = 0.0
    return_rate_percent: float = 0.0
    avg_refund_percent: float = 0.0
    restocking_fee_percent: float = 0.0
    label_cost_on_returns: float = 0.0
    dispute_rate_percent: float = 0.0
    avg_dispute_loss: float = 0.0


@dataclass(frozen=True)
class SimpleCalcResult:
    qty: int
    gross: float
    final_value_fee: float
    processing_fee: float
    promo_fee: float
    total_cogs: float
    total_ship_cost: float
    per_order_fixed: float
    fees: float
    net: float
    margin_pct: float
    shipping_revenue: float = 0.0
    misc_pct_fee: float = 0.0
    intl_pct_fee: float = 0.0
    dispute_ev: float = 0.0
    expected_return_loss: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def to_buckets(inputs: SimpleCalcInputs) -> CalcInputBuckets:
    """
    Express the simple inputs as a reduced configuration of the full model.
    """
    qty = order_quantity(inputs.quantity)
    shipping_revenue = 0.0
    if as_flag(inputs.buyer_pays_shipping):
        shipping_revenue = as_number(inputs.shipping_charge_to_buyer) + as_number(
            inputs.handling_fee_to_buyer
        )
    return CalcInputBuckets(
        sale=SaleAmounts(
            item_price=as_number(inputs.price),
            quantity=qty,
            shipping_charged_to_buyer=shipping_revenue,
        ),
        shipping=ShippingCosts(
            postage_label_cost=as_number(inputs.your_shipping_cost),
            packaging_materials=as_number(inputs.packaging_cost_per_order),
            insurance=as_number(inputs.insurance_cost),
        ),
        cogs=CostOfGoods(item_acquisition_cost=as_number(inputs.cogs) * qty),
        seller_fees=SellerFees(
            category_final_value_fee_pct=_pct(inputs.final_value_fee_rate),
            category_fee_override_pct=_pct(inputs.category_fee_override_rate),
            misc_pct_of_gross=_pct(inputs.misc_percent_of_gross),
        ),
        ads=AdvertisingFees(
            promoted_standard_pct=_pct(inputs.promoted_listings_rate),
            promoted_standard_share_pct=clamp(_pct(inputs.promo_share)),
        ),
        payments=PaymentProcessing(
            processor_pct=_pct(inputs.payment_processing_rate),
            processor_fixed=as_number(inputs.payment_fixed_fee),
        ),
        xborder=CrossBorderCurrency(
            international_fee_pct=_pct(inputs.intl_fee_percent),
        ),
        refunds=RefundsReturns(
            expected_refund_pct=_pct(inputs.avg_refund_percent),
            expected_restocking_pct=_pct(inputs.restocking_fee_percent),
            expected_return_label_cost=as_number(inputs.label_cost_on_returns),
        ),
        adjustments=AdjustmentsDisputes(
            dispute_rate_pct=_pct(inputs.dispute_rate_percent),
            expected_dispute_loss=as_number(inputs.avg_dispute_loss),
        ),
        store_overhead=StoreOverhead(
            misc_fixed_cost_per_order=as_number(inputs.misc_fixed_cost_per_order),
        ),
        attribution=AttributionKnobs(
            pct_with_returns_or_refunds=_pct(inputs.return_rate_percent),
        ),
    )


def compute_simple(inputs: SimpleCalcInputs) -> SimpleCalcResult:
    buckets = to_buckets(inputs)
    output = compute(buckets)
    per_order_fixed = (
        buckets.shipping.packaging_materials
        + buckets.shipping.insurance
        + buckets.store_overhead.misc_fixed_cost_per_order
    )
    return SimpleCalcResult(
        qty=order_quantity(inputs.quantity),
        gross=output.rollup.gross,
        final_value_fee=output.fees.final_value_fee,
        processing_fee=output.fees.payment_processing,
        promo_fee=output.fees.ad_fees_standard,
        total_cogs=output.rollup.cogs_total,
        total_ship_cost=round_money(buckets.shipping.postage_label_cost),
        per_order_fixed=round_money(per_order_fixed),
        fees=output.rollup.fees_total,
        net=output.rollup.net,
        margin_pct=output.rollup.margin_pct,
        shipping_revenue=output.rollup.shipping_revenue,
        misc_pct_fee=output.fees.misc_pct_fee,
        intl_pct_fee=output.fees.international_pct_fee,
        dispute_ev=output.rollup.expected_dispute_loss,
        expected_return_loss=output.rollup.expected_return_loss,
    )


def _pct(value: Any) -> float:
    return as_number(value) / 100
