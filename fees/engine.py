"""
fees/engine.py

Deterministic fee and profit calculation over :class:`CalcInputBuckets`.

Order of evaluation
-------------------
qty               = max(1, floor(sale.quantity))
gross             = item_price * qty + shipping charged + tip + buyer tax
                    (tax only when it is not a pass-through)
net_of_discounts  = gross - seller-funded discounts
final_value_fee   = fee_base * fvf_pct * (1 - trs_pct - trs_plus_pct),
                    capped at fee_cap_amount when the cap is positive
surcharges        = fee_base * (below_standard_pct + very_high_inad_pct)
ad fees           = fee_base * standard_pct * standard_share
                    + advanced_spend * advanced_share + off-platform ads
payment processing= processor_base * processor_pct + fixed + dispute fee
cross border      = txn fee + fee_base * conversion_pct + handling
percent fees      = fee_base * (misc_pct_of_gross + international_fee_pct)
fees_total        = all of the above + VAT on fees + listing upgrades
                    + insertion + vehicle/classified + per-order fixed fee
expected returns  = return_rate * (fee_base * refund_pct
                    - fee_base * restocking_pct + return label)
expected disputes = dispute_rate * expected_dispute_loss
net               = net_of_discounts - fees_total - shipping cost - COGS
                    - refunds - adjustments - store overhead
margin_pct        = net / gross * 100   (0 when gross <= 0)

``fee_base`` is ``net_of_discounts`` floored at zero, so over-discounted
orders never produce negative percentage fees.

Expected returns are part of ``refunds_total`` and expected disputes part of
``adjustments_total``.  International programs are reported on the
rollup and are not part of ``net``.

Every input is sanitised on read (non-finite -> 0, non-bool -> False) and
rounding happens once, when the output objects are built.
"""

from __future__ import annotations

import math

from fees.models import (
    CalcInputBuckets,
    CalcOutput,
    Confidence,
    FeeBreakdown,
    Rollup,
    SellerFees,
)
from fees.numbers import as_flag, as_number, clamp, round_money


def compute(inputs: CalcInputBuckets) -> CalcOutput:
    """
    Compute the fee breakdown and profit rollup for one order or scenario.

    Never raises for any field values; a partially populated scenario is
    treated as zeros for everything that is missing.
    """
    sale = inputs.sale
    seller_fees = inputs.seller_fees
    ads = inputs.ads
    payments = inputs.payments
    xborder = inputs.xborder
    taxes = inputs.taxes

    qty = order_quantity(sale.quantity)
    item_revenue = as_number(sale.item_price) * qty
    shipping_revenue = as_number(sale.shipping_charged_to_buyer)
    tip = as_number(sale.tip)

    discounts_total = (
        as_number(sale.seller_coupon_discount)
        + as_number(sale.order_level_discount)
        + as_number(sale.combined_order_discount)
        + as_number(sale.gift_card_or_store_credit_applied)
    )

    buyer_tax = as_number(taxes.buyer_tax_collected)
    tax_pass_through = as_flag(taxes.is_buyer_tax_pass_through)
    revenue_tax = 0.0 if tax_pass_through else buyer_tax

    gross = item_revenue + shipping_revenue + tip + revenue_tax
    net_of_discounts = gross - discounts_total
    fee_base = max(0.0, net_of_discounts)

    fee_rate = _final_value_fee_rate(seller_fees)
    final_value_fee = _final_value_fee(
        fee_base=fee_base,
        rate=fee_rate,
        trs_discount=as_number(seller_fees.top_rated_seller_discount_pct),
        trs_plus_discount=as_number(seller_fees.top_rated_plus_discount_pct),
        cap=as_number(seller_fees.fee_cap_amount),
    )
    surcharges = fee_base * (
        as_number(seller_fees.below_standard_surcharge_pct)
        + as_number(seller_fees.very_high_inad_surcharge_pct)
    )

    ad_fees_standard = (
        fee_base
        * as_number(ads.promoted_standard_pct)
        * as_number(ads.promoted_standard_share_pct)
    )
    ad_fees_advanced = as_number(ads.promoted_advanced_spend) * as_number(
        ads.promoted_advanced_share_pct
    )
    ad_fees_offsite = as_number(ads.off_platform_ads_attribution)

    processor_base = fee_base
    if tax_pass_through and as_flag(taxes.tax_included_in_processor_base):
        processor_base += buyer_tax
    payment_processing = (
        processor_base * as_number(payments.processor_pct)
        + as_number(payments.processor_fixed)
        + as_number(payments.dispute_or_chargeback_fee)
    )

    cross_border_fees = (
        as_number(xborder.international_txn_fee)
        + fee_base * as_number(xborder.currency_conversion_pct)
        + as_number(xborder.cross_border_handling)
    )
    misc_pct_fee = fee_base * as_number(seller_fees.misc_pct_of_gross)
    international_pct_fee = fee_base * as_number(xborder.international_fee_pct)

    per_order_fixed_fee = as_number(seller_fees.per_order_fixed_fee)
    listing_upgrades = as_number(seller_fees.listing_upgrades_total)
    insertion_fee = as_number(seller_fees.insertion_fee_after_free)
    vehicle_fee = as_number(seller_fees.vehicle_or_classified_fee)
    vat_on_fees = as_number(taxes.vat_on_seller_fees)

    fees_total = (
        final_value_fee
        + surcharges
        + ad_fees_standard
        + ad_fees_advanced
        + ad_fees_offsite
        + payment_processing
        + cross_border_fees
        + misc_pct_fee
        + international_pct_fee
        + vat_on_fees
        + listing_upgrades
        + insertion_fee
        + vehicle_fee
        + per_order_fixed_fee
    )

    shipping_cost_total = shipping_cost(inputs)
    cogs_total = _cogs_total(inputs, qty)
    expected_return_loss = _expected_return_loss(inputs, fee_base)
    expected_dispute_loss = _expected_dispute_loss(inputs)
    refunds_total = _refunds_total(inputs) + expected_return_loss
    adjustments_total = _adjustments_total(inputs) + expected_dispute_loss
    international_programs_total = _international_programs_total(inputs)
    overhead_total = _overhead_total(inputs)

    net = (
        net_of_discounts
        - fees_total
        - shipping_cost_total
        - cogs_total
        - refunds_total
        - adjustments_total
        - overhead_total
    )

    fees = FeeBreakdown(
        final_value_fee=round_money(final_value_fee),
        per_order_fixed_fee=round_money(per_order_fixed_fee),
        surcharges=round_money(surcharges),
        listing_upgrades=round_money(listing_upgrades),
        insertion_fee=round_money(insertion_fee),
        vehicle_or_classified_fee=round_money(vehicle_fee),
        ad_fees_standard=round_money(ad_fees_standard),
        ad_fees_advanced=round_money(ad_fees_advanced),
        ad_fees_offsite=round_money(ad_fees_offsite),
        payment_processing=round_money(payment_processing),
        cross_border_fees=round_money(cross_border_fees),
        vat_on_fees=round_money(vat_on_fees),
        misc_pct_fee=round_money(misc_pct_fee),
        international_pct_fee=round_money(international_pct_fee),
    )
    rollup = Rollup(
        gross=round_money(gross),
        shipping_revenue=round_money(shipping_revenue),
        discounts_total=round_money(discounts_total),
        net_of_discounts=round_money(net_of_discounts),
        fees_total=round_money(fees_total),
        shipping_cost_total=round_money(shipping_cost_total),
        cogs_total=round_money(cogs_total),
        refunds_total=round_money(refunds_total),
        adjustments_total=round_money(adjustments_total),
        international_programs_total=round_money(international_programs_total),
        overhead_total=round_money(overhead_total),
        net=round_money(net),
        margin_pct=round_money(_margin_pct(net, gross)),
        confidence=_confidence(
            item_price=as_number(sale.item_price),
            fee_rate=fee_rate,
            cogs_total=cogs_total,
            shipping_cost_total=shipping_cost_total,
        ),
        weekly_target_progress_pct=round_money(
            _target_progress(net, as_number(inputs.goals.weekly_net_target))
        ),
        monthly_target_progress_pct=round_money(
            _target_progress(net, as_number(inputs.goals.monthly_net_target))
        ),
        expected_return_loss=round_money(expected_return_loss),
        expected_dispute_loss=round_money(expected_dispute_loss),
    )
    return CalcOutput(fees=fees, rollup=rollup)


def order_quantity(quantity: object) -> int:
    """Units on the order: whole units, never fewer than one."""
    return max(1, math.floor(as_number(quantity)))


def shipping_cost(inputs: CalcInputBuckets) -> float:
    """Unrounded sum of every shipping cost the seller pays."""
    shipping = inputs.shipping
    return (
        as_number(shipping.postage_label_cost)
        + as_number(shipping.label_surcharges)
        + as_number(shipping.insurance)
        + as_number(shipping.signature_or_confirmation)
        + as_number(shipping.packaging_materials)
        + as_number(shipping.return_shipping_paid_by_seller)
        + as_number(shipping.off_platform_label_cost)
    )


def average_selling_price(total_revenue: float, total_units: float) -> float:
    """
    ASP = total_revenue / total_units.

    Returns 0 when units are not positive or either value is not finite.
    """
    revenue = as_number(total_revenue)
    units = as_number(total_units)
    if units <= 0:
        return 0.0
    return round_money(revenue / units)


def sell_through_rate(units_sold: float, units_listed: float) -> float:
    """
    Sell-through rate as a percentage: units_sold / units_listed * 100.

    Returns 0 when nothing was listed or either value is not finite.
    """
    sold = as_number(units_sold)
    listed = as_number(units_listed)
    if listed <= 0:
        return 0.0
    return round_money(sold / listed * 100)


# ---------------------------------------------------------------------------
# Pure formula functions
# ---------------------------------------------------------------------------


def _final_value_fee_rate(seller_fees: SellerFees) -> float:
    override = as_number(seller_fees.category_fee_override_pct)
    if override > 0:
        return override
    return as_number(seller_fees.category_final_value_fee_pct)


def _final_value_fee(
    *,
    fee_base: float,
    rate: float,
    trs_discount: float,
    trs_plus_discount: float,
    cap: float,
) -> float:
    """
    FVF after top-rated discounts, bounded above by a positive cap.
    """
    discount_multiplier = clamp(1.0 - trs_discount - trs_plus_discount)
    fee = fee_base * rate * discount_multiplier
    if cap > 0:
        return min(fee, cap)
    return fee


def _cogs_total(inputs: CalcInputBuckets, qty: int) -> float:
    cogs = inputs.cogs
    return (
        as_number(cogs.item_acquisition_cost)
        + as_number(cogs.prep_or_refurb_cost)
        + as_number(cogs.inbound_freight_to_you)
        + as_number(cogs.per_unit_overhead_allocation) * qty
    )


def _refunds_total(inputs: CalcInputBuckets) -> float:
    refunds = inputs.refunds
    return (
        as_number(refunds.full_refund_amount)
        + as_number(refunds.partial_refund_amount)
        + as_number(refunds.return_label_cost)
        + as_number(refunds.non_refundable_fees)
        - as_number(refunds.restocking_deduction)
        - as_number(refunds.fee_credits)
    )


def _adjustments_total(inputs: CalcInputBuckets) -> float:
    adjustments = inputs.adjustments
    return (
        as_number(adjustments.inr_or_snad_refunds)
        + as_number(adjustments.payment_disputes_against_seller)
        + as_number(adjustments.goodwill_credits)
        + as_number(adjustments.account_adjustments)
        - as_number(adjustments.appeal_reversals)
    )


def _expected_return_loss(inputs: CalcInputBuckets, fee_base: float) -> float:
    """
    Expected cost of a return, weighted by the share of orders that come back.

    Restocking fees the seller keeps offset the refunded amount.
    """
    refunds = inputs.refunds
    return_rate = clamp(as_number(inputs.attribution.pct_with_returns_or_refunds))
    refund_pct = clamp(as_number(refunds.expected_refund_pct))
    restocking_pct = clamp(as_number(refunds.expected_restocking_pct))
    return return_rate * (
        fee_base * refund_pct
        - fee_base * restocking_pct
        + as_number(refunds.expected_return_label_cost)
    )


def _expected_dispute_loss(inputs: CalcInputBuckets) -> float:
    adjustments = inputs.adjustments
    return clamp(as_number(adjustments.dispute_rate_pct)) * as_number(
        adjustments.expected_dispute_loss
    )


def _international_programs_total(inputs: CalcInputBuckets) -> float:
    programs = inputs.intl_programs
    return (
        as_number(programs.international_shipping_withheld)
        + as_number(programs.international_return_handling)
        + as_number(programs.duties_and_import_taxes_pass_through)
    )


def _overhead_total(inputs: CalcInputBuckets) -> float:
    overhead = inputs.store_overhead
    return (
        as_number(overhead.store_subscription_monthly_fee)
        + as_number(overhead.third_party_tools_monthly)
        + as_number(overhead.misc_fixed_cost_per_order)
        - as_number(overhead.quarterly_credits)
    )


def _margin_pct(net: float, gross: float) -> float:
    if gross <= 0:
        return 0.0
    return net / gross * 100


def _target_progress(net: float, target: float) -> float:
    if target <= 0:
        return 0.0
    return net / target * 100


def _confidence(
    *,
    item_price: float,
    fee_rate: float,
    cogs_total: float,
    shipping_cost_total: float,
) -> Confidence:
    """
    high   = price, fee rate, COGS and a shipping cost are all known
    medium = price and fee rate are known
    low    = anything less
    """
    if item_price <= 0 or fee_rate <= 0:
        return "low"
    if cogs_total > 0 and shipping_cost_total > 0:
        return "high"
    return "medium"
