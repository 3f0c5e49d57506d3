"""
fees/models.py

Input buckets and output value objects for the fee/profit engine.

Percent convention
------------------
Every ``*_pct`` field in this module is a decimal fraction
(``0.13`` means 13 %).  Only the simple calculator in :mod:`fees.simple`
accepts whole-number percentages, and it converts them at its boundary.

Every field has a zero (or ``False``) default so a partially filled
scenario is always a valid input.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Literal, Mapping

Confidence = Literal["low", "medium", "high"]


# ---------------------------------------------------------------------------
# Input buckets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SaleAmounts:
    """What the buyer paid, before seller-funded discounts."""

    item_price: float = 0.0
    quantity: float = 1.0
    shipping_charged_to_buyer: float = 0.0
    seller_coupon_discount: float = 0.0
    order_level_discount: float = 0.0
    combined_order_discount: float = 0.0
    gift_card_or_store_credit_applied: float = 0.0
    tip: float = 0.0


@dataclass(frozen=True)
class ShippingCosts:
    postage_label_cost: float = 0.0
    label_surcharges: float = 0.0
    insurance: float = 0.0
    signature_or_confirmation: float = 0.0
    packaging_materials: float = 0.0
    return_shipping_paid_by_seller: float = 0.0
    off_platform_label_cost: float = 0.0


@dataclass(frozen=True)
class CostOfGoods:
    """``item_acquisition_cost`` covers all units; the allocation is per unit."""

    item_acquisition_cost: float = 0.0
    prep_or_refurb_cost: float = 0.0
    inbound_freight_to_you: float = 0.0
    per_unit_overhead_allocation: float = 0.0


@dataclass(frozen=True)
class SellerFees:
    """A positive ``category_fee_override_pct`` replaces the category rate."""

    category_final_value_fee_pct: float = 0.0
    category_fee_override_pct: float = 0.0
    misc_pct_of_gross: float = 0.0
    per_order_fixed_fee: float = 0.0
    is_store_subscriber: bool = False
    fee_cap_amount: float = 0.0
    top_rated_seller_discount_pct: float = 0.0
    top_rated_plus_discount_pct: float = 0.0
    below_standard_surcharge_pct: float = 0.0
    very_high_inad_surcharge_pct: float = 0.0
    listing_upgrades_total: float = 0.0
    insertion_fee_after_free: float = 0.0
    vehicle_or_classified_fee: float = 0.0


@dataclass(frozen=True)
class AdvertisingFees:
    """Share fields are expected-value weights in ``0..1``, not flags."""

    promoted_standard_pct: float = 0.0
    promoted_standard_share_pct: float = 0.0
    promoted_advanced_spend: float = 0.0
    promoted_advanced_share_pct: float = 0.0
    off_platform_ads_attribution: float = 0.0


@dataclass(frozen=True)
class PaymentProcessing:
    processor_pct: float = 0.0
    processor_fixed: float = 0.0
    dispute_or_chargeback_fee: float = 0.0
    payout_hold_reserve: float = 0.0


@dataclass(frozen=True)
class CrossBorderCurrency:
    international_txn_fee: float = 0.0
    currency_conversion_pct: float = 0.0
    cross_border_handling: float = 0.0
    international_fee_pct: float = 0.0


@dataclass(frozen=True)
class Taxes:
    buyer_tax_collected: float = 0.0
    is_buyer_tax_pass_through: bool = False
    tax_included_in_processor_base: bool = False
    vat_on_seller_fees: float = 0.0


@dataclass(frozen=True)
class RefundsReturns:
    """
    Realised amounts plus the shape of an expected return.

    The ``expected_*`` fields are weighted by
    ``AttributionKnobs.pct_with_returns_or_refunds``.
    """

    full_refund_amount: float = 0.0
    partial_refund_amount: float = 0.0
    restocking_deduction: float = 0.0
    return_label_cost: float = 0.0
    fee_credits: float = 0.0
    non_refundable_fees: float = 0.0
    expected_refund_pct: float = 0.0
    expected_restocking_pct: float = 0.0
    expected_return_label_cost: float = 0.0


@dataclass(frozen=True)
class AdjustmentsDisputes:
    inr_or_snad_refunds: float = 0.0
    payment_disputes_against_seller: float = 0.0
    goodwill_credits: float = 0.0
    account_adjustments: float = 0.0
    appeal_reversals: float = 0.0
    dispute_rate_pct: float = 0.0
    expected_dispute_loss: float = 0.0


@dataclass(frozen=True)
class InternationalPrograms:
    international_shipping_withheld: float = 0.0
    international_return_handling: float = 0.0
    duties_and_import_taxes_pass_through: float = 0.0


@dataclass(frozen=True)
class PayoutTiming:
    """Timing-only figures; they never change net profit."""

    funds_pending: float = 0.0
    funds_in_transit: float = 0.0
    payout_schedule_days: float = 7.0
    cutoff_mismatch_amount: float = 0.0
    held_reserves_change: float = 0.0


@dataclass(frozen=True)
class StoreOverhead:
    store_subscription_monthly_fee: float = 0.0
    free_listings_allotment_value: float = 0.0
    quarterly_credits: float = 0.0
    third_party_tools_monthly: float = 0.0
    misc_fixed_cost_per_order: float = 0.0


@dataclass(frozen=True)
class GoalTracking:
    weekly_net_target: float = 0.0
    monthly_net_target: float = 0.0
    rolling_baseline_days: float = 30.0


@dataclass(frozen=True)
class AttributionKnobs:
    pct_with_promoted_standard: float = 0.0
    pct_with_promoted_advanced: float = 0.0
    pct_with_coupons_or_markdowns: float = 0.0
    pct_with_free_shipping: float = 0.0
    pct_cross_border: float = 0.0
    pct_with_returns_or_refunds: float = 0.0


@dataclass(frozen=True)
class CalcInputBuckets:
    """
    Complete input for one order or scenario.

    Owned by the caller; :func:`fees.engine.compute` never mutates it.
    """

    sale: SaleAmounts = field(default_factory=SaleAmounts)
    shipping: ShippingCosts = field(default_factory=ShippingCosts)
    cogs: CostOfGoods = field(default_factory=CostOfGoods)
    seller_fees: SellerFees = field(default_factory=SellerFees)
    ads: AdvertisingFees = field(default_factory=AdvertisingFees)
    payments: PaymentProcessing = field(default_factory=PaymentProcessing)
    xborder: CrossBorderCurrency = field(default_factory=CrossBorderCurrency)
    taxes: Taxes = field(default_factory=Taxes)
    refunds: RefundsReturns = field(default_factory=RefundsReturns)
    adjustments: AdjustmentsDisputes = field(default_factory=AdjustmentsDisputes)
    intl_programs: InternationalPrograms = field(default_factory=InternationalPrograms)
    payout_timing: PayoutTiming = field(default_factory=PayoutTiming)
    store_overhead: StoreOverhead = field(default_factory=StoreOverhead)
    goals: GoalTracking = field(default_factory=GoalTracking)
    attribution: AttributionKnobs = field(default_factory=AttributionKnobs)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None) -> "CalcInputBuckets":
        """
        Build buckets from nested plain mappings, ignoring unknown keys.

        Missing buckets and missing fields keep their defaults; values are
        not coerced here, the engine sanitises them on use.
        """
        payload = payload or {}
        buckets: dict[str, Any] = {}
        for bucket_field in fields(cls):
            bucket_type = _BUCKET_TYPES[bucket_field.name]
            raw = payload.get(bucket_field.name)
            if not isinstance(raw, Mapping):
                continue
            known = {item.name for item in fields(bucket_type)}
            buckets[bucket_field.name] = bucket_type(
                **{key: value for key, value in raw.items() if key in known}
            )
        return cls(**buckets)


_BUCKET_TYPES: dict[str, type] = {
    "sale": SaleAmounts,
    "shipping": ShippingCosts,
    "cogs": CostOfGoods,
    "seller_fees": SellerFees,
    "ads": AdvertisingFees,
    "payments": PaymentProcessing,
    "xborder": CrossBorderCurrency,
    "taxes": Taxes,
    "refunds": RefundsReturns,
    "adjustments": AdjustmentsDisputes,
    "intl_programs": InternationalPrograms,
    "payout_timing": PayoutTiming,
    "store_overhead": StoreOverhead,
    "goals": GoalTracking,
    "attribution": AttributionKnobs,
}


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FeeBreakdown:
    final_value_fee: float
    per_order_fixed_fee: float
    surcharges: float
    listing_upgrades: float
    insertion_fee: float
    vehicle_or_classified_fee: float
    ad_fees_standard: float
    ad_fees_advanced: float
    ad_fees_offsite: float
    payment_processing: float
    cross_border_fees: float
    vat_on_fees: float
    misc_pct_fee: float = 0.0
    international_pct_fee: float = 0.0


@dataclass(frozen=True)
class Rollup:
    gross: float
    shipping_revenue: float
    discounts_total: float
    net_of_discounts: float
    fees_total: float
    shipping_cost_total: float
    cogs_total: float
    refunds_total: float
    adjustments_total: float
    international_programs_total: float
    overhead_total: float
    net: float
    margin_pct: float
    confidence: Confidence
    weekly_target_progress_pct: float = 0.0
    monthly_target_progress_pct: float = 0.0
    expected_return_loss: float = 0.0
    expected_dispute_loss: float = 0.0


@dataclass(frozen=True)
class CalcOutput:
    fees: FeeBreakdown
    rollup: Rollup

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
