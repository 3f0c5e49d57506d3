"""
app/schemas/calculator.py

Request/response schemas for the fee/profit calculator endpoints.

Bucket fields reuse the frozen dataclasses from :mod:`fees.models`, so the
HTTP contract cannot drift from the engine's input model.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from fees.models import (
    AdjustmentsDisputes,
    AdvertisingFees,
    AttributionKnobs,
    CalcInputBuckets,
    Confidence,
    CostOfGoods,
    CrossBorderCurrency,
    GoalTracking,
    InternationalPrograms,
    PaymentProcessing,
    PayoutTiming,
    RefundsReturns,
    SaleAmounts,
    SellerFees,
    ShippingCosts,
    StoreOverhead,
    Taxes,
)
from fees.simple import SimpleCalcInputs


class CalculatorRequest(BaseModel):
    """
    Full bucket model; every bucket and every field is optional.

    Percent fields are decimals (0.13 means 13 %).
    """

    model_config = ConfigDict(extra="ignore")

    sale: SaleAmounts = Field(default_factory=SaleAmounts)
    shipping: ShippingCosts = Field(default_factory=ShippingCosts)
    cogs: CostOfGoods = Field(default_factory=CostOfGoods)
    seller_fees: SellerFees = Field(default_factory=SellerFees)
    ads: AdvertisingFees = Field(default_factory=AdvertisingFees)
    payments: PaymentProcessing = Field(default_factory=PaymentProcessing)
    xborder: CrossBorderCurrency = Field(default_factory=CrossBorderCurrency)
    taxes: Taxes = Field(default_factory=Taxes)
    refunds: RefundsReturns = Field(default_factory=RefundsReturns)
    adjustments: AdjustmentsDisputes = Field(default_factory=AdjustmentsDisputes)
    intl_programs: InternationalPrograms = Field(default_factory=InternationalPrograms)
    payout_timing: PayoutTiming = Field(default_factory=PayoutTiming)
    store_overhead: StoreOverhead = Field(default_factory=StoreOverhead)
    goals: GoalTracking = Field(default_factory=GoalTracking)
    attribution: AttributionKnobs = Field(default_factory=AttributionKnobs)

    def to_buckets(self) -> CalcInputBuckets:
        return CalcInputBuckets(
            sale=self.sale,
            shipping=self.shipping,
            cogs=self.cogs,
            seller_fees=self.seller_fees,
            ads=self.ads,
            payments=self.payments,
            xborder=self.xborder,
            taxes=self.taxes,
            refunds=self.refunds,
            adjustments=self.adjustments,
            intl_programs=self.intl_programs,
            payout_timing=self.payout_timing,
            store_overhead=self.store_overhead,
            goals=self.goals,
            attribution=self.attribution,
        )


class FeeBreakdownResponse(BaseModel):
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


class RollupResponse(BaseModel):
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


class CalculatorResponse(BaseModel):
    fees: FeeBreakdownResponse
    rollup: RollupResponse


class SimpleCalculatorRequest(BaseModel):
    """
    Single-item inputs; rates are whole-number percentages (13.25 = 13.25 %).
    """

    model_config = ConfigDict(extra="ignore")

    price: float = 0.0
    quantity: float = 1.0
    cogs: float = Field(default=0.0, description="Cost of goods per unit")
    buyer_pays_shipping: bool = True
    shipping_charge_to_buyer: float = 0.0
    handling_fee_to_buyer: float = 0.0
    your_shipping_cost: float = 0.0
    packaging_cost_per_order: float = 0.0
    insurance_cost: float = 0.0
    misc_fixed_cost_per_order: float = 0.0
    final_value_fee_rate: float = 0.0
    category_fee_override_rate: float = Field(
        default=0.0, description="Replaces final_value_fee_rate when positive"
    )
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

    def to_inputs(self) -> SimpleCalcInputs:
        return SimpleCalcInputs(**self.model_dump())


class SimpleCalculatorResponse(BaseModel):
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
