"""
tests/test_fee_engine.py

Pytest unit tests for the fee/profit engine and its numeric helpers.

Coverage
--------
- Zero scenario and non-finite inputs
- Final value fee: rate, top-rated discounts, cap
- Tax pass-through and the processor base
- Refunds, adjustments, international programs, store overhead
- Expected-value returns and disputes, optional percentage fees
- Confidence and goal progress
- Rounding helper
"""

from __future__ import annotations

import math

import pytest

from fees.engine import (
    average_selling_price,
    compute,
    order_quantity,
    sell_through_rate,
    shipping_cost,
)
from fees.models import (
    AdjustmentsDisputes,
    AdvertisingFees,
    AttributionKnobs,
    CalcInputBuckets,
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
from fees.numbers import as_flag, as_number, round_money


def _order(price: float = 100.0, **buckets: object) -> CalcInputBuckets:
    sale = buckets.pop("sale", SaleAmounts(item_price=price))
    return CalcInputBuckets(sale=sale, **buckets)


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------


class TestNumbers:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (2.675, 2.68),
            (-2.675, -2.68),
            (0.125, 0.13),
            (-0.125, -0.13),
            (10.0, 10.0),
            (1e-9, 0.0),
            (-0.001, 0.0),
            (math.nan, 0.0),
            (math.inf, 0.0),
        ],
    )
    def test_round_money(self, value: float, expected: float) -> None:
        assert round_money(value) == expected

    def test_round_money_never_returns_negative_zero(self) -> None:
        assert math.copysign(1.0, round_money(-0.001)) == 1.0

    @pytest.mark.parametrize("value", [None, "12", True, math.nan, -math.inf, [1]])
    def test_as_number_sanitises(self, value: object) -> None:
        assert as_number(value) == 0.0

    def test_as_number_keeps_finite_numbers(self) -> None:
        assert as_number(3) == 3.0
        assert as_number(-1.5) == -1.5

    @pytest.mark.parametrize(("value", "expected"), [(True, True), (False, False), (None, False), (1, False), ("true", False)])
    def test_as_flag(self, value: object, expected: bool) -> None:
        assert as_flag(value) is expected


class TestHelpers:
    @pytest.mark.parametrize(("quantity", "expected"), [(1, 1), (2.9, 2), (0, 1), (-3, 1), ("x", 1), (math.nan, 1)])
    def test_order_quantity(self, quantity: object, expected: int) -> None:
        assert order_quantity(quantity) == expected

    def test_average_selling_price(self) -> None:
        assert average_selling_price(100, 4) == 25.0
        assert average_selling_price(10, 3) == 3.33
        assert average_selling_price(10, 0) == 0.0
        assert average_selling_price(math.nan, 2) == 0.0

    @pytest.mark.parametrize(
        ("sold", "listed", "expected"),
        [(3, 4, 75.0), (1, 3, 33.33), (5, 0, 0.0), (math.inf, 4, 0.0), (2, -1, 0.0)],
    )
    def test_sell_through_rate(self, sold: float, listed: float, expected: float) -> None:
        assert sell_through_rate(sold, listed) == expected

    def test_shipping_cost_sums_every_component(self) -> None:
        inputs = CalcInputBuckets(
            shipping=ShippingCosts(
                postage_label_cost=4.0,
                label_surcharges=0.5,
                insurance=1.0,
                signature_or_confirmation=2.0,
                packaging_materials=0.75,
                return_shipping_paid_by_seller=3.0,
                off_platform_label_cost=0.25,
            )
        )
        assert shipping_cost(inputs) == pytest.approx(11.5)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class TestZeroAndSanitising:
    def test_all_zero_scenario(self) -> None:
        output = compute(CalcInputBuckets())

        assert output.rollup.gross == 0.0
        assert output.rollup.net == 0.0
        assert output.rollup.margin_pct == 0.0
        assert output.rollup.confidence == "low"
        assert all(value == 0.0 for value in output.to_dict()["fees"].values())

    def test_non_finite_inputs_count_as_zero(self) -> None:
        inputs = CalcInputBuckets(
            sale=SaleAmounts(item_price=math.inf, tip=math.nan),
            seller_fees=SellerFees(category_final_value_fee_pct=math.nan),
        )

        output = compute(inputs)

        assert output.rollup.gross == 0.0
        assert output.fees.final_value_fee == 0.0

    def test_from_dict_ignores_unknown_keys(self) -> None:
        inputs = CalcInputBuckets.from_dict(
            {
                "sale": {"item_price": 50, "bogus": 1},
                "unknown_bucket": {"x": 1},
                "taxes": "not-a-mapping",
            }
        )

        assert inputs.sale.item_price == 50
        assert inputs.taxes == Taxes()
        assert compute(inputs).rollup.gross == 50.0

    def test_payout_timing_does_not_change_net(self) -> None:
        baseline = compute(_order())
        with_timing = compute(
            _order(payout_timing=PayoutTiming(funds_pending=1000, funds_in_transit=50, held_reserves_change=25))
        )

        assert with_timing.rollup == baseline.rollup


class TestFinalValueFee:
    def test_rate_applies_to_fee_base(self) -> None:
        output = compute(_order(seller_fees=SellerFees(category_final_value_fee_pct=0.13)))

        assert output.fees.final_value_fee == 13.0
        assert output.rollup.net == 87.0

    def test_net_decreases_as_rate_rises(self) -> None:
        nets = [
            compute(_order(seller_fees=SellerFees(category_final_value_fee_pct=rate))).rollup.net
            for rate in (0.0, 0.05, 0.1, 0.2)
        ]

        assert nets == sorted(nets, reverse=True)
        assert len(set(nets)) == len(nets)

    def test_cap(self) -> None:
        output = compute(
            _order(1000.0, seller_fees=SellerFees(category_final_value_fee_pct=0.13, fee_cap_amount=50.0))
        )

        assert output.fees.final_value_fee == 50.0

    def test_zero_cap_means_uncapped(self) -> None:
        output = compute(_order(1000.0, seller_fees=SellerFees(category_final_value_fee_pct=0.13)))

        assert output.fees.final_value_fee == 130.0

    def test_top_rated_discounts(self) -> None:
        trs = compute(
            _order(seller_fees=SellerFees(category_final_value_fee_pct=0.10, top_rated_seller_discount_pct=0.10))
        )
        both = compute(
            _order(
                seller_fees=SellerFees(
                    category_final_value_fee_pct=0.10,
                    top_rated_seller_discount_pct=0.10,
                    top_rated_plus_discount_pct=0.05,
                )
            )
        )

        assert trs.fees.final_value_fee == 9.0
        assert both.fees.final_value_fee == 8.5

    def test_over_discounted_order_has_no_percentage_fees(self) -> None:
        output = compute(
            _order(
                sale=SaleAmounts(item_price=10.0, seller_coupon_discount=20.0),
                seller_fees=SellerFees(category_final_value_fee_pct=0.10, below_standard_surcharge_pct=0.06),
            )
        )

        assert output.fees.final_value_fee == 0.0
        assert output.fees.surcharges == 0.0
        assert output.rollup.net_of_discounts == -10.0
        assert output.rollup.net == -10.0
        assert output.rollup.margin_pct == -100.0


class TestOtherFees:
    def test_surcharges_and_fixed_fees(self) -> None:
        output = compute(
            _order(
                seller_fees=SellerFees(
                    per_order_fixed_fee=0.30,
                    below_standard_surcharge_pct=0.06,
                    very_high_inad_surcharge_pct=0.04,
                    listing_upgrades_total=2.0,
                    insertion_fee_after_free=0.35,
                    vehicle_or_classified_fee=1.0,
                )
            )
        )

        assert output.fees.surcharges == 10.0
        assert output.rollup.fees_total == 13.65

    def test_ad_fees(self) -> None:
        output = compute(
            _order(
                ads=AdvertisingFees(
                    promoted_standard_pct=0.05,
                    promoted_standard_share_pct=0.5,
                    promoted_advanced_spend=10.0,
                    promoted_advanced_share_pct=0.3,
                    off_platform_ads_attribution=1.5,
                )
            )
        )

        assert output.fees.ad_fees_standard == 2.5
        assert output.fees.ad_fees_advanced == 3.0
        assert output.fees.ad_fees_offsite == 1.5
        assert output.rollup.fees_total == 7.0

    def test_cross_border_fees(self) -> None:
        output = compute(
            _order(
                xborder=CrossBorderCurrency(
                    international_txn_fee=1.0,
                    currency_conversion_pct=0.03,
                    cross_border_handling=0.5,
                )
            )
        )

        assert output.fees.cross_border_fees == 4.5

    def test_vat_on_fees_counts_toward_total(self) -> None:
        output = compute(_order(taxes=Taxes(vat_on_seller_fees=2.0)))

        assert output.fees.vat_on_fees == 2.0
        assert output.rollup.net == 98.0


class TestTaxes:
    def test_collected_tax_is_revenue_without_pass_through(self) -> None:
        output = compute(_order(taxes=Taxes(buyer_tax_collected=8.0)))

        assert output.rollup.gross == 108.0

    def test_pass_through_tax_is_excluded_from_gross(self) -> None:
        output = compute(_order(taxes=Taxes(buyer_tax_collected=8.0, is_buyer_tax_pass_through=True)))

        assert output.rollup.gross == 100.0
        assert output.rollup.net == 100.0

    @pytest.mark.parametrize(("included", "expected"), [(False, 3.0), (True, 3.24)])
    def test_processor_base_with_pass_through_tax(self, included: bool, expected: float) -> None:
        output = compute(
            _order(
                taxes=Taxes(
                    buyer_tax_collected=8.0,
                    is_buyer_tax_pass_through=True,
                    tax_included_in_processor_base=included,
                ),
                payments=PaymentProcessing(processor_pct=0.03),
            )
        )

        assert output.fees.payment_processing == expected

    def test_truthy_non_bool_flag_is_ignored(self) -> None:
        output = compute(_order(taxes=Taxes(buyer_tax_collected=8.0, is_buyer_tax_pass_through=1)))  # type: ignore[arg-type]

        assert output.rollup.gross == 108.0


class TestDeductions:
    def test_cogs_allocation_is_per_unit(self) -> None:
        output = compute(
            _order(
                sale=SaleAmounts(item_price=20.0, quantity=3),
                cogs=CostOfGoods(item_acquisition_cost=30.0, per_unit_overhead_allocation=2.0),
            )
        )

        assert output.rollup.gross == 60.0
        assert output.rollup.cogs_total == 36.0
        assert output.rollup.net == 24.0

    def test_refunds_net_of_credits(self) -> None:
        output = compute(
            _order(refunds=RefundsReturns(full_refund_amount=30.0, restocking_deduction=2.0, fee_credits=5.0))
        )

        assert output.rollup.refunds_total == 23.0
        assert output.rollup.net == 77.0

    def test_adjustments_net_of_reversals(self) -> None:
        output = compute(_order(adjustments=AdjustmentsDisputes(goodwill_credits=4.0, appeal_reversals=1.0)))

        assert output.rollup.adjustments_total == 3.0
        assert output.rollup.net == 97.0

    def test_international_programs_are_reported_but_leave_net_unchanged(self) -> None:
        output = compute(
            _order(
                intl_programs=InternationalPrograms(
                    international_shipping_withheld=10.0,
                    international_return_handling=5.0,
                )
            )
        )

        assert output.rollup.international_programs_total == 15.0
        assert output.rollup.net == 100.0

    def test_store_overhead(self) -> None:
        output = compute(
            _order(
                store_overhead=StoreOverhead(
                    store_subscription_monthly_fee=20.0,
                    third_party_tools_monthly=5.0,
                    quarterly_credits=10.0,
                )
            )
        )

        assert output.rollup.overhead_total == 15.0
        assert output.rollup.net == 85.0


class TestExpectedValueCosts:
    def test_expected_return_loss_is_weighted_by_return_share(self) -> None:
        output = compute(
            _order(
                refunds=RefundsReturns(
                    expected_refund_pct=0.5,
                    expected_restocking_pct=0.1,
                    expected_return_label_cost=8.0,
                ),
                attribution=AttributionKnobs(pct_with_returns_or_refunds=0.1),
            )
        )

        assert output.rollup.expected_return_loss == 4.8
        assert output.rollup.refunds_total == 4.8
        assert output.rollup.net == 95.2

    def test_expected_return_loss_adds_to_realised_refunds(self) -> None:
        output = compute(
            _order(
                refunds=RefundsReturns(full_refund_amount=10.0, expected_refund_pct=1.0),
                attribution=AttributionKnobs(pct_with_returns_or_refunds=0.05),
            )
        )

        assert output.rollup.refunds_total == 15.0
        assert output.rollup.net == 85.0

    def test_return_share_is_clamped(self) -> None:
        output = compute(
            _order(
                refunds=RefundsReturns(expected_refund_pct=0.5),
                attribution=AttributionKnobs(pct_with_returns_or_refunds=3.0),
            )
        )

        assert output.rollup.expected_return_loss == 50.0

    def test_expected_dispute_loss_joins_adjustments(self) -> None:
        output = compute(
            _order(
                adjustments=AdjustmentsDisputes(
                    goodwill_credits=4.0,
                    dispute_rate_pct=0.02,
                    expected_dispute_loss=50.0,
                )
            )
        )

        assert output.rollup.expected_dispute_loss == 1.0
        assert output.rollup.adjustments_total == 5.0
        assert output.rollup.net == 95.0
        assert output.rollup.fees_total == 0.0


class TestOptionalFees:
    def test_category_override_replaces_rate(self) -> None:
        output = compute(
            _order(
                seller_fees=SellerFees(
                    category_final_value_fee_pct=0.13,
                    category_fee_override_pct=0.15,
                )
            )
        )

        assert output.fees.final_value_fee == 15.0
        assert output.rollup.confidence == "medium"

    def test_override_alone_counts_as_a_fee_rate(self) -> None:
        output = compute(_order(seller_fees=SellerFees(category_fee_override_pct=0.15)))

        assert output.rollup.confidence == "medium"

    def test_percent_fees_apply_to_fee_base(self) -> None:
        output = compute(
            _order(
                sale=SaleAmounts(item_price=100.0, seller_coupon_discount=20.0),
                seller_fees=SellerFees(misc_pct_of_gross=0.02),
                xborder=CrossBorderCurrency(international_fee_pct=0.015),
            )
        )

        assert output.fees.misc_pct_fee == 1.6
        assert output.fees.international_pct_fee == 1.2
        assert output.rollup.fees_total == 2.8
        assert output.rollup.net == 77.2

    def test_misc_fixed_cost_is_overhead(self) -> None:
        output = compute(_order(store_overhead=StoreOverhead(misc_fixed_cost_per_order=0.75)))

        assert output.rollup.overhead_total == 0.75
        assert output.rollup.net == 99.25

class TestConfidenceAndGoals:
    def test_confidence_levels(self) -> None:
        fee = SellerFees(category_final_value_fee_pct=0.13)
        high = compute(
            _order(
                seller_fees=fee,
                cogs=CostOfGoods(item_acquisition_cost=10.0),
                shipping=ShippingCosts(postage_label_cost=4.0),
            )
        )
        medium = compute(_order(seller_fees=fee, cogs=CostOfGoods(item_acquisition_cost=10.0)))
        low = compute(_order(cogs=CostOfGoods(item_acquisition_cost=10.0)))

        assert (high.rollup.confidence, medium.rollup.confidence, low.rollup.confidence) == (
            "high",
            "medium",
            "low",
        )

    def test_goal_progress(self) -> None:
        output = compute(_order(goals=GoalTracking(weekly_net_target=400.0)))

        assert output.rollup.weekly_target_progress_pct == 25.0
        assert output.rollup.monthly_target_progress_pct == 0.0

    def test_output_is_plain_data(self) -> None:
        payload = compute(_order()).to_dict()

        assert set(payload) == {"fees", "rollup"}
        assert payload["rollup"]["confidence"] == "low"
