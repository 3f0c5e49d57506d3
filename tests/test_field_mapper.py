from __future__ import annotations

import unittest
from datetime import date

from app.domain.orders import OrderRecord
from app.mappers.field_mapper import OrderFieldMapper, normalize_header, parse_order_date
from app.validators.mapping_validator import SchemaMappingError


class TestOrderFieldMapper(unittest.TestCase):
    def setUp(self) -> None:
        self.mapper = OrderFieldMapper()

    def test_matches_aliases_in_a_typical_export(self) -> None:
        headers = ["Sold Price", "Shipping", "Label Cost", "Item Cost", "Qty", "Sale Date"]

        resolution = self.mapper.suggest(headers)

        self.assertEqual(
            resolution.field_to_source,
            {
                "item_price": "Sold Price",
                "shipping_charged": "Shipping",
                "shipping_cost": "Label Cost",
                "cogs": "Item Cost",
                "quantity": "Qty",
                "order_date": "Sale Date",
            },
        )
        self.assertEqual(set(resolution.match_strategies.values()), {"exact_or_alias"})
        self.assertEqual(resolution.unmapped_fields, ("fee_rate",))
        self.assertTrue(resolution.is_valid)

    def test_auto_detects_columns_with_fuzzy_matching(self) -> None:
        resolution = self.mapper.suggest(["Item Pric", "Quantiy"])

        self.assertEqual(resolution.field_to_source["item_price"], "Item Pric")
        self.assertEqual(resolution.field_to_source["quantity"], "Quantiy")
        self.assertEqual(resolution.match_strategies["item_price"], "fuzzy")

    def test_manual_override_mapping_takes_precedence(self) -> None:
        resolution = self.mapper.suggest(["col_a", "col_b"], overrides={"item_price": "col_b"})

        self.assertEqual(resolution.field_to_source["item_price"], "col_b")
        self.assertEqual(resolution.match_strategies["item_price"], "override")
        self.assertTrue(resolution.is_valid)

    def test_each_header_is_used_once(self) -> None:
        resolution = self.mapper.suggest(["Price"], overrides={"cogs": "Price"})

        self.assertEqual(resolution.field_to_source, {"cogs": "Price"})
        codes = [error.code for error in resolution.errors]
        self.assertEqual(codes, ["required_field_unmapped"])

    def test_invalid_manual_override_raises_structured_error(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.mapper.resolve(["Price"], overrides={"margin": "Price"})

        codes = [error.code for error in ctx.exception.errors]
        self.assertEqual(codes, ["invalid_override_field"])

    def test_override_to_missing_header_is_reported(self) -> None:
        resolution = self.mapper.suggest(["Price"], overrides={"cogs": "Unit Cost"})

        error = resolution.errors[0]
        self.assertEqual(error.code, "override_source_not_found")
        self.assertEqual(error.field, "cogs")
        self.assertEqual(resolution.field_to_source, {"item_price": "Price"})

    def test_empty_headers(self) -> None:
        resolution = self.mapper.suggest(["", "  "])

        self.assertFalse(resolution.is_valid)
        self.assertEqual(resolution.errors[0].code, "empty_headers")

        with self.assertRaises(SchemaMappingError) as ctx:
            self.mapper.resolve([])
        self.assertIn("Missing required fields: item_price", ctx.exception.message)

    def test_apply_preset_reports_missing_headers(self) -> None:
        resolution = self.mapper.apply_preset(
            {"item_price": "Sold Price", "cogs": "Item Cost"},
            ["Sold Price", "Qty"],
        )

        self.assertEqual(resolution.field_to_source, {"item_price": "Sold Price"})
        self.assertEqual(resolution.match_strategies, {"item_price": "preset"})
        self.assertEqual(resolution.missing_preset_headers, ("Item Cost",))
        self.assertTrue(resolution.is_valid)


class TestMapRows(unittest.TestCase):
    def test_projects_rows_onto_order_records(self) -> None:
        rows = [
            {"Sold Price": "$1,200.50", "Qty": "2", "Sale Date": "2026-03-01", "Item Cost": "N/A"},
            {"Sold Price": 15.0, "Qty": "0", "Sale Date": "", "Item Cost": "(3.00)"},
        ]
        mapping = {
            "item_price": "Sold Price",
            "quantity": "Qty",
            "order_date": "Sale Date",
            "cogs": "Item Cost",
        }

        orders = OrderFieldMapper.map_rows(rows, mapping)

        self.assertEqual(
            orders,
            [
                OrderRecord(item_price=1200.5, quantity=2, order_date=date(2026, 3, 1)),
                OrderRecord(item_price=15.0, cogs=-3.0, quantity=1),
            ],
        )

    def test_unmapped_fields_default(self) -> None:
        orders = OrderFieldMapper.map_rows([{"Price": "abc"}], {"item_price": "Price"})

        self.assertEqual(orders, [OrderRecord()])


class TestHelpers(unittest.TestCase):
    def test_normalize_header(self) -> None:
        self.assertEqual(normalize_header("  Fee Rate % "), "feerate")

    def test_parse_order_date(self) -> None:
        self.assertEqual(parse_order_date("03/15/2026"), date(2026, 3, 15))
        self.assertEqual(parse_order_date("2026-03-15T10:00:00Z"), date(2026, 3, 15))
        self.assertEqual(parse_order_date("Mar 15, 2026"), date(2026, 3, 15))
        self.assertIsNone(parse_order_date("soon"))
        self.assertIsNone(parse_order_date(None))


if __name__ == "__main__":
    unittest.main()
