from __future__ import annotations

import unittest

from app.validators.mapping_validator import MappingErrorDetail, MappingValidator, SchemaMappingError


class TestMappingValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = MappingValidator(
            required_fields=("item_price",),
            known_fields=(
                "item_price",
                "shipping_charged",
                "shipping_cost",
                "cogs",
                "fee_rate",
                "quantity",
                "order_date",
            ),
        )

    def test_raises_on_missing_required_fields(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(
                mapping={"cogs": "Item Cost"},
                source_headers=("Item Cost", "Qty"),
            )

        codes = {error.code for error in ctx.exception.errors}
        self.assertIn("required_field_unmapped", codes)
        self.assertEqual(
            ctx.exception.message,
            "Header mapping validation failed. Missing required fields: item_price.",
        )

    def test_raises_on_invalid_source_column(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(
                mapping={"item_price": "Price", "order_date": "missing_column"},
                source_headers=("Price",),
                pre_errors=[
                    MappingErrorDetail(
                        code="override_source_not_found",
                        message="manual override missing header",
                        field="order_date",
                        source_column="missing_column",
                    )
                ],
            )

        codes = [error.code for error in ctx.exception.errors]
        self.assertIn("unknown_source_column", codes)
        self.assertIn("override_source_not_found", codes)

    def test_reports_duplicate_and_unknown_fields(self) -> None:
        errors = self.validator.collect_errors(
            mapping={"item_price": "Price", "cogs": "Price", "margin": "Price"},
            source_headers=("Price",),
        )

        codes = [error.code for error in errors]
        self.assertIn("unknown_field", codes)
        duplicate = next(error for error in errors if error.code == "duplicate_source_column")
        self.assertEqual(duplicate.context, {"fields": ["cogs", "item_price", "margin"]})

    def test_valid_mapping_passes(self) -> None:
        self.validator.validate(mapping={"item_price": "Price"}, source_headers=("Price", "Qty"))

    def test_error_serialization(self) -> None:
        error = SchemaMappingError(
            message="bad",
            errors=[MappingErrorDetail(code="unknown_field", message="Unknown field in mapping.", field="x")],
        )

        self.assertEqual(
            error.to_dict(),
            {
                "message": "bad",
                "errors": [
                    {
                        "code": "unknown_field",
                        "message": "Unknown field in mapping.",
                        "field": "x",
                        "source_column": None,
                        "context": None,
                    }
                ],
            },
        )


if __name__ == "__main__":
    unittest.main()
