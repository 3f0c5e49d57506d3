"""
app/mappers/field_mapper.py

Header-to-field mapping for seller order exports.

Resolution order per field: manual override, exact or alias match on the
normalized header, then fuzzy match.  Each header is used at most once.
``map_rows`` is a pure function of ``(rows, mapping)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from difflib import SequenceMatcher
from typing import Any, Iterable, Mapping, Sequence

from app.domain.orders import OrderRecord
from app.normalizers.numeric import coerce_token
from app.validators.mapping_validator import MappingErrorDetail, MappingValidator, SchemaMappingError
from fees.engine import order_quantity

ORDER_FIELDS: tuple[str, ...] = (
    "item_price",
    "shipping_charged",
    "shipping_cost",
    "cogs",
    "fee_rate",
    "quantity",
    "order_date",
)

REQUIRED_ORDER_FIELDS: tuple[str, ...] = ("item_price",)

FIELD_LABELS: dict[str, str] = {
    "item_price": "Item Price",
    "shipping_charged": "Shipping Charged",
    "shipping_cost": "Shipping Cost",
    "cogs": "COGS",
    "fee_rate": "Fee Rate %",
    "quantity": "Quantity",
    "order_date": "Order Date",
}

DEFAULT_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "item_price": (
        "price",
        "sold price",
        "sale price",
        "total price",
        "order price",
        "item amount",
        "amount",
        "total",
        "transaction amount",
    ),
    "shipping_charged": (
        "shipping",
        "buyer paid shipping",
        "shipping amount",
        "postage charged",
        "shipping charge",
        "postage",
    ),
    "shipping_cost": (
        "label cost",
        "postage cost",
        "shipping paid",
        "ship cost",
        "carrier cost",
    ),
    "cogs": (
        "cost of goods",
        "purchase price",
        "buy cost",
        "acquisition cost",
        "item cost",
        "unit cost",
    ),
    "fee_rate": (
        "final value fee %",
        "fvf %",
        "ad rate",
        "promoted rate",
        "ad fee %",
        "fee %",
        "platform fee %",
        "commission %",
    ),
    "quantity": ("qty", "units", "quantity sold", "items"),
    "order_date": ("date", "sale date", "order date", "transaction date", "paid on", "created"),
}

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%b %d, %Y",
    "%d-%b-%y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
)

_NUMERIC_FIELDS: tuple[str, ...] = (
    "item_price",
    "shipping_charged",
    "shipping_cost",
    "cogs",
    "fee_rate",
)


def normalize_header(header: str) -> str:
    """
    Normalize a column name for flexible matching.
    """

    return "".join(ch for ch in header.strip().lower() if ch.isalnum())


def parse_order_date(value: Any) -> date | None:
    """
    Parse an export date cell; ISO timestamps and common US layouts.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    raw = value.strip()
    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        return datetime.fromisoformat(normalized).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


@dataclass(frozen=True)
class MappingResolution:
    """
    Resolved field-to-header mapping and how each field was matched.
    """

    field_to_source: dict[str, str]
    source_headers: tuple[str, ...]
    match_strategies: dict[str, str]
    errors: tuple[MappingErrorDetail, ...] = ()
    missing_preset_headers: tuple[str, ...] = field(default_factory=tuple)

    @property
    def unmapped_fields(self) -> tuple[str, ...]:
        return tuple(name for name in ORDER_FIELDS if name not in self.field_to_source)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class OrderFieldMapper:
    """
    Suggests and applies header mappings for order exports.
    """

    def __init__(
        self,
        *,
        aliases: Mapping[str, Sequence[str]] | None = None,
        validator: MappingValidator | None = None,
        fuzzy_threshold: float = 0.84,
    ) -> None:
        self._aliases: dict[str, tuple[str, ...]] = {
            name: tuple(values)
            for name, values in (aliases or DEFAULT_FIELD_ALIASES).items()
        }
        self._validator = validator or MappingValidator(
            required_fields=REQUIRED_ORDER_FIELDS,
            known_fields=ORDER_FIELDS,
        )
        self._fuzzy_threshold = max(0.0, min(1.0, fuzzy_threshold))

    def suggest(
        self,
        headers: Sequence[str],
        *,
        overrides: Mapping[str, str] | None = None,
    ) -> MappingResolution:
        """
        Suggest a mapping for ``headers``; problems are reported, not raised.
        """

        source_headers = tuple(header for header in headers if header and header.strip())
        lookup = _header_lookup(source_headers)
        if not source_headers:
            return MappingResolution(
                field_to_source={},
                source_headers=(),
                match_strategies={},
                errors=(
                    MappingErrorDetail(
                        code="empty_headers",
                        message="No CSV headers were provided.",
                    ),
                ),
            )

        resolved: dict[str, str] = {}
        strategies: dict[str, str] = {}
        errors: list[MappingErrorDetail] = []

        for field_name, source_column in (overrides or {}).items():
            field_name = field_name.strip()
            source_column = source_column.strip()
            if not field_name or not source_column:
                continue
            if field_name not in ORDER_FIELDS:
                errors.append(
                    MappingErrorDetail(
                        code="invalid_override_field",
                        message="Manual override contains unknown field.",
                        field=field_name,
                        source_column=source_column,
                    )
                )
                continue
            matched = lookup.get(normalize_header(source_column))
            if matched is None:
                errors.append(
                    MappingErrorDetail(
                        code="override_source_not_found",
                        message="Manual override points to a source column not present in CSV headers.",
                        field=field_name,
                        source_column=source_column,
                        context={"source_headers": list(source_headers)},
                    )
                )
                continue
            resolved[field_name] = matched
            strategies[field_name] = "override"

        used_headers = set(resolved.values())
        for field_name in ORDER_FIELDS:
            if field_name in resolved:
                continue

            exact = self._find_exact_or_alias_match(field_name, lookup)
            if exact is not None and exact not in used_headers:
                resolved[field_name] = exact
                strategies[field_name] = "exact_or_alias"
                used_headers.add(exact)
                continue

            fuzzy = self._find_best_fuzzy_match(field_name, lookup, used_headers)
            if fuzzy is not None:
                resolved[field_name] = fuzzy
                strategies[field_name] = "fuzzy"
                used_headers.add(fuzzy)

        errors.extend(self._validator.collect_errors(mapping=resolved, source_headers=source_headers))
        return MappingResolution(
            field_to_source=resolved,
            source_headers=source_headers,
            match_strategies=strategies,
            errors=tuple(errors),
        )

    def resolve(
        self,
        headers: Sequence[str],
        *,
        overrides: Mapping[str, str] | None = None,
    ) -> MappingResolution:
        """
        Like :meth:`suggest`, but raise SchemaMappingError when invalid.
        """

        resolution = self.suggest(headers, overrides=overrides)
        if not resolution.is_valid:
            self._validator.validate(
                mapping=resolution.field_to_source,
                source_headers=resolution.source_headers,
                pre_errors=[
                    error
                    for error in resolution.errors
                    if error.code in {"empty_headers", "invalid_override_field", "override_source_not_found"}
                ],
            )
        return resolution

    def apply_preset(
        self,
        preset_mapping: Mapping[str, str],
        headers: Sequence[str],
    ) -> MappingResolution:
        """
        Re-apply a saved mapping to a new file's headers.

        Saved headers that are absent from ``headers`` are dropped from the
        mapping and reported in ``missing_preset_headers``.
        """

        source_headers = tuple(header for header in headers if header and header.strip())
        present = set(source_headers)
        applied: dict[str, str] = {}
        missing: list[str] = []
        for field_name in ORDER_FIELDS:
            header = preset_mapping.get(field_name) or ""
            if not header:
                continue
            if header in present:
                applied[field_name] = header
            else:
                missing.append(header)

        return MappingResolution(
            field_to_source=applied,
            source_headers=source_headers,
            match_strategies={name: "preset" for name in applied},
            errors=tuple(self._validator.collect_errors(mapping=applied, source_headers=source_headers)),
            missing_preset_headers=tuple(missing),
        )

    @staticmethod
    def map_rows(
        rows: Iterable[Mapping[str, Any]],
        mapping: Mapping[str, str],
    ) -> list[OrderRecord]:
        """
        Project rows onto :class:`OrderRecord` through ``mapping``.

        Unmapped or non-numeric cells become ``0``; quantity is at least 1.
        """

        columns = {name: header for name, header in mapping.items() if header}
        orders: list[OrderRecord] = []
        for row in rows:
            values: dict[str, Any] = {}
            for name in _NUMERIC_FIELDS:
                values[name] = _cell_number(row, columns.get(name))
            quantity_header = columns.get("quantity")
            values["quantity"] = (
                order_quantity(_cell_number(row, quantity_header)) if quantity_header else 1
            )
            date_header = columns.get("order_date")
            values["order_date"] = parse_order_date(row.get(date_header)) if date_header else None
            orders.append(OrderRecord(**values))
        return orders

    def _find_exact_or_alias_match(
        self,
        field_name: str,
        lookup: Mapping[str, str],
    ) -> str | None:
        candidates = (field_name, FIELD_LABELS.get(field_name, ""), *self._aliases.get(field_name, ()))
        for candidate in candidates:
            match = lookup.get(normalize_header(candidate))
            if match:
                return match
        return None

    def _find_best_fuzzy_match(
        self,
        field_name: str,
        lookup: Mapping[str, str],
        used_headers: set[str],
    ) -> str | None:
        alias_candidates = [field_name, *self._aliases.get(field_name, ())]
        normalized_candidates = [normalize_header(item) for item in alias_candidates if normalize_header(item)]

        best_header: str | None = None
        best_score = 0.0
        for header_norm, header_raw in lookup.items():
            if header_raw in used_headers:
                continue
            for candidate in normalized_candidates:
                score = SequenceMatcher(None, header_norm, candidate).ratio()
                if candidate in header_norm:
                    score = max(score, 0.9)
                if score > best_score:
                    best_score = score
                    best_header = header_raw

        if best_header is not None and best_score >= self._fuzzy_threshold:
            return best_header
        return None


def _header_lookup(headers: Sequence[str]) -> dict[str, str]:
    lookup: dict[str, str] = {}
    for header in headers:
        key = normalize_header(header)
        if key and key not in lookup:
            lookup[key] = header
    return lookup


def _cell_number(row: Mapping[str, Any], header: str | None) -> float:
    if not header:
        return 0.0
    value = coerce_token(row.get(header))
    return value if isinstance(value, float) else 0.0
