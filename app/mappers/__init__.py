"""
app/mappers package marker.
"""

from app.mappers.field_mapper import (
    ORDER_FIELDS,
    REQUIRED_ORDER_FIELDS,
    MappingResolution,
    OrderFieldMapper,
    parse_order_date,
)

__all__ = [
    "ORDER_FIELDS",
    "REQUIRED_ORDER_FIELDS",
    "MappingResolution",
    "OrderFieldMapper",
    "parse_order_date",
]
