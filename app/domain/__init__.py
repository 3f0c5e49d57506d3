"""
app/domain package marker.
"""

from app.domain.ingestion import (
    CSVProfileSummary,
    EventType,
    IngestionState,
    IngestionStatus,
    ParseOptions,
    make_event,
)
from app.domain.orders import DailyOrderRollup, OrderRecord

__all__ = [
    "CSVProfileSummary",
    "DailyOrderRollup",
    "EventType",
    "IngestionState",
    "IngestionStatus",
    "OrderRecord",
    "ParseOptions",
    "make_event",
]
