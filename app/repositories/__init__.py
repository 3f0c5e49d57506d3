"""
app/repositories package marker.
"""

from app.repositories.key_value_store import InMemoryKeyValueStore, KeyValueStore
from app.repositories.mapping_preset_repository import MappingPresetRepository
from app.repositories.rollup_report_repository import RollupReportRepository

__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "MappingPresetRepository",
    "RollupReportRepository",
]
