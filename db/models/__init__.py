"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.mapping_preset import MappingPresetEntry
from db.models.rollup_report import RollupReportRecord

__all__ = [
    "MappingPresetEntry",
    "RollupReportRecord",
]
