"""
app/services package marker.
"""

from app.services.column_rollup import ColumnRollupAccumulator, ColumnStats, RollupRow
from app.services.csv_profile_service import (
    CSVProfileError,
    CSVProfileService,
    get_csv_profile_service,
)
from app.services.csv_reader import (
    ChunkedCsvReader,
    CsvChunk,
    IngestionDecodeError,
    IngestionError,
    IngestionSourceError,
)
from app.services.ingestion_controller import IngestionController, RollupReport
from app.services.ingestion_worker import IngestionWorker
from app.services.mapping_preset_service import (
    MappingPresetNotFoundError,
    MappingPresetService,
)
from app.services.order_rollup_service import compute_daily_rollups
from app.services.rollup_report_service import (
    RollupReportService,
    get_rollup_report_service,
)

__all__ = [
    "ChunkedCsvReader",
    "ColumnRollupAccumulator",
    "ColumnStats",
    "CsvChunk",
    "CSVProfileError",
    "CSVProfileService",
    "get_csv_profile_service",
    "IngestionController",
    "IngestionDecodeError",
    "IngestionError",
    "IngestionSourceError",
    "IngestionWorker",
    "MappingPresetNotFoundError",
    "MappingPresetService",
    "RollupReport",
    "RollupReportService",
    "RollupRow",
    "compute_daily_rollups",
    "get_rollup_report_service",
]
