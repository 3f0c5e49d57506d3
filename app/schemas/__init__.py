"""
app/schemas package marker.
"""

from app.schemas.calculator import (
    CalculatorRequest,
    CalculatorResponse,
    SimpleCalculatorRequest,
    SimpleCalculatorResponse,
)
from app.schemas.csv_ingestion import ColumnRollupResponse, CSVProfileResponse
from app.schemas.mapping import (
    MappingPresetRequest,
    MappingPresetResponse,
    MappingResolutionResponse,
    MappingSuggestRequest,
)
from app.schemas.orders import DailyRollupListResponse, DailyRollupRequest
from app.schemas.rollups import RollupsAcceptedResponse, RollupsPayload
from app.schemas.worker_protocol import (
    CancelCommand,
    ParseCommand,
    WorkerCommandError,
    parse_worker_command,
)

__all__ = [
    "CalculatorRequest",
    "CalculatorResponse",
    "CancelCommand",
    "ColumnRollupResponse",
    "CSVProfileResponse",
    "DailyRollupListResponse",
    "DailyRollupRequest",
    "MappingPresetRequest",
    "MappingPresetResponse",
    "MappingResolutionResponse",
    "MappingSuggestRequest",
    "ParseCommand",
    "RollupsAcceptedResponse",
    "RollupsPayload",
    "SimpleCalculatorRequest",
    "SimpleCalculatorResponse",
    "WorkerCommandError",
    "parse_worker_command",
]
