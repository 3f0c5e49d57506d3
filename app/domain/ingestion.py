"""
app/domain/ingestion.py

Domain models shared by the streaming CSV ingestion flow.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

DEFAULT_CHUNK_BYTES = 256 * 1024
DEFAULT_PREVIEW_LIMIT = 20
DEFAULT_SAMPLE_LIMIT = 20
MAX_SAMPLE_LIMIT = 200


class IngestionStatus(str, Enum):
    IDLE = "idle"
    PARSING = "parsing"
    COMPLETED = "completed"
    ABORTED = "aborted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in {IngestionStatus.COMPLETED, IngestionStatus.ABORTED, IngestionStatus.FAILED}


class EventType(str, Enum):
    READY = "ready"
    HEADERS = "headers"
    PROGRESS = "progress"
    CHUNK = "chunk"
    SAMPLE = "sample"
    DONE = "done"
    ABORTED = "aborted"
    ERROR = "error"


TERMINAL_EVENTS: frozenset[str] = frozenset(
    {EventType.DONE.value, EventType.ABORTED.value, EventType.ERROR.value}
)

IngestionEvent = dict[str, Any]
EventSink = Callable[[IngestionEvent], None]


def make_event(event_type: EventType, **payload: Any) -> IngestionEvent:
    """
    Build one outbound event as a JSON-friendly dict.

    The payload is deep-copied so receivers never share row buffers with
    the run that produced them.
    """

    return {"type": event_type.value, **copy.deepcopy(payload)}


@dataclass(frozen=True)
class ParseOptions:
    """
    Options for one ingestion run.

    ``delimiter=None`` sniffs the delimiter from the first line.
    ``total_bytes`` overrides the size the reader infers from the source.
    """

    header: bool = True
    delimiter: str | None = None
    chunk_bytes: int = DEFAULT_CHUNK_BYTES
    preview_limit: int = DEFAULT_PREVIEW_LIMIT
    sample_limit: int = DEFAULT_SAMPLE_LIMIT
    max_row_warnings: int = 500
    total_bytes: int | None = None


@dataclass
class IngestionState:
    """
    Mutable state owned by exactly one controller run.

    ``preview_rows`` is append-only until ``preview_limit`` is reached;
    ``errors`` collects non-fatal row-shape warnings.
    """

    total_rows: int = 0
    preview_rows: list[dict[str, Any]] = field(default_factory=list)
    cancelled: bool = False
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CSVProfileSummary:
    """
    End-of-run profile of one CSV source.

    Only bounded data is kept: the preview, the sample and per-column
    aggregates.  Full row sets are never retained.
    """

    status: IngestionStatus
    headers: list[str]
    total_rows: int
    preview: list[dict[str, Any]]
    sample: list[dict[str, Any]]
    rollups: list[dict[str, Any]]
    warnings: list[str] = field(default_factory=list)
