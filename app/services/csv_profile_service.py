"""
app/services/csv_profile_service.py

Synchronous CSV profiling on top of the streaming ingestion controller.

Used by the upload endpoint and the ``scripts/profile_csv.py`` command.
The controller streams the source chunk by chunk; this service keeps only
what the profile needs (headers, preview, sample, rollups, warnings) and
drops the per-chunk rows as soon as they have been folded.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Callable

from app.config import CSVIngestionSettings, get_csv_ingestion_settings
from app.domain.ingestion import (
    CSVProfileSummary,
    EventType,
    IngestionEvent,
    IngestionStatus,
    ParseOptions,
)
from app.services.csv_reader import IngestionError
from app.services.ingestion_controller import IngestionController

logger = logging.getLogger(__name__)


class CSVProfileError(IngestionError):
    """
    Raised when a CSV source cannot be profiled.
    """


class CSVProfileService:
    """
    Runs one ingestion per call and returns a bounded summary.
    """

    def __init__(
        self,
        *,
        settings: CSVIngestionSettings,
        controller_factory: Callable[..., IngestionController] = IngestionController,
    ) -> None:
        self._settings = settings
        self._controller_factory = controller_factory

    def profile(
        self,
        source: Any,
        *,
        header: bool = True,
        delimiter: str | None = None,
        sample_size: int | None = None,
        total_bytes: int | None = None,
    ) -> CSVProfileSummary:
        """
        Profile ``source`` to completion.

        Raises CSVProfileError when the source is missing or cannot be
        decoded.
        """

        settings = self._settings
        options = ParseOptions(
            header=header,
            delimiter=delimiter,
            chunk_bytes=settings.chunk_bytes,
            preview_limit=settings.preview_limit,
            sample_limit=sample_size if sample_size is not None else settings.sample_limit,
            max_row_warnings=settings.max_row_warnings,
            total_bytes=total_bytes,
        )

        terminal: dict[str, IngestionEvent] = {}

        def collect(event: IngestionEvent) -> None:
            if event["type"] in {EventType.DONE.value, EventType.ERROR.value}:
                terminal[event["type"]] = event

        controller = self._controller_factory(
            emit=collect,
            log_row_warnings=settings.log_row_warnings,
        )
        status = controller.start(source, options)

        if status is IngestionStatus.FAILED:
            message = terminal.get(EventType.ERROR.value, {}).get("message", "CSV could not be parsed.")
            raise CSVProfileError(message)

        done = terminal.get(EventType.DONE.value, {})
        report = controller.report()
        logger.info(
            "Profiled CSV rows=%d columns=%d numeric_columns=%d",
            report.total_rows,
            len(report.headers),
            len(report.rollups),
        )
        return CSVProfileSummary(
            status=status,
            headers=report.headers,
            total_rows=report.total_rows,
            preview=[dict(row) for row in controller.state.preview_rows],
            sample=controller.sample,
            rollups=[row.to_dict() for row in report.rollups],
            warnings=list(done.get("warnings", [])),
        )


@lru_cache(maxsize=1)
def get_csv_profile_service() -> CSVProfileService:
    """
    Dependency factory for CSV profile service.
    """

    return CSVProfileService(settings=get_csv_ingestion_settings())
