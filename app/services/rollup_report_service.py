"""
app/services/rollup_report_service.py

Accepts column rollup summaries reported after an ingestion run.

A report is always logged; it is persisted only when
``ROLLUP_PERSISTENCE_ENABLED`` is set and a session is supplied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import RollupReportSettings, get_rollup_report_settings
from app.logging_utils import log_event
from app.repositories.rollup_report_repository import RollupReportRepository
from app.schemas.rollups import RollupsPayload

logger = logging.getLogger(__name__)


class RollupPersistenceError(RuntimeError):
    """
    Raised when an accepted report cannot be stored.
    """


@dataclass(frozen=True)
class RollupReceipt:
    rows: int
    cols: int
    report_id: str | None = None


class RollupReportService:
    """
    Logs and optionally stores validated rollup reports.
    """

    def __init__(self, *, settings: RollupReportSettings) -> None:
        self._settings = settings

    @property
    def persistence_enabled(self) -> bool:
        return self._settings.persistence_enabled

    def accept(self, payload: RollupsPayload, db: Session | None = None) -> RollupReceipt:
        file_name = payload.file_meta.name if payload.file_meta is not None else None
        log_event(
            logger,
            logging.INFO,
            "rollups_received",
            total_rows=payload.total_rows,
            rollup_columns=len(payload.rollups),
            file=file_name,
        )

        report_id: str | None = None
        if self._settings.persistence_enabled and db is not None:
            report_id = self._persist(payload, db)

        return RollupReceipt(
            rows=payload.total_rows,
            cols=len(payload.rollups),
            report_id=report_id,
        )

    @staticmethod
    def _persist(payload: RollupsPayload, db: Session) -> str:
        repository = RollupReportRepository(db)
        try:
            record = repository.add(
                total_rows=payload.total_rows,
                rollups=[row.model_dump() for row in payload.rollups],
                headers=payload.headers,
                file_meta=payload.file_meta.model_dump() if payload.file_meta is not None else None,
            )
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise RollupPersistenceError("Failed to persist rollup report.") from exc
        return str(record.id)


@lru_cache(maxsize=1)
def get_rollup_report_service() -> RollupReportService:
    """
    Dependency factory for rollup report service.
    """

    return RollupReportService(settings=get_rollup_report_settings())
