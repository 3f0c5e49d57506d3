"""
app/repositories/rollup_report_repository.py

Persistence helpers for reported column rollups.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.rollup_report import RollupReportRecord


class RollupReportRepository:
    """
    Repository for rollup report rows.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(
        self,
        *,
        total_rows: int,
        rollups: list[dict[str, Any]],
        headers: list[str] | None = None,
        file_meta: dict[str, Any] | None = None,
    ) -> RollupReportRecord:
        """
        Stage one report and flush it so its id is assigned.
        """

        record = RollupReportRecord(
            total_rows=total_rows,
            column_count=len(rollups),
            rollups_json=rollups,
            headers_json=headers,
            file_name=(file_meta or {}).get("name"),
            file_meta_json=file_meta,
        )
        self._session.add(record)
        self._session.flush()
        return record

    def list_recent(self, *, limit: int = 20) -> list[RollupReportRecord]:
        stmt = (
            select(RollupReportRecord)
            .order_by(RollupReportRecord.created_at.desc())
            .limit(max(1, limit))
        )
        return list(self._session.execute(stmt).scalars().all())
