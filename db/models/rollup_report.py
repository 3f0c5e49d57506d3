"""
db/models/rollup_report.py

Column rollup summaries reported after a CSV ingestion run.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONDocument, TimestampMixin


class RollupReportRecord(Base, TimestampMixin):
    __tablename__ = "rollup_reports"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    total_rows: Mapped[int] = mapped_column(Integer, nullable=False)
    column_count: Mapped[int] = mapped_column(Integer, nullable=False)
    rollups_json: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument,
        nullable=False,
        comment="Per-column count/sum/min/max/avg",
    )
    headers_json: Mapped[list[str] | None] = mapped_column(JSONDocument, nullable=True)
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_meta_json: Mapped[dict[str, Any] | None] = mapped_column(JSONDocument, nullable=True)

    __table_args__ = (
        Index("ix_rollup_reports_file_name", "file_name"),
        Index("ix_rollup_reports_created_at", "created_at"),
    )
