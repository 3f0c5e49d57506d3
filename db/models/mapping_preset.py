"""
db/models/mapping_preset.py

Key-value rows backing named header-mapping presets.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONDocument, TimestampMixin


class MappingPresetEntry(Base, TimestampMixin):
    __tablename__ = "mapping_presets"

    key: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="<namespace>::<preset name>",
    )
    payload_json: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        comment="Saved mapping and the headers it was built from",
    )
