"""
app/repositories/mapping_preset_repository.py

SQL-backed key-value store for mapping presets.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.mapping_preset import MappingPresetEntry


class MappingPresetRepository:
    """
    Implements the key-value store capability on the ``mapping_presets`` table.

    Writes are flushed, not committed; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, key: str) -> dict[str, Any] | None:
        entry = self._session.get(MappingPresetEntry, key)
        return dict(entry.payload_json) if entry is not None else None

    def set(self, key: str, value: dict[str, Any]) -> None:
        entry = self._session.get(MappingPresetEntry, key)
        if entry is None:
            self._session.add(MappingPresetEntry(key=key, payload_json=value))
        else:
            entry.payload_json = value
        self._session.flush()

    def delete(self, key: str) -> bool:
        entry = self._session.get(MappingPresetEntry, key)
        if entry is None:
            return False
        self._session.delete(entry)
        self._session.flush()
        return True

    def keys(self, prefix: str = "") -> list[str]:
        stmt = select(MappingPresetEntry.key).order_by(MappingPresetEntry.key)
        if prefix:
            stmt = stmt.where(MappingPresetEntry.key.startswith(prefix, autoescape=True))
        return list(self._session.execute(stmt).scalars().all())
