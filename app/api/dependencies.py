"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and optional storage.
"""

from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.config import (
    RollupReportSettings,
    get_mapping_preset_settings,
    get_rollup_report_settings,
)
from app.repositories.key_value_store import InMemoryKeyValueStore, KeyValueStore
from app.repositories.mapping_preset_repository import MappingPresetRepository
from app.services.mapping_preset_service import MappingPresetService
from db.session import get_db

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
    "text/tab-separated-values",
    "text/plain",
}

CSV_EXTENSIONS = (".csv", ".tsv", ".txt")

_PROCESS_PRESET_STORE = InMemoryKeyValueStore()


def get_csv_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is delimited text by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_csv_filename = filename.endswith(CSV_EXTENSIONS)
    is_csv_content_type = content_type in CSV_CONTENT_TYPES

    if not is_csv_filename and not is_csv_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed.",
        )

    return file


def get_optional_db(
    settings: RollupReportSettings = Depends(get_rollup_report_settings),
) -> Generator[Session | None, None, None]:
    """
    Yield a session only when rollup persistence is enabled.
    """

    if not settings.persistence_enabled:
        yield None
        return
    yield from get_db()


def get_preset_store(
    db: Session | None = Depends(get_optional_db),
) -> KeyValueStore:
    """
    SQL-backed store when persistence is enabled, process memory otherwise.
    """

    if db is None:
        return _PROCESS_PRESET_STORE
    return MappingPresetRepository(db)


def get_mapping_preset_service(
    store: KeyValueStore = Depends(get_preset_store),
) -> MappingPresetService:
    return MappingPresetService(store, namespace=get_mapping_preset_settings().namespace)
