"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from app.domain.ingestion import (
    DEFAULT_CHUNK_BYTES,
    DEFAULT_PREVIEW_LIMIT,
    DEFAULT_SAMPLE_LIMIT,
    MAX_SAMPLE_LIMIT,
)
from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class CSVIngestionSettings:
    """
    Runtime settings for streaming CSV ingestion.
    """

    chunk_bytes: int = DEFAULT_CHUNK_BYTES
    preview_limit: int = DEFAULT_PREVIEW_LIMIT
    sample_limit: int = DEFAULT_SAMPLE_LIMIT
    max_row_warnings: int = 500
    log_row_warnings: bool = True


@dataclass(frozen=True)
class RollupReportSettings:
    """
    Settings for the rollup reporting boundary.
    """

    persistence_enabled: bool = False


@dataclass(frozen=True)
class MappingPresetSettings:
    """
    Settings for named header-mapping presets.
    """

    namespace: str = "csv-mapping-presets"


@lru_cache(maxsize=1)
def get_csv_ingestion_settings() -> CSVIngestionSettings:
    """
    Return cached CSV ingestion settings from environment variables.
    """

    return CSVIngestionSettings(
        chunk_bytes=max(1024, _get_int_env("CSV_INGEST_CHUNK_BYTES", DEFAULT_CHUNK_BYTES)),
        preview_limit=max(0, _get_int_env("CSV_INGEST_PREVIEW_LIMIT", DEFAULT_PREVIEW_LIMIT)),
        sample_limit=min(
            MAX_SAMPLE_LIMIT,
            max(1, _get_int_env("CSV_INGEST_SAMPLE_LIMIT", DEFAULT_SAMPLE_LIMIT)),
        ),
        max_row_warnings=max(1, _get_int_env("CSV_INGEST_MAX_ROW_WARNINGS", 500)),
        log_row_warnings=_get_bool_env("CSV_INGEST_LOG_ROW_WARNINGS", True),
    )


@lru_cache(maxsize=1)
def get_rollup_report_settings() -> RollupReportSettings:
    """
    Return rollup reporting settings from environment variables.
    """

    return RollupReportSettings(
        persistence_enabled=_get_bool_env("ROLLUP_PERSISTENCE_ENABLED", False),
    )


@lru_cache(maxsize=1)
def get_mapping_preset_settings() -> MappingPresetSettings:
    """
    Return mapping preset settings from environment variables.
    """

    return MappingPresetSettings(
        namespace=_get_str_env("MAPPING_PRESET_NAMESPACE", "csv-mapping-presets"),
    )
