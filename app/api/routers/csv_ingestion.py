"""
app/api/routers/csv_ingestion.py

CSV profiling HTTP endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status

from app.api.dependencies import get_csv_upload
from app.schemas.csv_ingestion import ColumnRollupResponse, CSVProfileResponse
from app.services.csv_profile_service import (
    CSVProfileError,
    CSVProfileService,
    get_csv_profile_service,
)
from app.services.csv_reader import IngestionError

router = APIRouter(tags=["ingestion"])


@router.post("/upload-csv", response_model=CSVProfileResponse)
def upload_csv(
    file: UploadFile = Depends(get_csv_upload),
    header: bool = Query(default=True, description="Treat the first record as column names"),
    delimiter: str | None = Query(
        default=None,
        min_length=1,
        max_length=1,
        description="Field delimiter; sniffed from the first line when omitted",
    ),
    sample_size: int = Query(default=20, ge=1, le=200, alias="sampleSize"),
    profile_service: CSVProfileService = Depends(get_csv_profile_service),
) -> CSVProfileResponse:
    """
    Stream one uploaded CSV and return its headers, preview, sample and rollups.
    """

    try:
        file.file.seek(0)
        summary = profile_service.profile(
            file.file,
            header=header,
            delimiter=delimiter,
            sample_size=sample_size,
            total_bytes=file.size,
        )
    except (CSVProfileError, IngestionError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    finally:
        file.file.close()

    return CSVProfileResponse(
        status=summary.status.value,
        headers=summary.headers,
        total_rows=summary.total_rows,
        preview=summary.preview,
        sample=summary.sample,
        rollups=[ColumnRollupResponse(**row) for row in summary.rollups],
        warnings=summary.warnings,
    )
