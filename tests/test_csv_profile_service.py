"""
tests/test_csv_profile_service.py

Pytest tests for synchronous CSV profiling.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from app.config import CSVIngestionSettings
from app.domain.ingestion import IngestionStatus
from app.services.csv_profile_service import CSVProfileError, CSVProfileService


@pytest.fixture()
def service() -> CSVProfileService:
    return CSVProfileService(
        settings=CSVIngestionSettings(chunk_bytes=128, preview_limit=2, sample_limit=3, log_row_warnings=False)
    )


class TestCSVProfileService:
    def test_profiles_bytes(self, service: CSVProfileService) -> None:
        data = b"price,sku\n1,A\n2,B\n3,C\n4,D\n"

        summary = service.profile(data, sample_size=1)

        assert summary.status is IngestionStatus.COMPLETED
        assert summary.headers == ["price", "sku"]
        assert summary.total_rows == 4
        assert summary.preview == [{"price": 1.0, "sku": "A"}, {"price": 2.0, "sku": "B"}]
        assert summary.sample == [{"price": 1.0, "sku": "A"}]
        assert summary.rollups == [
            {"column": "price", "count": 4, "sum": 10.0, "min": 1.0, "max": 4.0, "avg": 2.5}
        ]
        assert summary.warnings == []

    def test_default_sample_limit_comes_from_settings(self, service: CSVProfileService) -> None:
        summary = service.profile(b"n\n1\n2\n3\n4\n5\n")

        assert len(summary.sample) == 3

    def test_profiles_a_path_with_sniffed_delimiter(self, service: CSVProfileService, tmp_path: Path) -> None:
        path = tmp_path / "orders.csv"
        path.write_text("price;qty\n$1,200.50;2\n(3.00);1\n", encoding="utf-8")

        summary = service.profile(path)

        assert summary.headers == ["price", "qty"]
        assert summary.preview[0] == {"price": 1200.5, "qty": 2.0}
        price = next(row for row in summary.rollups if row["column"] == "price")
        assert price["min"] == -3.0

    def test_collects_row_warnings(self, service: CSVProfileService) -> None:
        summary = service.profile(b"a,b\n1\n", delimiter=",")

        assert summary.warnings == ["Row 2: expected 2 fields but found 1."]

    def test_missing_file_raises(self, service: CSVProfileService, tmp_path: Path) -> None:
        with pytest.raises(CSVProfileError, match="CSV source not found"):
            service.profile(tmp_path / "missing.csv")

    def test_undecodable_bytes_raise(self, service: CSVProfileService) -> None:
        with pytest.raises(CSVProfileError, match="UTF-8"):
            service.profile(b"\xff\xfe\x00price\n")
