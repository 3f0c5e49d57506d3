"""
tests/test_ingestion_controller.py

Pytest unit tests for the streaming ingestion controller.

Coverage
--------
- Event ordering and the single terminal event per run
- Preview / sample bounds and exact row totals
- Cancellation at chunk boundaries
- Failure paths (missing source, undecodable bytes)
- Row-shape warnings and their cap
- State reset between runs
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from app.domain.ingestion import TERMINAL_EVENTS, IngestionStatus, ParseOptions
from app.services.ingestion_controller import IngestionController


def _price_csv(rows: int) -> bytes:
    lines = ["price,sku"] + [f"{value},SKU-{value}" for value in range(1, rows + 1)]
    return ("\n".join(lines) + "\n").encode("utf-8")


class _Recorder:
    def __init__(self) -> None:
        self.events: list[dict] = []

    def __call__(self, event: dict) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [event["type"] for event in self.events]

    def of_type(self, event_type: str) -> list[dict]:
        return [event for event in self.events if event["type"] == event_type]


@pytest.fixture()
def recorder() -> _Recorder:
    return _Recorder()


def _terminal_count(recorder: _Recorder) -> int:
    return sum(1 for event_type in recorder.types() if event_type in TERMINAL_EVENTS)


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------


class TestCompletedRun:
    def test_fifty_rows_totals_preview_and_rollup(self, recorder: _Recorder) -> None:
        controller = IngestionController(emit=recorder)

        status = controller.start(_price_csv(50), ParseOptions(delimiter=",", preview_limit=20))

        assert status is IngestionStatus.COMPLETED
        assert controller.state.total_rows == 50
        assert len(controller.state.preview_rows) == 20
        assert controller.state.preview_rows[0] == {"price": 1.0, "sku": "SKU-1"}

        price = next(row for row in controller.rollup_snapshot() if row.column == "price")
        assert (price.count, price.sum, price.min, price.max, price.avg) == (50, 1275, 1, 50, 25.5)

    def test_event_order(self, recorder: _Recorder) -> None:
        controller = IngestionController(emit=recorder)

        controller.start(_price_csv(3), ParseOptions(delimiter=","))

        assert recorder.types() == ["headers", "chunk", "progress", "sample", "done"]
        assert recorder.events[0] == {"type": "headers", "columns": ["price", "sku"]}
        assert recorder.of_type("done")[0] == {"type": "done", "rowsTotal": 3, "warnings": []}

    def test_progress_reaches_one_hundred_percent_when_size_known(self, recorder: _Recorder) -> None:
        data = _price_csv(500)
        controller = IngestionController(emit=recorder)

        controller.start(data, ParseOptions(delimiter=",", chunk_bytes=512))

        progress = recorder.of_type("progress")
        assert len(progress) > 1
        assert [event["rowsSoFar"] for event in progress] == sorted(event["rowsSoFar"] for event in progress)
        assert progress[-1]["rowsSoFar"] == 500
        assert progress[-1]["bytesSoFar"] == len(data)
        assert progress[-1]["percent"] == 100
        assert all(0 <= event["percent"] <= 100 for event in progress)

    def test_progress_without_known_size_omits_percent(self, recorder: _Recorder) -> None:
        controller = IngestionController(emit=recorder)
        controller.start(io.StringIO("a\n1\n2\n"), ParseOptions())

        assert recorder.of_type("progress") == [{"type": "progress", "rowsSoFar": 2}]

    def test_chunk_rows_sum_to_total(self, recorder: _Recorder) -> None:
        controller = IngestionController(emit=recorder)

        controller.start(_price_csv(300), ParseOptions(delimiter=",", chunk_bytes=256))

        chunk_rows = sum(len(event["rows"]) for event in recorder.of_type("chunk"))
        assert chunk_rows == 300 == controller.state.total_rows
        assert _terminal_count(recorder) == 1

    def test_sample_respects_limit(self, recorder: _Recorder) -> None:
        controller = IngestionController(emit=recorder)

        controller.start(_price_csv(40), ParseOptions(delimiter=",", sample_limit=5))

        sample = recorder.of_type("sample")[0]["rows"]
        assert len(sample) == 5
        assert sample[-1]["price"] == 5.0

    def test_positional_mode(self, recorder: _Recorder) -> None:
        controller = IngestionController(emit=recorder)

        controller.start(b"1,2\n3,4\n", ParseOptions(header=False, delimiter=","))

        assert recorder.events[0]["columns"] == ["0", "1"]
        assert controller.state.preview_rows == [{"0": 1.0, "1": 2.0}, {"0": 3.0, "1": 4.0}]

    def test_header_only_file_completes_with_zero_rows(self, recorder: _Recorder) -> None:
        controller = IngestionController(emit=recorder)

        status = controller.start(b"price,sku\n", ParseOptions(delimiter=","))

        assert status is IngestionStatus.COMPLETED
        assert recorder.types() == ["headers", "sample", "done"]
        assert controller.report().to_payload() == {
            "rollups": [],
            "totalRows": 0,
            "headers": ["price", "sku"],
        }

    def test_events_are_value_copies(self, recorder: _Recorder) -> None:
        controller = IngestionController(emit=recorder)
        controller.start(_price_csv(2), ParseOptions(delimiter=","))

        recorder.of_type("chunk")[0]["rows"][0]["price"] = 999.0

        assert controller.state.preview_rows[0]["price"] == 1.0


# ---------------------------------------------------------------------------
# Warnings
# ---------------------------------------------------------------------------


class TestRowWarnings:
    def test_done_reports_row_shape_warnings(self, recorder: _Recorder) -> None:
        controller = IngestionController(emit=recorder, log_row_warnings=False)

        controller.start(b"a,b\n1\n2,3\n", ParseOptions(delimiter=","))

        done = recorder.of_type("done")[0]
        assert done["warnings"] == ["Row 2: expected 2 fields but found 1."]
        assert controller.state.errors == done["warnings"]

    def test_warnings_are_capped(self, recorder: _Recorder) -> None:
        controller = IngestionController(emit=recorder, log_row_warnings=False)
        data = b"a,b\n" + b"1\n" * 5

        controller.start(data, ParseOptions(delimiter=",", max_row_warnings=2))

        warnings = recorder.of_type("done")[0]["warnings"]
        assert len(warnings) == 3
        assert warnings[-1] == "3 additional row warnings were suppressed."


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


class TestCancellation:
    def test_cancel_after_two_chunks(self) -> None:
        events: list[dict] = []
        controller: IngestionController

        def emit(event: dict) -> None:
            events.append(event)
            if event["type"] == "chunk" and sum(1 for e in events if e["type"] == "chunk") == 2:
                controller.cancel()

        controller = IngestionController(emit=emit)
        status = controller.start(_price_csv(500), ParseOptions(delimiter=",", chunk_bytes=256))

        types = [event["type"] for event in events]
        assert status is IngestionStatus.ABORTED
        assert types.count("chunk") == 2
        assert types.count("progress") == 2
        assert types[-1] == "aborted"
        assert "done" not in types
        assert controller.state.cancelled is True

    def test_boundary_hook_can_cancel_before_chunk_is_applied(self, recorder: _Recorder) -> None:
        calls = {"n": 0}
        controller: IngestionController

        def hook() -> None:
            calls["n"] += 1
            if calls["n"] == 3:
                controller.cancel()

        controller = IngestionController(emit=recorder, boundary_hook=hook)
        status = controller.start(_price_csv(500), ParseOptions(delimiter=",", chunk_bytes=256))

        assert status is IngestionStatus.ABORTED
        assert len(recorder.of_type("chunk")) == 2
        rows_applied = sum(len(event["rows"]) for event in recorder.of_type("chunk"))
        assert controller.state.total_rows == rows_applied
        assert _terminal_count(recorder) == 1

    def test_cancel_before_start_is_cleared_by_reset(self, recorder: _Recorder) -> None:
        controller = IngestionController(emit=recorder)
        controller.cancel()

        status = controller.start(_price_csv(3), ParseOptions(delimiter=","))

        assert status is IngestionStatus.COMPLETED


# ---------------------------------------------------------------------------
# Failures and restart
# ---------------------------------------------------------------------------


class TestFailures:
    def test_missing_source_fails_with_single_error(self, recorder: _Recorder, tmp_path: Path) -> None:
        controller = IngestionController(emit=recorder)

        status = controller.start(tmp_path / "nope.csv", ParseOptions())

        assert status is IngestionStatus.FAILED
        assert recorder.types() == ["error"]
        assert "not found" in recorder.events[0]["message"]

    def test_none_source_fails(self, recorder: _Recorder) -> None:
        controller = IngestionController(emit=recorder)

        assert controller.start(None) is IngestionStatus.FAILED
        assert recorder.types() == ["error"]

    def test_decode_fault_mid_file(self, recorder: _Recorder) -> None:
        data = _price_csv(2000) + b"\xff\xfe,1\n"
        controller = IngestionController(emit=recorder)

        status = controller.start(data, ParseOptions(delimiter=",", chunk_bytes=512))

        assert status is IngestionStatus.FAILED
        assert recorder.types()[-1] == "error"
        assert recorder.of_type("error")[0]["message"] == "CSV must be UTF-8 encoded."
        assert "chunk" in recorder.types()
        assert _terminal_count(recorder) == 1

    def test_closed_stream_fails_and_controller_can_restart(self, recorder: _Recorder) -> None:
        stream = io.BytesIO(b"price\n1\n")
        stream.close()
        controller = IngestionController(emit=recorder)

        status = controller.start(stream, ParseOptions())

        assert status is IngestionStatus.FAILED
        assert recorder.types() == ["error"]
        assert "could not be read" in recorder.events[0]["message"]
        assert controller.start(b"price\n1\n", ParseOptions()) is IngestionStatus.COMPLETED

    def test_unexpected_reader_error_still_ends_in_one_error_event(self, recorder: _Recorder) -> None:
        class _BrokenReader:
            total_bytes = None

            def __init__(self, source: object, **kwargs: object) -> None:
                pass

            def iter_chunks(self):
                raise ValueError("stream went away")
                yield

        controller = IngestionController(emit=recorder, reader_factory=_BrokenReader)

        status = controller.start(b"ignored", ParseOptions())

        assert status is IngestionStatus.FAILED
        assert recorder.events == [{"type": "error", "message": "CSV source could not be read."}]
        assert controller.status is IngestionStatus.FAILED


class TestRestart:
    def test_second_run_discards_first_state(self, recorder: _Recorder) -> None:
        controller = IngestionController(emit=recorder)
        controller.start(_price_csv(10), ParseOptions(delimiter=","))

        controller.start(_price_csv(4), ParseOptions(delimiter=","))

        assert controller.state.total_rows == 4
        price = next(row for row in controller.rollup_snapshot() if row.column == "price")
        assert price.count == 4
        assert recorder.of_type("done")[-1]["rowsTotal"] == 4
