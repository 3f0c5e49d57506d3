"""
app/services/ingestion_controller.py

Orchestrates one streaming CSV ingestion run.

State machine::

    IDLE -> PARSING -> COMPLETED | ABORTED | FAILED

For every chunk delivered by :class:`ChunkedCsvReader` the controller

    1. runs the optional boundary hook and checks the cancel flag,
    2. emits ``headers`` once (first chunk only),
    3. normalizes the chunk's records,
    4. re-checks the cancel flag and discards the chunk if it was set,
    5. fills the bounded preview and sample buffers,
    6. folds the rows into the column rollup,
    7. emits ``chunk`` and ``progress``.

Exactly one terminal event (``done``, ``aborted`` or ``error``) is emitted
per run.  Cancellation is a one-way flag and is never an error.
"""

from __future__ import annotations

import logging
import threading
from contextlib import closing
from dataclasses import dataclass, field
from typing import Any, Callable

from app.domain.ingestion import (
    EventSink,
    EventType,
    IngestionEvent,
    IngestionState,
    IngestionStatus,
    ParseOptions,
    make_event,
)
from app.logging_utils import log_event
from app.normalizers.numeric import normalize_row
from app.services.column_rollup import ColumnRollupAccumulator, RollupRow
from app.services.csv_reader import ChunkedCsvReader, CsvChunk, IngestionError

logger = logging.getLogger(__name__)

ReaderFactory = Callable[..., ChunkedCsvReader]


def _discard(_: IngestionEvent) -> None:
    return None


@dataclass(frozen=True)
class RollupReport:
    """
    Finished rollup summary in the shape the reporting boundary accepts.
    """

    total_rows: int
    rollups: list[RollupRow]
    headers: list[str] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "rollups": [row.to_dict() for row in self.rollups],
            "totalRows": self.total_rows,
            "headers": list(self.headers),
        }


class IngestionController:
    """
    Runs one parse at a time and reports through an event sink.

    ``cancel()`` may be called from any thread; ``start()`` runs on the
    caller's thread until a terminal state is reached.
    """

    def __init__(
        self,
        *,
        emit: EventSink | None = None,
        boundary_hook: Callable[[], None] | None = None,
        reader_factory: ReaderFactory = ChunkedCsvReader,
        log_row_warnings: bool = True,
    ) -> None:
        self._emit = emit or _discard
        self._boundary_hook = boundary_hook
        self._reader_factory = reader_factory
        self._log_row_warnings = log_row_warnings
        self._cancel_requested = threading.Event()
        self._status = IngestionStatus.IDLE
        self._state = IngestionState()
        self._accumulator = ColumnRollupAccumulator()
        self._sample: list[dict[str, Any]] = []
        self._columns: tuple[str, ...] = ()
        self._headers_sent = False
        self._suppressed_warnings = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def status(self) -> IngestionStatus:
        return self._status

    @property
    def state(self) -> IngestionState:
        return self._state

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    @property
    def sample(self) -> list[dict[str, Any]]:
        return [dict(row) for row in self._sample]

    def cancel(self) -> None:
        """
        Request a hard stop; honoured at the next chunk boundary.
        """

        self._cancel_requested.set()

    def rollup_snapshot(self) -> list[RollupRow]:
        return self._accumulator.snapshot()

    def report(self) -> RollupReport:
        return RollupReport(
            total_rows=self._state.total_rows,
            rollups=self._accumulator.snapshot(),
            headers=list(self._columns),
        )

    def start(self, source: Any, options: ParseOptions | None = None) -> IngestionStatus:
        """
        Parse ``source`` to completion, cancellation, or failure.

        Any previous run's state is discarded first.
        """

        if self._status is IngestionStatus.PARSING:
            raise RuntimeError("An ingestion run is already active on this controller.")

        options = options or ParseOptions()
        self._reset()
        self._status = IngestionStatus.PARSING
        log_event(
            logger,
            logging.INFO,
            "ingestion_started",
            header=options.header,
            delimiter=options.delimiter,
            chunk_bytes=options.chunk_bytes,
        )

        try:
            reader = self._reader_factory(
                source,
                header=options.header,
                delimiter=options.delimiter,
                chunk_bytes=options.chunk_bytes,
            )
            with closing(reader.iter_chunks()) as chunks:
                for chunk in chunks:
                    if self._boundary_hook is not None:
                        self._boundary_hook()
                    if self._cancel_requested.is_set():
                        return self._abort()
                    total_bytes = options.total_bytes or reader.total_bytes
                    if not self._apply_chunk(chunk, options, total_bytes):
                        return self._abort()
        except IngestionError as exc:
            return self._fail(str(exc))
        except Exception:
            logger.exception("Unexpected failure while reading CSV source")
            return self._fail("CSV source could not be read.")

        if self._cancel_requested.is_set():
            return self._abort()
        return self._complete()

    # ------------------------------------------------------------------
    # Chunk handling
    # ------------------------------------------------------------------

    def _apply_chunk(
        self,
        chunk: CsvChunk,
        options: ParseOptions,
        total_bytes: int | None,
    ) -> bool:
        """
        Apply one chunk atomically; return False if it was discarded.
        """

        rows = [normalize_row(record) for record in chunk.records]
        if self._cancel_requested.is_set():
            return False

        if not self._headers_sent:
            self._columns = chunk.columns
            self._headers_sent = True
            self._emit(make_event(EventType.HEADERS, columns=list(chunk.columns)))

        self._record_warnings(chunk.warnings, options.max_row_warnings)
        if not rows:
            return True

        state = self._state
        preview_room = options.preview_limit - len(state.preview_rows)
        if preview_room > 0:
            state.preview_rows.extend(dict(row) for row in rows[:preview_room])
        sample_room = options.sample_limit - len(self._sample)
        if sample_room > 0:
            self._sample.extend(dict(row) for row in rows[:sample_room])

        self._accumulator.update_rows(rows)
        state.total_rows += len(rows)

        self._emit(make_event(EventType.CHUNK, rows=rows))
        self._emit(self._progress_event(chunk.cursor, total_bytes))
        return True

    def _progress_event(self, cursor: int, total_bytes: int | None) -> IngestionEvent:
        if total_bytes:
            percent = min(100, round(cursor / total_bytes * 100))
            return make_event(
                EventType.PROGRESS,
                rowsSoFar=self._state.total_rows,
                bytesSoFar=cursor,
                percent=percent,
            )
        return make_event(EventType.PROGRESS, rowsSoFar=self._state.total_rows)

    def _record_warnings(self, warnings: tuple[str, ...], limit: int) -> None:
        for warning in warnings:
            if self._log_row_warnings:
                logger.warning("CSV row shape warning: %s", warning)
            if len(self._state.errors) < limit:
                self._state.errors.append(warning)
            else:
                self._suppressed_warnings += 1

    # ------------------------------------------------------------------
    # Terminal transitions
    # ------------------------------------------------------------------

    def _complete(self) -> IngestionStatus:
        self._status = IngestionStatus.COMPLETED
        warnings = list(self._state.errors)
        if self._suppressed_warnings:
            warnings.append(f"{self._suppressed_warnings} additional row warnings were suppressed.")
        self._emit(make_event(EventType.SAMPLE, rows=self._sample))
        self._emit(
            make_event(
                EventType.DONE,
                rowsTotal=self._state.total_rows,
                warnings=warnings,
            )
        )
        log_event(
            logger,
            logging.INFO,
            "ingestion_completed",
            rows_total=self._state.total_rows,
            columns=len(self._columns),
            numeric_columns=len(self._accumulator),
            warnings=len(warnings),
        )
        return self._status

    def _abort(self) -> IngestionStatus:
        self._status = IngestionStatus.ABORTED
        self._state.cancelled = True
        self._emit(make_event(EventType.ABORTED))
        log_event(
            logger,
            logging.INFO,
            "ingestion_aborted",
            rows_so_far=self._state.total_rows,
        )
        return self._status

    def _fail(self, message: str) -> IngestionStatus:
        self._status = IngestionStatus.FAILED
        self._emit(make_event(EventType.ERROR, message=message))
        log_event(
            logger,
            logging.WARNING,
            "ingestion_failed",
            message=message,
            rows_so_far=self._state.total_rows,
        )
        return self._status

    def _reset(self) -> None:
        self._cancel_requested.clear()
        self._state = IngestionState()
        self._accumulator = ColumnRollupAccumulator()
        self._sample = []
        self._columns = ()
        self._headers_sent = False
        self._suppressed_warnings = 0
