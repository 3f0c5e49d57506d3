"""
app/services/csv_reader.py

Pull-based chunked CSV reader.

The reader turns a path, ``bytes``, or an open binary/text stream into a
lazy, finite, non-restartable sequence of :class:`CsvChunk` objects.  A
chunk closes once roughly ``chunk_bytes`` of input have been consumed, so
peak memory is bounded by the chunk size regardless of the file size.

Row-shape irregularities (ragged rows) never stop the read; they are
reported as warnings on the chunk that contained them.  Only I/O and
decode faults raise.
"""

from __future__ import annotations

import csv
import io
import itertools
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import IO, Any, Callable, Iterable, Iterator

from app.domain.ingestion import DEFAULT_CHUNK_BYTES

logger = logging.getLogger(__name__)

SNIFF_DELIMITERS = ",;\t|"
DEFAULT_DELIMITER = ","
SOURCE_ENCODING = "utf-8"
BYTE_ORDER_MARK = "\ufeff"

RowParser = Callable[..., Iterable[list[str]]]
RawRecord = dict[str, str]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class IngestionError(RuntimeError):
    """
    Base class for run-level ingestion failures.
    """


class IngestionSourceError(IngestionError):
    """
    Raised when the source is missing, unreadable, or the options are invalid.
    """


class IngestionDecodeError(IngestionError):
    """
    Raised when the input cannot be decoded as delimited UTF-8 text.
    """


# ---------------------------------------------------------------------------
# Chunk value
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CsvChunk:
    """
    One bounded slice of parsed records.

    ``cursor`` is the cumulative number of input bytes consumed once the
    chunk's last record was read.
    """

    index: int
    columns: tuple[str, ...]
    records: list[RawRecord]
    cursor: int
    warnings: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------


class ChunkedCsvReader:
    """
    Decode a delimited text source into ordered chunks of raw records.

    In header mode the first non-blank record names the columns; otherwise
    keys are positional (``"0"``, ``"1"``, ...) with the arity of the first
    record.  Every record of one run carries exactly those keys: short rows
    are padded with ``""`` and long rows are truncated, each with a warning.
    """

    def __init__(
        self,
        source: Any,
        *,
        header: bool = True,
        delimiter: str | None = None,
        chunk_bytes: int = DEFAULT_CHUNK_BYTES,
        row_parser: RowParser = csv.reader,
    ) -> None:
        if source is None:
            raise IngestionSourceError("No CSV source was provided.")
        if delimiter is not None and (len(delimiter) != 1 or delimiter in '\r\n"'):
            raise IngestionSourceError("Delimiter must be a single character.")

        self._source = source
        self._header = header
        self._delimiter = delimiter
        self._chunk_bytes = max(1, chunk_bytes)
        self._row_parser = row_parser
        self._cursor = 0
        self._total_bytes: int | None = None
        self._columns: tuple[str, ...] = ()
        self._consumed = False

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def total_bytes(self) -> int | None:
        return self._total_bytes

    def iter_chunks(self) -> Iterator[CsvChunk]:
        """
        Yield chunks until the input is exhausted.

        Closing the generator early releases the underlying stream.
        """

        if self._consumed:
            raise IngestionSourceError("A CSV reader can only be iterated once.")
        self._consumed = True

        try:
            with self._open_text() as text_stream:
                yield from self._read_chunks(text_stream)
        except UnicodeDecodeError as exc:
            raise IngestionDecodeError("CSV must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            raise IngestionDecodeError(f"Invalid CSV format: {exc}") from exc
        except OSError as exc:
            raise IngestionSourceError(f"CSV source could not be read: {exc}") from exc

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _read_chunks(self, text_stream: IO[str]) -> Iterator[CsvChunk]:
        lines = self._counted_lines(text_stream)
        first_line = next(lines, None)
        if first_line is None:
            return

        delimiter = self._delimiter or sniff_delimiter(first_line)
        rows = self._row_parser(
            itertools.chain([first_line], lines),
            delimiter=delimiter,
        )

        chunk_index = 0
        chunk_start = 0
        records: list[RawRecord] = []
        warnings: list[str] = []
        record_number = 0
        columns_resolved = False

        for fields in rows:
            record_number += 1
            if _is_blank(fields):
                continue

            if not columns_resolved:
                columns_resolved = True
                if self._header:
                    self._columns = unique_columns(fields)
                    continue
                self._columns = tuple(str(position) for position in range(len(fields)))

            record, warning = self._shape_record(fields, record_number)
            records.append(record)
            if warning is not None:
                warnings.append(warning)

            if self._cursor - chunk_start >= self._chunk_bytes:
                yield CsvChunk(
                    index=chunk_index,
                    columns=self._columns,
                    records=records,
                    cursor=self._cursor,
                    warnings=tuple(warnings),
                )
                chunk_index += 1
                chunk_start = self._cursor
                records = []
                warnings = []

        if records or warnings or (chunk_index == 0 and columns_resolved):
            yield CsvChunk(
                index=chunk_index,
                columns=self._columns,
                records=records,
                cursor=self._cursor,
                warnings=tuple(warnings),
            )

    def _shape_record(self, fields: list[str], record_number: int) -> tuple[RawRecord, str | None]:
        expected = len(self._columns)
        found = len(fields)
        warning: str | None = None
        if found != expected:
            warning = f"Row {record_number}: expected {expected} fields but found {found}."
            if found < expected:
                fields = [*fields, *([""] * (expected - found))]
        return dict(zip(self._columns, fields)), warning

    def _counted_lines(self, text_stream: IO[str]) -> Iterator[str]:
        """
        Yield decoded lines while advancing the byte cursor.

        A leading byte order mark is counted as input but removed from the
        first line.
        """
        for line_number, line in enumerate(text_stream):
            self._cursor += len(line.encode("utf-8"))
            if line_number == 0:
                line = line.removeprefix(BYTE_ORDER_MARK)
            yield line

    @contextmanager
    def _open_text(self) -> Iterator[IO[str]]:
        source = self._source

        if isinstance(source, (str, os.PathLike)):
            path = os.fspath(source)
            if not os.path.isfile(path):
                raise IngestionSourceError(f"CSV source not found: {path}")
            self._total_bytes = os.path.getsize(path)
            with open(path, "r", encoding=SOURCE_ENCODING, newline="") as handle:
                yield handle
            return

        if isinstance(source, (bytes, bytearray, memoryview)):
            data = bytes(source)
            self._total_bytes = len(data)
            with io.TextIOWrapper(io.BytesIO(data), encoding=SOURCE_ENCODING, newline="") as handle:
                yield handle
            return

        if not hasattr(source, "read"):
            raise IngestionSourceError(
                f"Unsupported CSV source type: {type(source).__name__}."
            )

        try:
            sample = source.read(0)
        except (OSError, ValueError) as exc:
            raise IngestionSourceError(f"CSV source could not be read: {exc}") from exc
        if isinstance(sample, str):
            yield source
            return

        self._total_bytes = _remaining_size(source)
        text_stream = io.TextIOWrapper(source, encoding=SOURCE_ENCODING, newline="")
        try:
            yield text_stream
        finally:
            # Leave the caller's binary stream open.
            try:
                text_stream.detach()
            except ValueError:
                pass


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def sniff_delimiter(sample: str) -> str:
    """
    Guess the delimiter of ``sample`` among ``, ; TAB |``; default to comma.
    """

    try:
        return csv.Sniffer().sniff(sample, delimiters=SNIFF_DELIMITERS).delimiter
    except csv.Error:
        return DEFAULT_DELIMITER


def unique_columns(fields: list[str]) -> tuple[str, ...]:
    """
    Trim header names, name blanks by position and suffix duplicates.
    """

    seen: dict[str, int] = {}
    columns: list[str] = []
    for position, raw in enumerate(fields):
        name = raw.strip() or f"column_{position + 1}"
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 0
        columns.append(name)
    return tuple(columns)


def _is_blank(fields: list[str]) -> bool:
    return all(not field.strip() for field in fields)


def _remaining_size(stream: Any) -> int | None:
    try:
        if not stream.seekable():
            return None
        position = stream.tell()
        end = stream.seek(0, io.SEEK_END)
        stream.seek(position)
        return end - position
    except (AttributeError, OSError, ValueError):
        return None
