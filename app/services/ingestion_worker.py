"""
app/services/ingestion_worker.py

Message-passing worker that runs CSV ingestion off the caller's thread.

The caller sends command dicts and reads event dicts; nothing else is
shared.  Inside the worker thread the controller runs cooperatively:
pending commands are drained only at chunk boundaries, so a ``cancel`` or
a replacement ``parse`` never interrupts a chunk half-way.

Command handling
----------------
parse   (idle)    -> start a run
parse   (running) -> cancel the active run, then start the new one
cancel  (running) -> cancel the active run
cancel  (idle)    -> ignored
malformed (idle)  -> terminal ``error`` event
malformed (running) -> logged and dropped; the active run keeps its single
                       terminal event
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from typing import Any, Callable, Iterator, Mapping

from app.config import CSVIngestionSettings, get_csv_ingestion_settings
from app.domain.ingestion import (
    TERMINAL_EVENTS,
    EventType,
    IngestionEvent,
    ParseOptions,
    make_event,
)
from app.schemas.worker_protocol import (
    CancelCommand,
    ParseCommand,
    WorkerCommandError,
    parse_worker_command,
)
from app.services.ingestion_controller import IngestionController

logger = logging.getLogger(__name__)

ControllerFactory = Callable[..., IngestionController]

_STOP = object()


class IngestionWorker:
    """
    One worker thread, one active parse at a time.

    Usage::

        with IngestionWorker() as worker:
            worker.send({"command": "parse", "source": path, "options": {"header": True}})
            for event in worker.iter_run_events(timeout=30):
                ...
    """

    def __init__(
        self,
        *,
        settings: CSVIngestionSettings | None = None,
        controller_factory: ControllerFactory = IngestionController,
        name: str = "csv-ingestion-worker",
    ) -> None:
        self._settings = settings or get_csv_ingestion_settings()
        self._controller_factory = controller_factory
        self._commands: queue.Queue[Any] = queue.Queue()
        self._events: queue.Queue[IngestionEvent] = queue.Queue()
        self._pending: deque[ParseCommand] = deque()
        self._active: IngestionController | None = None
        self._stopping = False
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    # ------------------------------------------------------------------
    # Caller side
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> "IngestionWorker":
        self._thread.start()
        return self

    def send(self, command: Mapping[str, Any]) -> None:
        """
        Post one command; it is processed asynchronously by the worker.
        """

        self._commands.put(dict(command))

    def parse(self, source: Any, **options: Any) -> None:
        self.send({"command": "parse", "source": source, "options": options})

    def cancel(self) -> None:
        self.send({"command": "cancel"})

    def get_event(self, timeout: float | None = None) -> IngestionEvent:
        """
        Return the next event; raises ``queue.Empty`` on timeout.
        """

        return self._events.get(timeout=timeout)

    def iter_run_events(self, timeout: float | None = None) -> Iterator[IngestionEvent]:
        """
        Yield events up to and including the next terminal event.
        """

        while True:
            event = self.get_event(timeout=timeout)
            yield event
            if event["type"] in TERMINAL_EVENTS:
                return

    def close(self, timeout: float | None = 5.0) -> None:
        """
        Stop the worker, cancelling any active run.
        """

        self._commands.put(_STOP)
        if self._thread.is_alive():
            self._thread.join(timeout=timeout)

    def __enter__(self) -> "IngestionWorker":
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------

    def _run(self) -> None:
        self._events.put(make_event(EventType.READY))
        while not self._stopping:
            if self._pending:
                self._run_parse(self._pending.popleft())
                continue

            raw = self._commands.get()
            if raw is _STOP:
                break
            try:
                command = parse_worker_command(raw)
            except WorkerCommandError as exc:
                logger.warning("Rejected ingestion worker command: %s", exc)
                self._events.put(make_event(EventType.ERROR, message=str(exc)))
                continue

            if isinstance(command, CancelCommand):
                logger.debug("Cancel received with no active ingestion run; ignoring.")
                continue
            self._run_parse(command)

    def _run_parse(self, command: ParseCommand) -> None:
        options = ParseOptions(
            header=command.options.header,
            delimiter=command.options.delimiter,
            chunk_bytes=self._settings.chunk_bytes,
            preview_limit=self._settings.preview_limit,
            sample_limit=command.options.sample_size,
            max_row_warnings=self._settings.max_row_warnings,
        )
        controller = self._controller_factory(
            emit=self._events.put,
            boundary_hook=self._drain_commands,
            log_row_warnings=self._settings.log_row_warnings,
        )
        self._active = controller
        try:
            if command.source is None:
                self._events.put(make_event(EventType.ERROR, message="No CSV source was provided."))
                return
            controller.start(command.source, options)
        except Exception:
            # The loop must outlive any single run.
            logger.exception("Ingestion run raised; worker continues")
            if not controller.status.is_terminal:
                self._events.put(make_event(EventType.ERROR, message="CSV ingestion failed."))
        finally:
            self._active = None

    def _drain_commands(self) -> None:
        """
        Apply commands that arrived while a chunk was being processed.
        """

        while True:
            try:
                raw = self._commands.get_nowait()
            except queue.Empty:
                return

            active = self._active
            if raw is _STOP:
                self._stopping = True
                self._pending.clear()
                if active is not None:
                    active.cancel()
                continue

            try:
                command = parse_worker_command(raw)
            except WorkerCommandError as exc:
                logger.warning("Dropped malformed command during active run: %s", exc)
                continue

            if active is not None:
                active.cancel()
            if isinstance(command, ParseCommand):
                # Only the most recent replacement parse is kept.
                self._pending.clear()
                self._pending.append(command)
