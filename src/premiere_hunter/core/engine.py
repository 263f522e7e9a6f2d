"""Parallel scan orchestration."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from premiere_hunter.core.aggregate import ScanAggregate
from premiere_hunter.models.config import default_threads
from premiere_hunter.models.events import MatchEvent, ProgressEvent, SummaryEvent
from premiere_hunter.models.outcome import FileOutcome

log = logging.getLogger(__name__)

FileOperation = Callable[[Path], FileOutcome]
ProgressCallback = Callable[[ProgressEvent], None]
MatchCallback = Callable[[MatchEvent], None]
SummaryCallback = Callable[[SummaryEvent], None]


class ScanCoordinator:
    """Runs a per-file operation over every candidate on a fixed thread pool.

    Each candidate is submitted as its own task, so the executor's shared
    queue hands the next pending file to whichever worker frees up first
    and a few slow files never hold up the rest.
    """

    def __init__(self, workers: int | None = None) -> None:
        self.workers = max(1, workers if workers is not None else default_threads())
        self._emit_lock = threading.Lock()

    def run(
        self,
        candidates: Sequence[Path],
        operation: FileOperation,
        on_progress: ProgressCallback | None = None,
        on_match: MatchCallback | None = None,
        on_summary: SummaryCallback | None = None,
        abort: threading.Event | None = None,
    ) -> ScanAggregate:
        """Process every candidate exactly once and return the totals.

        Callbacks are serialized: for each completed file the match event
        (if any) and then the progress event are emitted while holding one
        lock, in completion order. The summary event comes last, after the
        pool has drained.

        Args:
            candidates: Files to process; each is handed to one worker.
            operation: Called once per file from a worker thread.
            on_progress: Fired once per completed file.
            on_match: Fired for each matched file, before its progress event.
            on_summary: Fired once when the scan is over.
            abort: When set, files not yet started are skipped; files
                already in flight still finish.
        """
        aggregate = ScanAggregate(total=len(candidates))
        start = time.monotonic()

        def _process(path: Path) -> None:
            if abort is not None and abort.is_set():
                return
            try:
                outcome = operation(path)
            except Exception as exc:
                log.exception("Unexpected failure while processing '%s'", path)
                outcome = FileOutcome.errored(f"{type(exc).__name__}: {exc}")

            with self._emit_lock:
                processed = aggregate.record(path, outcome)
                if outcome.is_match and on_match:
                    on_match(MatchEvent(path=path, outcome=outcome))
                if on_progress:
                    on_progress(ProgressEvent(processed, aggregate.total, time.monotonic() - start))

        if candidates:
            max_workers = min(self.workers, len(candidates))
            log.info("Scanning %d files with %d workers", len(candidates), max_workers)
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = [executor.submit(_process, path) for path in candidates]
                for future in futures:
                    future.result()

        if abort is not None and abort.is_set() and aggregate.processed < aggregate.total:
            aggregate.mark_interrupted()

        elapsed = time.monotonic() - start
        if on_summary:
            counts = aggregate.snapshot()
            on_summary(
                SummaryEvent(
                    files_processed=counts["processed"],
                    matches_found=counts["matched"],
                    files_errored=counts["errored"],
                    elapsed=elapsed,
                    interrupted=aggregate.interrupted,
                )
            )
        return aggregate
