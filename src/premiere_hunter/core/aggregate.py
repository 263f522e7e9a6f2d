"""Thread-safe scan-wide statistics."""

from __future__ import annotations

import threading
from pathlib import Path

from premiere_hunter.models.outcome import FileOutcome, OutcomeStatus


class ScanAggregate:
    """Counts outcomes across all workers of one scan.

    Every update happens under a single lock, so
    ``processed == matched + not_matched + errored`` holds whenever the
    counters are read.
    """

    def __init__(self, total: int = 0) -> None:
        self.total = total
        self._lock = threading.Lock()
        self._matched = 0
        self._not_matched = 0
        self._errored = 0
        self._errors: list[tuple[Path, str]] = []
        self._matches: list[Path] = []
        self._interrupted = False

    def record(self, path: Path, outcome: FileOutcome) -> int:
        """Count one outcome and return the new processed total."""
        with self._lock:
            match outcome.status:
                case OutcomeStatus.MATCHED:
                    self._matched += 1
                    self._matches.append(path)
                case OutcomeStatus.NOT_MATCHED:
                    self._not_matched += 1
                case OutcomeStatus.ERRORED:
                    self._errored += 1
                    self._errors.append((path, outcome.reason))
            return self._matched + self._not_matched + self._errored

    def mark_interrupted(self) -> None:
        with self._lock:
            self._interrupted = True

    @property
    def processed(self) -> int:
        with self._lock:
            return self._matched + self._not_matched + self._errored

    @property
    def matched(self) -> int:
        with self._lock:
            return self._matched

    @property
    def not_matched(self) -> int:
        with self._lock:
            return self._not_matched

    @property
    def errored(self) -> int:
        with self._lock:
            return self._errored

    @property
    def interrupted(self) -> bool:
        with self._lock:
            return self._interrupted

    @property
    def errors(self) -> list[tuple[Path, str]]:
        """(path, reason) for every errored file, in completion order."""
        with self._lock:
            return list(self._errors)

    @property
    def matches(self) -> list[Path]:
        """Matched paths in completion order."""
        with self._lock:
            return list(self._matches)

    def snapshot(self) -> dict[str, int]:
        """Return all counters read under one lock acquisition."""
        with self._lock:
            return {
                "total": self.total,
                "processed": self._matched + self._not_matched + self._errored,
                "matched": self._matched,
                "not_matched": self._not_matched,
                "errored": self._errored,
            }
