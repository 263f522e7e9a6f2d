"""Events emitted by the scan coordinator."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from premiere_hunter.models.outcome import FileOutcome


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """Snapshot taken right after a file completes."""

    processed: int
    total: int
    elapsed: float


@dataclass(frozen=True, slots=True)
class MatchEvent:
    """A candidate file matched."""

    path: Path
    outcome: FileOutcome


@dataclass(frozen=True, slots=True)
class SummaryEvent:
    """Final totals, emitted once the worker pool has drained."""

    files_processed: int
    matches_found: int
    files_errored: int
    elapsed: float
    interrupted: bool = False
