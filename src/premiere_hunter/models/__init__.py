"""Premiere Hunter data models."""

from premiere_hunter.models.config import SearchConfig
from premiere_hunter.models.events import MatchEvent, ProgressEvent, SummaryEvent
from premiere_hunter.models.outcome import FileOutcome, OutcomeStatus

__all__ = [
    "FileOutcome",
    "MatchEvent",
    "OutcomeStatus",
    "ProgressEvent",
    "SearchConfig",
    "SummaryEvent",
]
