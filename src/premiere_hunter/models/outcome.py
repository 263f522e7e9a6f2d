"""Per-file outcome dataclass."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class OutcomeStatus(enum.Enum):
    MATCHED = "matched"
    NOT_MATCHED = "not_matched"
    ERRORED = "errored"


@dataclass(frozen=True, slots=True)
class FileOutcome:
    """Result of processing a single candidate file.

    ``reason`` is only set for errored files. ``snippet`` and ``assets``
    carry optional detail for matched files.
    """

    status: OutcomeStatus
    reason: str = ""
    snippet: str | None = None
    assets: tuple[str, ...] = ()

    @classmethod
    def matched(cls, snippet: str | None = None, assets: tuple[str, ...] = ()) -> FileOutcome:
        return cls(OutcomeStatus.MATCHED, snippet=snippet, assets=assets)

    @classmethod
    def not_matched(cls) -> FileOutcome:
        return cls(OutcomeStatus.NOT_MATCHED)

    @classmethod
    def errored(cls, reason: str) -> FileOutcome:
        return cls(OutcomeStatus.ERRORED, reason=reason)

    @property
    def is_match(self) -> bool:
        return self.status is OutcomeStatus.MATCHED

    @property
    def is_error(self) -> bool:
        return self.status is OutcomeStatus.ERRORED
