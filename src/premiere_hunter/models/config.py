"""Search configuration dataclass."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_EXTENSIONS: tuple[str, ...] = ("prproj",)
DEFAULT_MAX_FILE_SIZE_MB = 100
DEFAULT_SNIPPET_CHARS = 120


def default_threads() -> int:
    """Return the host parallelism, never less than 1."""
    return os.cpu_count() or 1


@dataclass(frozen=True, slots=True)
class SearchConfig:
    """Resolved settings for one scan.

    Built once before traversal starts and never mutated afterwards.
    ``max_file_size`` is in bytes; ``None`` means unlimited.
    ``roots_origin`` only describes where the roots came from, for display.
    """

    search_text: str
    roots: tuple[Path, ...]
    extensions: frozenset[str] = frozenset(DEFAULT_EXTENSIONS)
    exclude_dirs: frozenset[str] = frozenset()
    follow_links: bool = False
    max_file_size: int | None = DEFAULT_MAX_FILE_SIZE_MB * 1024 * 1024
    threads: int = field(default_factory=default_threads)
    show_snippets: bool = False
    snippet_chars: int = DEFAULT_SNIPPET_CHARS
    roots_origin: str = ""
