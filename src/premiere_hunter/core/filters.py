"""Traversal and search predicates."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from premiere_hunter.models.config import SearchConfig


def normalize_extension(ext: str) -> str:
    """Lower-case an extension and drop any leading dots."""
    return ext.strip().lstrip(".").lower()


class FileFilter:
    """Decides which directories to enter and which files to search.

    Holds no state beyond the rules it was built with, so it can be
    shared freely between threads.
    """

    def __init__(
        self,
        extensions: Iterable[str],
        exclude_dirs: Iterable[str] = (),
        follow_links: bool = False,
        max_file_size: int | None = None,
    ) -> None:
        self.extensions = frozenset(e for e in map(normalize_extension, extensions) if e)
        self.exclude_dirs = frozenset(d.casefold() for d in exclude_dirs if d)
        self.follow_links = follow_links
        # 0 means no ceiling, same as None
        self.max_file_size = max_file_size or None

    @classmethod
    def from_config(cls, config: SearchConfig) -> FileFilter:
        return cls(
            extensions=config.extensions,
            exclude_dirs=config.exclude_dirs,
            follow_links=config.follow_links,
            max_file_size=config.max_file_size,
        )

    def should_descend(self, name: str) -> bool:
        """Return False if *name* is an excluded directory name."""
        return name.casefold() not in self.exclude_dirs

    def should_search(
        self,
        path: Path | str,
        size: int,
        extension: str | None = None,
        is_symlink: bool = False,
    ) -> bool:
        """Return True if the file at *path* should be handed to the matcher.

        *extension* defaults to the suffix of *path*. *size* comes from a
        stat the caller already performed.
        """
        if extension is None:
            extension = Path(path).suffix
        if normalize_extension(extension) not in self.extensions:
            return False
        if self.max_file_size is not None and size > self.max_file_size:
            return False
        if is_symlink and not self.follow_links:
            return False
        return True
