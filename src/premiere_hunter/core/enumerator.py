"""Eager discovery of candidate files under the search roots."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable
from pathlib import Path

from premiere_hunter.core.filters import FileFilter

log = logging.getLogger(__name__)


def _dir_key(path: str, st: os.stat_result) -> tuple[int, int] | str:
    # Some network and FAT volumes report st_ino == 0 for every directory.
    if st.st_ino == 0:
        return os.path.normcase(os.path.realpath(path))
    return (st.st_dev, st.st_ino)


class Enumerator:
    """Walks search roots and collects files that pass a :class:`FileFilter`.

    The walk is an explicit-stack depth-first traversal over ``os.scandir``.
    Every directory is identified by ``(st_dev, st_ino)``, or by its real
    path where the filesystem reports no inode numbers, and entered at
    most once, which covers both overlapping roots and symlink loops.

    Directories that cannot be listed are skipped and remembered in
    :attr:`skipped_dirs`; they never count as file errors.
    """

    def __init__(self, file_filter: FileFilter) -> None:
        self.file_filter = file_filter
        self.skipped_dirs: list[tuple[str, str]] = []

    def enumerate(
        self,
        roots: Iterable[Path | str],
        abort: threading.Event | None = None,
    ) -> list[Path]:
        """Return every candidate file under *roots*.

        Stops early, returning what was found so far, once *abort* is set.
        """
        candidates: list[Path] = []
        seen_dirs: set[tuple[int, int] | str] = set()

        for root in roots:
            if abort is not None and abort.is_set():
                break
            root = os.fspath(root)
            if not os.path.isdir(root):
                log.warning("Path does not exist or is not a directory: %s", root)
                continue
            self._walk(root, candidates, seen_dirs, abort)

        log.info("Enumerated %d candidate files (%d directories skipped)", len(candidates), len(self.skipped_dirs))
        return candidates

    def _walk(
        self,
        root: str,
        candidates: list[Path],
        seen_dirs: set[tuple[int, int] | str],
        abort: threading.Event | None,
    ) -> None:
        follow = self.file_filter.follow_links
        stack: list[str] = [root]
        while stack:
            if abort is not None and abort.is_set():
                return
            current = stack.pop()
            try:
                st = os.stat(current)
            except OSError as e:
                self._skip(current, e)
                continue
            key = _dir_key(current, st)
            if key in seen_dirs:
                log.debug("Already visited, skipping: %s", current)
                continue
            seen_dirs.add(key)

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                self._skip(current, e)
                continue

            for entry in entries:
                try:
                    is_link = entry.is_symlink()
                    if entry.is_dir(follow_symlinks=follow):
                        if self.file_filter.should_descend(entry.name):
                            stack.append(entry.path)
                        else:
                            log.debug("Excluded directory: %s", entry.path)
                    elif entry.is_file(follow_symlinks=follow):
                        size = entry.stat(follow_symlinks=follow).st_size
                        if self.file_filter.should_search(entry.path, size, is_symlink=is_link):
                            candidates.append(Path(entry.path))
                except OSError as e:
                    log.debug("Cannot stat %s: %s", entry.path, e)

    def _skip(self, path: str, error: OSError) -> None:
        log.debug("Cannot open directory %s: %s", path, error)
        self.skipped_dirs.append((path, str(error)))


def enumerate_candidates(
    roots: Iterable[Path | str],
    file_filter: FileFilter,
    abort: threading.Event | None = None,
) -> list[Path]:
    """Convenience wrapper around :meth:`Enumerator.enumerate`."""
    return Enumerator(file_filter).enumerate(roots, abort=abort)
