"""Bounded-memory, case-insensitive substring search over a single file."""

from __future__ import annotations

import gzip
import logging
import re
import zlib
from collections.abc import Callable
from pathlib import Path
from typing import IO

from premiere_hunter.models.outcome import FileOutcome

log = logging.getLogger(__name__)

_CHUNK_SIZE = 65_536  # 64 KB
_GZIP_MAGIC = b"\x1f\x8b"
_WHITESPACE = re.compile(rb"\s+")

Opener = Callable[..., IO[bytes]]

# Exceptions that mean "this file could not be read", never a crash.
# gzip.BadGzipFile is an OSError; truncated streams raise EOFError.
READ_ERRORS: tuple[type[BaseException], ...] = (OSError, EOFError, zlib.error)


def open_project(raw: IO[bytes]) -> IO[bytes]:
    """Return a stream over the decoded content of *raw*.

    Premiere saves projects as gzip-compressed XML, but uncompressed
    projects are accepted too. Detection is by magic bytes, not by name.
    """
    magic = raw.read(2)
    raw.seek(0)
    if magic == _GZIP_MAGIC:
        return gzip.GzipFile(fileobj=raw, mode="rb")
    return raw


def describe_error(exc: BaseException) -> str:
    """Short human-readable reason for a failed read."""
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


class StreamMatcher:
    """Case-insensitive literal search that reads files in fixed-size chunks.

    Folding is ASCII-only and done on raw bytes, so undecodable content
    never aborts a scan; non-ASCII token characters must match their
    UTF-8 bytes exactly.

    A token of ``n`` bytes can straddle two reads, so the last ``n - 1``
    bytes of each window are carried into the next one. Nothing else
    survives between reads.
    """

    def __init__(self, chunk_size: int = _CHUNK_SIZE, opener: Opener = open) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size
        self.opener = opener

    def search(self, path: Path | str, token: str, snippet_chars: int = 0) -> FileOutcome:
        """Search *path* for *token*.

        Returns on the first occurrence without reading the rest of the
        file. Any open or read failure yields an errored outcome.

        Args:
            path: File to scan.
            token: Non-empty literal to look for.
            snippet_chars: When non-zero, attach roughly this many
                characters of surrounding text to a match.
        """
        needle = token.encode("utf-8").lower()
        if not needle:
            raise ValueError("search token must not be empty")

        try:
            with self.opener(path, "rb") as raw:
                stream = open_project(raw)
                if stream is raw:
                    return self._scan(stream, needle, snippet_chars)
                with stream:
                    return self._scan(stream, needle, snippet_chars)
        except READ_ERRORS as e:
            log.debug("Cannot read %s: %s", path, e)
            return FileOutcome.errored(describe_error(e))

    def _scan(self, stream: IO[bytes], needle: bytes, snippet_chars: int) -> FileOutcome:
        keep = len(needle) - 1
        carry = b""
        while chunk := stream.read(self.chunk_size):
            window = carry + chunk
            pos = window.lower().find(needle)
            if pos != -1:
                snippet = _snippet(window, pos, len(needle), snippet_chars) if snippet_chars else None
                return FileOutcome.matched(snippet=snippet)
            carry = window[-keep:] if keep else b""
        return FileOutcome.not_matched()


def _snippet(window: bytes, pos: int, length: int, total_chars: int) -> str:
    """Cut text around a match out of the current read window."""
    half = total_chars // 2
    start = max(0, pos - half)
    end = min(len(window), pos + length + half)
    text = _WHITESPACE.sub(b" ", window[start:end]).decode("utf-8", errors="replace")
    prefix = "..." if start > 0 else ""
    suffix = "..." if end < len(window) else ""
    return f"{prefix}{text}{suffix}"


def make_search_operation(
    matcher: StreamMatcher,
    token: str,
    snippet_chars: int = 0,
) -> Callable[[Path], FileOutcome]:
    """Bind a token to *matcher* so it fits :meth:`ScanCoordinator.run`."""

    def _operation(path: Path) -> FileOutcome:
        return matcher.search(path, token, snippet_chars)

    return _operation
