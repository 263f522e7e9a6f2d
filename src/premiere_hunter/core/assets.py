"""Media asset extraction from Premiere project XML."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path, PureWindowsPath

from premiere_hunter.core.matcher import READ_ERRORS, Opener, describe_error, open_project
from premiere_hunter.models.outcome import FileOutcome

log = logging.getLogger(__name__)

_PATH_NAMES = frozenset({"absolutepath", "filepath", "path", "relativepath", "relpath"})

ASSET_EXTENSIONS = frozenset({
    # video
    "mp4", "mov", "mxf", "mts", "m2ts", "avi", "mkv", "wmv", "m4v", "3gp",
    # audio
    "wav", "mp3", "aac", "m4a", "aif", "aiff", "flac", "ogg",
    # stills and graphics
    "png", "jpg", "jpeg", "tif", "tiff", "bmp", "gif", "psd", "ai", "svg", "dng", "cr2", "nef", "arw",
    # presets and motion graphics templates
    "prfpset", "mogrt",
})


def _local_name(name: str) -> str:
    """Strip an XML namespace and lower-case the remainder."""
    return name.rsplit("}", 1)[-1].lower()


def normalize_asset_path(raw: str) -> str:
    """Trim whitespace, drop a ``file://`` URL prefix and use backslash separators.

    Premiere records the same media both as a plain Windows path and as a
    ``file:///`` URL, so both spellings must reduce to one value.
    """
    value = raw.strip()
    lowered = value.lower()
    if lowered.startswith("file:///"):
        value = value[8:]
    elif lowered.startswith("file://"):
        value = value[7:]
    return value.replace("/", "\\")


def _asset_extension(value: str) -> str:
    # Projects move between Windows and macOS, so accept either separator.
    return PureWindowsPath(value).suffix.lstrip(".").lower()


def extract_assets(path: Path | str, opener: Opener = open) -> list[str]:
    """List media files referenced by a project, sorted and de-duplicated.

    The XML is parsed incrementally. Malformed XML ends the parse and
    returns whatever was collected up to that point; I/O errors propagate.
    """
    seen: set[str] = set()
    assets: list[str] = []

    def _add(raw: str | None) -> None:
        if not raw:
            return
        value = normalize_asset_path(raw)
        if _asset_extension(value) not in ASSET_EXTENSIONS:
            return
        key = value.lower()
        if key not in seen:
            seen.add(key)
            assets.append(value)

    with opener(path, "rb") as raw_file:
        stream = open_project(raw_file)
        try:
            for event, elem in ET.iterparse(stream, events=("start", "end")):
                if event == "start":
                    for key, value in elem.attrib.items():
                        if _local_name(key) in _PATH_NAMES:
                            _add(value)
                    continue
                if _local_name(elem.tag) in _PATH_NAMES:
                    _add(elem.text)
                elem.clear()
        except ET.ParseError as e:
            log.debug("Malformed project XML in %s: %s", path, e)
        finally:
            if stream is not raw_file:
                stream.close()

    assets.sort()
    return assets


class AssetLister:
    """Per-file operation for the ``assets`` command.

    A project counts as matched when at least one asset survives the
    optional case-insensitive *filter_text*.
    """

    def __init__(self, filter_text: str | None = None, opener: Opener = open) -> None:
        self.filter_text = filter_text.lower() if filter_text else None
        self.opener = opener

    def __call__(self, path: Path) -> FileOutcome:
        try:
            assets = extract_assets(path, opener=self.opener)
        except READ_ERRORS as e:
            log.debug("Cannot read %s: %s", path, e)
            return FileOutcome.errored(describe_error(e))

        if self.filter_text:
            assets = [a for a in assets if self.filter_text in a.lower()]
        if not assets:
            return FileOutcome.not_matched()
        return FileOutcome.matched(assets=tuple(assets))
