"""YAML settings file and resolution of the final search configuration."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from premiere_hunter.core.filters import normalize_extension
from premiere_hunter.models.config import (
    DEFAULT_EXTENSIONS,
    DEFAULT_MAX_FILE_SIZE_MB,
    DEFAULT_SNIPPET_CHARS,
    SearchConfig,
    default_threads,
)
from premiere_hunter.utils import platform_volumes, xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "premiere-hunter"
_SETTINGS_FILE = "config.yaml"


class ConfigError(Exception):
    """Raised when settings are missing or invalid. Fatal before scanning."""


def default_config_path() -> Path:
    return xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE


class Settings:
    """Read-only settings backed by a YAML file.

    JSON is a subset of YAML, so a JSON config file loads as well.

    Uses dot-notation keys for nested access::

        settings.get("search_text")
        settings.get("paths", [])

    A file passed explicitly must exist. The default file is optional.
    Either way, a file that exists but cannot be parsed is a
    :class:`ConfigError`.
    """

    def __init__(self, path: Path | None = None, data: dict[str, Any] | None = None) -> None:
        self._explicit = path is not None
        self._path = path or default_config_path()
        self._data: dict[str, Any] = {}
        if data is not None:
            self._data = dict(data)
        else:
            self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def _load(self) -> None:
        if not self._path.exists():
            if self._explicit:
                raise ConfigError(f"Config file not found: {self._path}")
            return
        try:
            with open(self._path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Could not load config file {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {self._path} must contain a mapping")
        log.info("Loaded settings from %s", self._path)
        self._data = data


@dataclass(slots=True)
class Overrides:
    """Values given on the command line. ``None`` means "not given"."""

    search_text: str | None = None
    paths: list[Path] = field(default_factory=list)
    auto_drives: bool = False
    threads: int | None = None
    extensions: list[str] | None = None
    exclude_dirs: list[str] = field(default_factory=list)
    follow_links: bool | None = None
    max_file_size_mb: int | None = None
    show_snippets: bool = False
    snippet_chars: int = DEFAULT_SNIPPET_CHARS


def resolve_config(
    settings: Settings,
    overrides: Overrides | None = None,
    *,
    require_search_text: bool = True,
    volumes: Callable[[], list[Path]] = platform_volumes,
) -> SearchConfig:
    """Merge the settings file with command-line overrides.

    Command-line values win over the file, except for ``paths`` and
    ``exclude_dirs``, which are merged.

    Raises:
        ConfigError: On empty search text (when required), no usable
            search roots, or values of the wrong type or range.
    """
    overrides = overrides or Overrides()

    search_text = overrides.search_text
    if search_text is None:
        search_text = _typed(settings, "search_text", str, "")
    if require_search_text and not search_text.strip():
        raise ConfigError("Search text cannot be empty")

    roots, origin = _resolve_roots(settings, overrides, volumes)

    threads = overrides.threads
    if threads is None:
        threads = _typed(settings, "threads", int, None)
    if threads is None:
        threads = default_threads()
    if threads < 1:
        raise ConfigError(f"threads must be a positive integer, got {threads}")

    max_mb = overrides.max_file_size_mb
    if max_mb is None:
        max_mb = _typed(settings, "max_file_size_mb", int, DEFAULT_MAX_FILE_SIZE_MB)
    if max_mb < 0:
        raise ConfigError(f"max_file_size_mb must not be negative, got {max_mb}")

    raw_extensions = overrides.extensions or _string_list(settings, "extensions", list(DEFAULT_EXTENSIONS))
    extensions = frozenset(e for e in map(normalize_extension, raw_extensions) if e)
    if not extensions:
        raise ConfigError("At least one file extension is required")

    excludes = _string_list(settings, "exclude_dirs", []) + list(overrides.exclude_dirs)

    follow_links = overrides.follow_links
    if follow_links is None:
        follow_links = _typed(settings, "follow_links", bool, False)

    if overrides.snippet_chars < 0:
        raise ConfigError("snippet_chars must not be negative")

    return SearchConfig(
        search_text=search_text,
        roots=tuple(roots),
        extensions=extensions,
        exclude_dirs=frozenset(d.casefold() for d in excludes if d),
        follow_links=follow_links,
        max_file_size=max_mb * 1024 * 1024 if max_mb else None,
        threads=threads,
        show_snippets=overrides.show_snippets,
        snippet_chars=overrides.snippet_chars,
        roots_origin=origin,
    )


def _resolve_roots(
    settings: Settings,
    overrides: Overrides,
    volumes: Callable[[], list[Path]],
) -> tuple[list[Path], str]:
    """Collect roots from the config file, CLI and drive auto-detection."""
    roots: list[Path] = []
    sources: list[str] = []

    config_paths = [Path(p) for p in _string_list(settings, "paths", [])]
    if config_paths:
        roots.extend(config_paths)
        sources.append("config")
    if overrides.paths:
        roots.extend(overrides.paths)
        sources.append("CLI")

    if overrides.auto_drives or _typed(settings, "auto_drives", bool, False):
        detected = volumes()
        if detected:
            roots.extend(detected)
            sources.append("auto")

    if not roots:
        roots = volumes()
        sources.append("defaults")

    # Windows paths compare case-insensitively; normcase handles that.
    seen: set[str] = set()
    unique: list[Path] = []
    for root in roots:
        key = os.path.normcase(os.path.abspath(root))
        if key not in seen:
            seen.add(key)
            unique.append(root)

    existing: list[Path] = []
    for root in unique:
        if root.is_dir():
            existing.append(root)
        else:
            log.warning("Path does not exist: %s", root)

    if not existing:
        raise ConfigError("No valid search paths")

    origin = "+".join(sources)
    if len(sources) > 1:
        origin = f"{origin} (merged)"
    return existing, origin


def _typed(settings: Settings, key: str, kind: type, default: Any) -> Any:
    value = settings.get(key)
    if value is None:
        return default
    # bool is an int subclass; don't let `true` pass as a thread count.
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(f"'{key}' must be of type {kind.__name__}, got {type(value).__name__}")
    return value


def _string_list(settings: Settings, key: str, default: list[str]) -> list[str]:
    value = settings.get(key)
    if value is None:
        return list(default)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return list(value)
