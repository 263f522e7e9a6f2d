"""Tests for settings loading and config resolution."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from premiere_hunter.settings import ConfigError, Overrides, Settings, default_config_path, resolve_config


def _settings(**data) -> Settings:
    return Settings(data=data)


@pytest.fixture
def roots(tmp_path):
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.mkdir()
    b.mkdir()
    return a, b


class TestSettingsFile:
    def test_explicit_file(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("search_text: lune\npaths:\n  - /x\n")
        settings = Settings(path)
        assert settings.get("search_text") == "lune"
        assert settings.get("paths") == ["/x"]
        assert settings.get("missing", 5) == 5

    def test_json_file_loads(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"search_text": "lune", "threads": 2}))
        settings = Settings(path)
        assert settings.get("search_text") == "lune"
        assert settings.get("threads") == 2

    def test_empty_file_is_empty_settings(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("")
        assert Settings(path).get("search_text") is None

    def test_dot_notation(self):
        settings = _settings(outer={"inner": 3})
        assert settings.get("outer.inner") == 3
        assert settings.get("outer.nope") is None

    def test_explicit_missing_file_is_an_error(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            Settings(tmp_path / "nope.json")

    def test_malformed_file_is_an_error(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("search_text: [unclosed")
        with pytest.raises(ConfigError, match="Could not load"):
            Settings(path)

    def test_non_object_file_is_an_error(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            Settings(path)

    def test_default_file_is_optional(self):
        assert not default_config_path().exists()
        assert Settings().get("search_text") is None

    def test_default_file_is_read(self, isolate_config):
        path = isolate_config / "premiere-hunter" / "config.yaml"
        path.parent.mkdir()
        path.write_text("threads: 3\n")
        assert default_config_path() == path
        assert Settings().get("threads") == 3


class TestResolveConfig:
    def test_defaults(self, roots):
        config = resolve_config(_settings(), Overrides(search_text="lune", paths=[roots[0]]))
        assert config.search_text == "lune"
        assert config.roots == (roots[0],)
        assert config.extensions == frozenset({"prproj"})
        assert config.max_file_size == 100 * 1024 * 1024
        assert config.follow_links is False
        assert config.threads >= 1
        assert config.roots_origin == "CLI"

    def test_cli_search_text_wins(self, roots):
        config = resolve_config(
            _settings(search_text="from config", paths=[str(roots[0])]),
            Overrides(search_text="from cli"),
        )
        assert config.search_text == "from cli"

    def test_config_search_text_used(self, roots):
        config = resolve_config(_settings(search_text="lune", paths=[str(roots[0])]))
        assert config.search_text == "lune"

    @pytest.mark.parametrize("source", ["cli", "config"])
    def test_surrounding_spaces_kept(self, roots, source):
        if source == "cli":
            config = resolve_config(_settings(), Overrides(search_text=" Lune ", paths=[roots[0]]))
        else:
            config = resolve_config(_settings(search_text=" Lune ", paths=[str(roots[0])]))
        assert config.search_text == " Lune "

    def test_empty_search_text(self, roots):
        with pytest.raises(ConfigError, match="empty"):
            resolve_config(_settings(), Overrides(search_text="   ", paths=[roots[0]]))

    def test_search_text_optional_when_not_required(self, roots):
        config = resolve_config(_settings(paths=[str(roots[0])]), require_search_text=False)
        assert config.search_text == ""

    def test_paths_merged_and_deduplicated(self, roots):
        a, b = roots
        config = resolve_config(
            _settings(search_text="x", paths=[str(a), str(b)]),
            Overrides(paths=[b, a / ".." / "a"]),
        )
        assert len(config.roots) == 2
        assert config.roots_origin == "config+CLI (merged)"

    def test_missing_roots_dropped(self, roots, tmp_path):
        config = resolve_config(_settings(search_text="x"), Overrides(paths=[tmp_path / "gone", roots[0]]))
        assert config.roots == (roots[0],)

    def test_no_valid_roots(self, tmp_path):
        with pytest.raises(ConfigError, match="No valid search paths"):
            resolve_config(_settings(search_text="x"), Overrides(paths=[tmp_path / "gone"]))

    def test_default_roots_are_platform_volumes(self, roots):
        config = resolve_config(_settings(search_text="x"), volumes=lambda: [roots[1]])
        assert config.roots == (roots[1],)
        assert config.roots_origin == "defaults"

    def test_auto_drives_merge_with_given_roots(self, roots):
        a, b = roots
        config = resolve_config(
            _settings(search_text="x"),
            Overrides(paths=[a], auto_drives=True),
            volumes=lambda: [b],
        )
        assert config.roots == (a, b)
        assert config.roots_origin == "CLI+auto (merged)"

    def test_auto_drives_from_config(self, roots):
        a, b = roots
        config = resolve_config(
            _settings(search_text="x", paths=[str(a)], auto_drives=True),
            volumes=lambda: [b],
        )
        assert config.roots == (a, b)

    def test_threads(self, roots):
        base = {"search_text": "x", "paths": [str(roots[0])]}
        assert resolve_config(_settings(**base, threads=3)).threads == 3
        assert resolve_config(_settings(**base, threads=3), Overrides(threads=7)).threads == 7

    @pytest.mark.parametrize("threads", [0, -1])
    def test_threads_must_be_positive(self, roots, threads):
        with pytest.raises(ConfigError, match="threads"):
            resolve_config(_settings(search_text="x", paths=[str(roots[0])], threads=threads))

    def test_wrong_types_rejected(self, roots):
        base = {"search_text": "x", "paths": [str(roots[0])]}
        with pytest.raises(ConfigError):
            resolve_config(_settings(**base, threads=True))
        with pytest.raises(ConfigError):
            resolve_config(_settings(**base, follow_links="yes"))
        with pytest.raises(ConfigError):
            resolve_config(_settings(**base, extensions="prproj"))
        with pytest.raises(ConfigError):
            resolve_config(_settings(search_text="x", paths=str(roots[0])))

    def test_max_file_size(self, roots):
        base = {"search_text": "x", "paths": [str(roots[0])]}
        assert resolve_config(_settings(**base, max_file_size_mb=0)).max_file_size is None
        assert resolve_config(_settings(**base, max_file_size_mb=2)).max_file_size == 2 * 1024 * 1024
        assert resolve_config(_settings(**base), Overrides(max_file_size_mb=0)).max_file_size is None
        with pytest.raises(ConfigError, match="negative"):
            resolve_config(_settings(**base, max_file_size_mb=-1))

    def test_extensions_normalized(self, roots):
        config = resolve_config(_settings(search_text="x", paths=[str(roots[0])], extensions=[".PRPROJ", "Xml"]))
        assert config.extensions == frozenset({"prproj", "xml"})

    def test_cli_extensions_replace_config(self, roots):
        config = resolve_config(
            _settings(search_text="x", paths=[str(roots[0])], extensions=["prproj"]),
            Overrides(extensions=["aep"]),
        )
        assert config.extensions == frozenset({"aep"})

    def test_empty_extensions_rejected(self, roots):
        with pytest.raises(ConfigError, match="extension"):
            resolve_config(_settings(search_text="x", paths=[str(roots[0])], extensions=[]))

    def test_exclude_dirs_merged_and_folded(self, roots):
        config = resolve_config(
            _settings(search_text="x", paths=[str(roots[0])], exclude_dirs=["Node_Modules"]),
            Overrides(exclude_dirs=["$RECYCLE.BIN"]),
        )
        assert config.exclude_dirs == frozenset({"node_modules", "$recycle.bin"})

    def test_follow_links_override(self, roots):
        base = {"search_text": "x", "paths": [str(roots[0])]}
        assert resolve_config(_settings(**base, follow_links=True)).follow_links is True
        assert resolve_config(_settings(**base, follow_links=True), Overrides(follow_links=False)).follow_links is False

    def test_config_is_immutable(self, roots):
        config = resolve_config(_settings(search_text="x", paths=[str(roots[0])]))
        with pytest.raises(AttributeError):
            config.search_text = "y"

    def test_paths_are_path_objects(self, roots):
        config = resolve_config(_settings(search_text="x", paths=[str(roots[0])]))
        assert all(isinstance(r, Path) for r in config.roots)
