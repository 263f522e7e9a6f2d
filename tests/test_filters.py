"""Tests for the traversal and search predicates."""

from __future__ import annotations

from pathlib import Path

from premiere_hunter.core.filters import FileFilter, normalize_extension
from premiere_hunter.models.config import SearchConfig


class TestNormalizeExtension:
    def test_strips_dot_and_lowercases(self):
        assert normalize_extension(".PRPROJ") == "prproj"
        assert normalize_extension("Prproj") == "prproj"
        assert normalize_extension("  .txt ") == "txt"


class TestShouldDescend:
    def test_excluded_names_case_insensitive(self):
        f = FileFilter(["prproj"], exclude_dirs=["node_modules", "$RECYCLE.BIN"])
        assert not f.should_descend("node_modules")
        assert not f.should_descend("Node_Modules")
        assert not f.should_descend("$Recycle.Bin")

    def test_other_names_allowed(self):
        f = FileFilter(["prproj"], exclude_dirs=["cache"])
        assert f.should_descend("projects")
        # exact component match only
        assert f.should_descend("cache_old")


class TestShouldSearch:
    def test_extension_must_be_accepted(self):
        f = FileFilter(["prproj", ".XML"])
        assert f.should_search(Path("a/b.prproj"), 10)
        assert f.should_search(Path("a/b.PrProj"), 10)
        assert f.should_search(Path("a/b.xml"), 10)
        assert not f.should_search(Path("a/b.txt"), 10)
        assert not f.should_search(Path("a/noext"), 10)

    def test_explicit_extension_argument(self):
        f = FileFilter(["prproj"])
        assert f.should_search("whatever", 10, extension="prproj")
        assert not f.should_search("whatever.prproj", 10, extension=".txt")

    def test_size_ceiling_is_strict(self):
        f = FileFilter(["prproj"], max_file_size=100)
        assert f.should_search("a.prproj", 100)
        assert not f.should_search("a.prproj", 101)

    def test_no_ceiling(self):
        assert FileFilter(["prproj"], max_file_size=None).should_search("a.prproj", 10**12)
        assert FileFilter(["prproj"], max_file_size=0).should_search("a.prproj", 10**12)

    def test_symlinks_rejected_unless_following(self):
        assert not FileFilter(["prproj"]).should_search("a.prproj", 1, is_symlink=True)
        assert FileFilter(["prproj"], follow_links=True).should_search("a.prproj", 1, is_symlink=True)

    def test_from_config(self, tmp_path):
        config = SearchConfig(
            search_text="x",
            roots=(tmp_path,),
            extensions=frozenset({"prproj"}),
            exclude_dirs=frozenset({"skip"}),
            max_file_size=50,
        )
        f = FileFilter.from_config(config)
        assert not f.should_descend("SKIP")
        assert not f.should_search("a.prproj", 51)
        assert f.should_search("a.prproj", 50)
