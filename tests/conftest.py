"""Shared test fixtures."""

from __future__ import annotations

import gzip

import pytest


@pytest.fixture(autouse=True)
def isolate_config(tmp_path, monkeypatch):
    """Point the default config location at an empty temp directory."""
    config_home = tmp_path / "xdg_config"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home


@pytest.fixture
def project_tree(tmp_path):
    """dirA with two projects and one file of the wrong type."""
    root = tmp_path / "dirA"
    root.mkdir()
    (root / "x.prproj").write_text("no match here", encoding="utf-8")
    (root / "y.prproj").write_text("<Title>... Clair De Lune ...</Title>", encoding="utf-8")
    (root / "z.txt").write_text("Clair De Lune", encoding="utf-8")
    return root


@pytest.fixture
def gzip_project(tmp_path):
    """A gzip-compressed project, the way Premiere saves them."""
    path = tmp_path / "compressed.prproj"
    xml = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        "<PremiereData>\n"
        "  <Media><FilePath>C:\\Footage\\Interview_A.mov</FilePath></Media>\n"
        '  <Media AbsolutePath="file:///D:/Music/Clair De Lune.wav"/>\n'
        "</PremiereData>\n"
    )
    path.write_bytes(gzip.compress(xml.encode("utf-8")))
    return path
