"""Shared test fixtures and pytest configuration."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from shadowsync.workspace import SyncWorkspace

APP_MANIFEST = """\
[project]
authors = ["Fuel Labs <contact@fuel.sh>"]
entry = "main.sw"
license = "Apache-2.0"
name = "app"

# local packages
[dependencies]
foo = { path = "../foo" }
std = { git = "https://github.com/FuelLabs/sway", tag = "v0.49.0" }
core = "0.1.0"
"""


def package_manifest(name: str, body: str = "") -> str:
    return f'[project]\nentry = "lib.sw"\nlicense = "Apache-2.0"\nname = "{name}"\n{body}'


@pytest.fixture
def temp_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point tempfile at a directory owned by the test."""
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A Forc package next to a local dependency, plus files that must not be mirrored."""
    ws = tmp_path / "ws"
    foo = ws / "foo"
    (foo / "src").mkdir(parents=True)
    (foo / "Forc.toml").write_text(package_manifest("foo"))
    (foo / "src" / "lib.sw").write_text("library;\n")

    app = ws / "app"
    (app / "src" / "nested" / "deep").mkdir(parents=True)
    (app / "Forc.toml").write_text(APP_MANIFEST)
    (app / "Forc.lock").write_text('[[package]]\nname = "app"\n')
    (app / "src" / "main.sw").write_text("contract;\n")
    (app / "src" / "nested" / "deep" / "util.sw").write_text("library;\n")
    (app / "README.md").write_text("# app\n")
    (app / "docs").mkdir()
    (app / "docs" / "notes.md").write_text("notes\n")
    (app / "out" / "debug").mkdir(parents=True)
    (app / "out" / "debug" / "app.bin").write_bytes(b"\x00\x01")
    (app / "empty").mkdir()
    return app


@pytest.fixture
def workspace(temp_root: Path):
    ws = SyncWorkspace()
    yield ws
    ws.teardown()
