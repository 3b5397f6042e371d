"""Shared test fixtures for the jar_assembler test suite.

WHY: Almost every test needs small classpath items on disk: a jar with
a few entries in a known order, a directory tree with a few files,
and a way to read the produced archive back. Centralizing the builders
here keeps the individual tests about behaviour, not setup.

HOW: make_jar() writes a ZIP with entries in the given order (None
content means a directory marker). make_tree() writes files below a
root directory. read_jar() returns the entries of an archive in order.
Fixtures wrap these around tmp_path and provide a fresh staging
archive and run state.

RULES:
- All file I/O uses tmp_path for isolation
- The debug environment flag is cleared for every test
- Each test gets its own RunState (no shared mutable state)
"""

from __future__ import annotations

import os
import time
import zipfile
from pathlib import Path
from typing import Dict, Optional, Tuple

import pytest

from jar_assembler.core.model import RunState
from jar_assembler.core.staging import StagingArchive

# A fixed, DOS-representable timestamp (even seconds) for entries in test jars
JAR_ENTRY_TIME: Tuple[int, int, int, int, int, int] = (2021, 3, 14, 15, 9, 26)


def make_jar(path: Path, entries: Dict[str, Optional[bytes]]) -> Path:
    """Write a jar with ``entries`` in insertion order.

    A name ending in "/" (or a None value) is written as a directory marker.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            if content is None and not name.endswith("/"):
                name = name + "/"
            info = zipfile.ZipInfo(name, date_time=JAR_ENTRY_TIME)
            zf.writestr(info, content or b"")
    return path


def make_tree(root: Path, files: Dict[str, bytes]) -> Path:
    """Write ``files`` (relative "/"-separated names) below ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        target = root.joinpath(*name.split("/"))
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
    return root


def read_jar(path: Path) -> Dict[str, bytes]:
    """Return {name: content} of every file entry, in archive order."""
    with zipfile.ZipFile(path) as zf:
        return {
            info.filename: zf.read(info)
            for info in zf.infolist()
            if not info.is_dir()
        }


def jar_names(path: Path) -> list:
    with zipfile.ZipFile(path) as zf:
        return zf.namelist()


@pytest.fixture(autouse=True)
def _clear_debug_flag(monkeypatch):
    """Keep a developer's environment or .env from leaking into tests."""
    monkeypatch.delenv("JAR_ASSEMBLER_DEBUG", raising=False)


@pytest.fixture
def state():
    return RunState()


@pytest.fixture
def staging():
    archive = StagingArchive.create(prefix="jar_assembler_test_")
    yield archive
    archive.discard()


@pytest.fixture
def jar_factory(tmp_path):
    """Build jars under tmp_path/jars: jar_factory("a.jar", {...})."""

    def _factory(name: str, entries: Dict[str, Optional[bytes]]) -> Path:
        return make_jar(tmp_path / "jars" / name, entries)

    return _factory


@pytest.fixture
def tree_factory(tmp_path):
    """Build directory trees under tmp_path/trees: tree_factory("classes", {...})."""

    def _factory(name: str, files: Dict[str, bytes]) -> Path:
        return make_tree(tmp_path / "trees" / name, files)

    return _factory


@pytest.fixture
def fixed_mtime():
    """Set a file's mtime to a known local time and return the epoch value."""

    def _set(path: Path, stamp=JAR_ENTRY_TIME) -> float:
        epoch = time.mktime(tuple(stamp) + (0, 0, -1))
        os.utime(path, (epoch, epoch))
        return epoch

    return _set
