"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path
from typing import BinaryIO

import pytest


class DictSink:
    """In-memory sink mapping archive names to decoded file contents."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.entries: dict[str, str] = {}
        self.order: list[str] = []
        self._fail_on = fail_on

    def add(self, archive_name: str, handle: BinaryIO, max_size: int) -> None:
        if self._fail_on is not None and archive_name.endswith(self._fail_on):
            from bundlectl.collector.errors import SinkError

            msg = f"refusing {archive_name}"
            raise SinkError(msg)
        self.entries[archive_name] = handle.read(max_size).decode("utf-8")
        self.order.append(archive_name)


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG directories at a temporary location for every test."""
    xdg = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(xdg / "state"))
    return xdg


@pytest.fixture
def dict_sink() -> DictSink:
    """Fresh in-memory sink."""
    return DictSink()


@pytest.fixture
def failing_sink_factory() -> type[DictSink]:
    """Sink class; pass fail_on=<suffix> to make add() raise SinkError."""
    return DictSink


@pytest.fixture
def run_dir(tmp_path: Path) -> Path:
    """A finished pipeline run directory.

    Layout::

        build.xml
        log
        workflow/1.xml
        workflow/2.xml
        archive/test.txt
    """
    root = tmp_path / "builds" / "1"
    (root / "workflow").mkdir(parents=True)
    (root / "archive").mkdir()
    (root / "build.xml").write_text("<flow-build>ok</flow-build>")
    (root / "log").write_text("[Pipeline] node\nBuilding in workspace\n")
    (root / "workflow" / "1.xml").write_text("<node id='1'/>")
    (root / "workflow" / "2.xml").write_text("<node id='2'/>")
    (root / "archive" / "test.txt").write_text("")
    return root
