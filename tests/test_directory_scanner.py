"""Tests for directory discovery."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

import pytest

from tractor.ingestion import DirectoryScanner, ReadImportsError, discovery


def _touch(path: Path, mtime: int) -> Path:
    path.write_bytes(path.name.encode("utf-8"))
    os.utime(path, (mtime, mtime))
    return path


def test_scan_orders_by_modification_time(tmp_path: Path) -> None:
    _touch(tmp_path / "a.png", 3_000)
    _touch(tmp_path / "b.png", 1_000)
    _touch(tmp_path / "c.png", 2_000)

    found = DirectoryScanner().scan(tmp_path)

    assert [item.path.name for item in found] == ["b.png", "c.png", "a.png"]
    assert found[0].size_bytes == len(b"b.png")
    assert found[0].modified_at.timestamp() == 1_000


def test_scan_breaks_ties_by_name(tmp_path: Path) -> None:
    for name in ("zeta.png", "alpha.png", "mid.png"):
        _touch(tmp_path / name, 5_000)

    found = DirectoryScanner().scan(tmp_path)

    assert [item.path.name for item in found] == ["alpha.png", "mid.png", "zeta.png"]


def test_scan_is_not_recursive(tmp_path: Path) -> None:
    _touch(tmp_path / "top.png", 1_000)
    nested = tmp_path / "nested"
    nested.mkdir()
    _touch(nested / "inner.png", 500)

    found = DirectoryScanner().scan(tmp_path)

    assert [item.path for item in found] == [tmp_path / "top.png"]


def test_scan_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(ReadImportsError):
        DirectoryScanner().scan(tmp_path / "missing")


def test_scan_file_instead_of_directory_raises(tmp_path: Path) -> None:
    path = _touch(tmp_path / "single.png", 1_000)

    with pytest.raises(ReadImportsError):
        DirectoryScanner().scan(path)


def test_scan_unrepresentable_mtime_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _touch(tmp_path / "future.png", 1_000)

    class _OutOfRange(datetime):
        @classmethod
        def fromtimestamp(cls, *args, **kwargs):
            raise OverflowError("timestamp out of range for platform time_t")

    monkeypatch.setattr(discovery, "datetime", _OutOfRange)

    with pytest.raises(ReadImportsError):
        DirectoryScanner().scan(tmp_path)
