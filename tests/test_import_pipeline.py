"""Tests covering the import pipeline."""

from __future__ import annotations

import os
import uuid
from pathlib import Path

import pytest
from PIL import Image

from tractor.ingestion import (
    ContainsFileError,
    CopyFileError,
    ImportOutcome,
    ImportPathNotFound,
    ImportPipeline,
    ReadImportsError,
)
from tractor.storage import ContainsError, PostError, StorageResource


def _image(path: Path, color: str = "red", mtime: int | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (8, 8), color=color).save(path)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


def _pipeline(tmp_path: Path) -> ImportPipeline:
    return ImportPipeline(StorageResource.open_or_create("import", root=tmp_path / "store"))


def _stored(pipeline: ImportPipeline) -> list[Path]:
    return sorted((pipeline.resource.location / "files").iterdir())


def test_import_files_and_directories(tmp_path: Path) -> None:
    single = _image(tmp_path / "single.png", "red")
    folder = tmp_path / "folder"
    _image(folder / "blue.png", "blue", mtime=1_000)
    (folder / "notes.txt").write_text("not an image", encoding="utf-8")
    os.utime(folder / "notes.txt", (2_000, 2_000))

    pipeline = _pipeline(tmp_path)
    report = pipeline.run([single, folder])

    assert [(o.status, o.source.name) for o in report.outcomes] == [
        ("imported", "single.png"),
        ("imported", "blue.png"),
        ("invalid_format", "notes.txt"),
    ]
    assert report.counts() == {"imported": 2, "already_imported": 0, "invalid_format": 1}
    assert sorted(o.target for o in report.imported) == _stored(pipeline)


def test_second_run_skips_everything(tmp_path: Path) -> None:
    folder = tmp_path / "folder"
    _image(folder / "a.png", "red", mtime=1_000)
    _image(folder / "b.png", "green", mtime=2_000)

    pipeline = _pipeline(tmp_path)
    first = pipeline.run([folder])
    stored_after_first = _stored(pipeline)

    reopened = _pipeline(tmp_path)
    second = reopened.run([folder])

    assert first.counts()["imported"] == 2
    assert [o.status for o in second.outcomes] == ["already_imported", "already_imported"]
    assert _stored(reopened) == stored_after_first


def test_duplicate_content_within_one_run_is_imported_once(tmp_path: Path) -> None:
    first = _image(tmp_path / "first.png", "red")
    copy = _image(tmp_path / "copy.png", "red")

    report = _pipeline(tmp_path).run([first, copy])

    assert [o.status for o in report.outcomes] == ["imported", "already_imported"]


def test_rejected_format_is_never_stored(tmp_path: Path) -> None:
    fake = tmp_path / "fake.png"
    fake.write_bytes(b"plain bytes pretending to be a png")

    pipeline = _pipeline(tmp_path)
    report = pipeline.run([fake, fake])

    assert [o.status for o in report.outcomes] == ["invalid_format", "invalid_format"]
    assert _stored(pipeline) == []


def test_directory_is_processed_oldest_first(tmp_path: Path) -> None:
    folder = tmp_path / "folder"
    _image(folder / "a.png", "red", mtime=3_000)
    _image(folder / "b.png", "green", mtime=1_000)
    _image(folder / "c.png", "blue", mtime=2_000)

    seen: list[str] = []
    _pipeline(tmp_path).run([folder], on_outcome=lambda outcome: seen.append(outcome.source.name))

    assert seen == ["b.png", "c.png", "a.png"]


def test_missing_path_halts_the_run(tmp_path: Path) -> None:
    valid_a = _image(tmp_path / "a.png", "red")
    missing = tmp_path / "missing.png"
    valid_b = _image(tmp_path / "b.png", "blue")

    seen: list[ImportOutcome] = []
    found: list[Path] = []
    pipeline = _pipeline(tmp_path)

    with pytest.raises(ImportPathNotFound) as excinfo:
        pipeline.run([valid_a, missing, valid_b], on_outcome=seen.append, on_found=found.append)

    assert excinfo.value.path == missing
    assert [o.source for o in seen] == [valid_a]
    assert found == [valid_a, missing]
    assert len(_stored(pipeline)) == 1


def test_distinct_files_get_distinct_identifiers(tmp_path: Path) -> None:
    first = tmp_path / "first.bmp"
    second = tmp_path / "second.bmp"
    _image(first, "red")
    _image(second, "blue")
    assert first.stat().st_size == second.stat().st_size

    report = _pipeline(tmp_path).run([first, second])

    ids = [o.file_id for o in report.imported]
    targets = [o.target for o in report.imported]
    assert len(set(ids)) == 2
    assert len(set(targets)) == 2
    assert all(target.stem == str(file_id) for target, file_id in zip(targets, ids))


def test_nested_directories_are_not_traversed(tmp_path: Path) -> None:
    folder = tmp_path / "folder"
    _image(folder / "top.png", "red")
    _image(folder / "nested" / "inner.png", "blue")

    pipeline = _pipeline(tmp_path)
    report = pipeline.run([folder])

    assert [o.source.name for o in report.outcomes] == ["top.png"]
    assert len(_stored(pipeline)) == 1


def test_id_factory_is_used_for_new_files(tmp_path: Path) -> None:
    fixed = uuid.UUID("12345678-1234-5678-1234-567812345678")
    resource = StorageResource.open_or_create("import", root=tmp_path / "store")
    pipeline = ImportPipeline(resource, id_factory=lambda: fixed)

    report = pipeline.run([_image(tmp_path / "a.png")])

    assert report.outcomes[0].file_id == fixed
    assert report.outcomes[0].target.name == f"{fixed}.png"


class _FailingResource:
    name = "failing"

    def __init__(self, *, contains_error: bool = False, post_error: bool = False) -> None:
        self.contains_error = contains_error
        self.post_error = post_error

    def contains(self, path: Path) -> bool:
        if self.contains_error:
            raise ContainsError(f"cannot read {path}")
        return False

    def accepts(self, path: Path) -> bool:
        return True

    def ingest(self, file_id: uuid.UUID, path: Path) -> Path:
        if self.post_error:
            raise PostError(f"disk full while copying {path}")
        return path


def test_contains_failure_aborts_run(tmp_path: Path) -> None:
    first = _image(tmp_path / "a.png")
    second = _image(tmp_path / "b.png", "blue")
    pipeline = ImportPipeline(_FailingResource(contains_error=True))  # type: ignore[arg-type]
    seen: list[ImportOutcome] = []

    with pytest.raises(ContainsFileError) as excinfo:
        pipeline.run([first, second], on_outcome=seen.append)

    assert isinstance(excinfo.value.__cause__, ContainsError)
    assert seen == []


def test_post_failure_aborts_run(tmp_path: Path) -> None:
    pipeline = ImportPipeline(_FailingResource(post_error=True))  # type: ignore[arg-type]

    with pytest.raises(CopyFileError, match="disk full"):
        pipeline.run([_image(tmp_path / "a.png")])


def test_unreadable_directory_aborts_run(tmp_path: Path) -> None:
    class _BrokenScanner:
        def scan(self, directory: Path):
            raise ReadImportsError(f"Unable to list {directory}")

    resource = StorageResource.open_or_create("import", root=tmp_path / "store")
    folder = tmp_path / "folder"
    folder.mkdir()
    pipeline = ImportPipeline(resource, scanner=_BrokenScanner())  # type: ignore[arg-type]

    with pytest.raises(ReadImportsError):
        pipeline.run([folder])
