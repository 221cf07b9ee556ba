"""Named storage resources holding imported files."""

from __future__ import annotations

import json
import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from pydantic import ValidationError

from .detectors import HashComputer, TypeDetector
from .errors import ContainsError, PostError, ResourceError
from .models import ImportedFile, ResourceIndex

if TYPE_CHECKING:
    from tractor.config import TractorConfig

LOGGER = logging.getLogger(__name__)

DEFAULT_INDEX_FILENAME = "index.json"
FILES_DIRNAME = "files"
STAGING_DIRNAME = "staging"


def validate_resource_name(name: str) -> str:
    """Return name unchanged if it can be used as a resource directory.

    Raises:
        ResourceError: If the name is empty, hidden or contains path separators.
    """
    if not name or not name.strip():
        raise ResourceError("Resource name must not be empty.")
    if name in {".", ".."} or name.startswith("."):
        raise ResourceError(f"Invalid resource name {name!r}: names may not start with '.'.")
    separators = {"/", "\\", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    if any(sep in name for sep in separators) or "\0" in name:
        raise ResourceError(f"Invalid resource name {name!r}: names may not contain separators.")
    return name


class StorageResource:
    """A named directory of imported files plus a content-digest index.

    Layout under ``<root>/<name>``::

        index.json        digest -> ImportedFile records
        files/<id><ext>   stored copies
        staging/          partial copies awaiting placement

    Use :meth:`open_or_create` rather than the constructor.
    """

    def __init__(
        self,
        name: str,
        location: Path,
        index: ResourceIndex,
        *,
        detector: TypeDetector,
        hasher: HashComputer,
        index_filename: str = DEFAULT_INDEX_FILENAME,
    ) -> None:
        self._name = name
        self._location = location
        self._index = index
        self._detector = detector
        self._hasher = hasher
        self._index_filename = index_filename

    @classmethod
    def open_or_create(
        cls,
        name: str,
        *,
        root: Path | str,
        detector: TypeDetector | None = None,
        hasher: HashComputer | None = None,
        index_filename: str = DEFAULT_INDEX_FILENAME,
    ) -> "StorageResource":
        """Open the resource called name under root, creating it when missing.

        Args:
            name: Human-chosen resource name.
            root: Directory holding all resources.
            detector: Format detector backing :meth:`accepts`.
            hasher: Digest computer backing :meth:`contains`.
            index_filename: Name of the index file inside the resource.

        Returns:
            StorageResource: Handle to the resource.

        Raises:
            ResourceError: If the name is invalid or the storage cannot be prepared.
        """
        validate_resource_name(name)
        location = Path(root).expanduser() / name
        try:
            location.mkdir(parents=True, exist_ok=True)
            (location / FILES_DIRNAME).mkdir(exist_ok=True)
            (location / STAGING_DIRNAME).mkdir(exist_ok=True)
        except OSError as exc:
            raise ResourceError(f"Unable to prepare resource {name!r} at {location}: {exc}") from exc

        index = cls._load_index(name, location / index_filename)
        resource = cls(
            name,
            location,
            index,
            detector=detector or TypeDetector(),
            hasher=hasher or HashComputer(),
            index_filename=index_filename,
        )
        if not (location / index_filename).exists():
            try:
                resource._write_index()
            except OSError as exc:
                raise ResourceError(f"Unable to write index for resource {name!r}: {exc}") from exc
        LOGGER.debug("Opened resource %s at %s (%d files)", name, location, len(index.files))
        return resource

    @classmethod
    def from_config(cls, name: str, config: "TractorConfig") -> "StorageResource":
        """Open a resource using storage, format and hashing settings from config."""
        return cls.open_or_create(
            name,
            root=config.storage.root,
            detector=TypeDetector(
                extensions=config.formats.extensions,
                image_formats=config.formats.image_formats,
                sniff_content=config.formats.sniff_content,
            ),
            hasher=HashComputer(chunk_size=config.hashing.chunk_size_kb * 1024),
            index_filename=config.storage.index_filename,
        )

    @property
    def name(self) -> str:
        """Return the resource name."""
        return self._name

    @property
    def location(self) -> Path:
        """Return the directory backing the resource."""
        return self._location

    @property
    def files(self) -> List[ImportedFile]:
        """Return every stored file in import order."""
        return sorted(self._index.files.values(), key=lambda record: record.imported_at)

    def lookup(self, digest: str) -> Optional[ImportedFile]:
        """Return the record stored for digest, if any."""
        return self._index.files.get(digest)

    def resolve(self, record: ImportedFile) -> Path:
        """Return the absolute path of a stored record."""
        return self._location / record.path

    def contains(self, path: Path) -> bool:
        """Return True if the content of path is already stored.

        Raises:
            ContainsError: If the file cannot be read or is not a regular file.
        """
        if not path.is_file():
            raise ContainsError(f"{path} is not a regular file.")
        try:
            digest = self._hasher.compute(path)
        except OSError as exc:
            raise ContainsError(f"Unable to hash {path}: {exc}") from exc
        return digest in self._index.files

    def accepts(self, path: Path) -> bool:
        """Return True if path has an accepted image format."""
        return self._detector.accepts(path)

    def ingest(self, file_id: UUID, path: Path) -> Path:
        """Copy path into the resource under file_id and record it in the index.

        The copy is staged first and then renamed into ``files/``, so a failed
        ingestion never leaves a partial file at the final location.

        Args:
            file_id: Fresh identifier used as the stored file's stem.
            path: Source file to copy.

        Returns:
            Path: Absolute path of the stored copy.

        Raises:
            PostError: If the copy or the index update fails, the identifier is
                already in use, or the content is already stored.
        """
        relative = Path(FILES_DIRNAME) / f"{file_id}{path.suffix.lower()}"
        target = self._location / relative
        if target.exists() or any(record.id == file_id for record in self._index.files.values()):
            raise PostError(f"Identifier {file_id} is already used in resource {self._name!r}.")

        staging = self._location / STAGING_DIRNAME / f"{file_id}.part"
        try:
            shutil.copy2(path, staging)
            digest = self._hasher.compute(staging)
            record = ImportedFile(
                id=file_id,
                digest=digest,
                path=relative.as_posix(),
                source=str(path.resolve()),
                size_bytes=staging.stat().st_size,
                image_format=self._detector.detect(staging),
            )
        except OSError as exc:
            staging.unlink(missing_ok=True)
            raise PostError(f"Unable to copy {path} into resource {self._name!r}: {exc}") from exc

        existing = self._index.files.get(digest)
        if existing is not None:
            staging.unlink(missing_ok=True)
            raise PostError(f"{path} is already stored as {existing.path}.")

        try:
            os.replace(staging, target)
        except OSError as exc:
            staging.unlink(missing_ok=True)
            raise PostError(f"Unable to place {path} at {target}: {exc}") from exc

        self._index.files[digest] = record
        try:
            self._write_index()
        except OSError as exc:
            del self._index.files[digest]
            target.unlink(missing_ok=True)
            raise PostError(f"Unable to update index for resource {self._name!r}: {exc}") from exc

        LOGGER.info("Stored %s as %s in resource %s", path, relative, self._name)
        return target

    # Internal helpers -------------------------------------------------

    @staticmethod
    def _load_index(name: str, index_path: Path) -> ResourceIndex:
        if not index_path.exists():
            return ResourceIndex(name=name)
        try:
            data = json.loads(index_path.read_text(encoding="utf-8"))
            index = ResourceIndex.model_validate(data)
        except OSError as exc:
            raise ResourceError(f"Unable to read index {index_path}: {exc}") from exc
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ResourceError(f"Invalid index data in {index_path}: {exc}") from exc
        if index.name != name:
            LOGGER.warning("Index at %s was created for resource %r", index_path, index.name)
        return index

    def _write_index(self) -> None:
        self._index.updated_at = datetime.now(timezone.utc)
        index_path = self._location / self._index_filename
        temp_path = index_path.with_name(f"{index_path.name}.tmp")
        payload = self._index.model_dump(mode="json")
        try:
            temp_path.write_text(json.dumps(payload, indent=2, sort_keys=False), encoding="utf-8")
            os.replace(temp_path, index_path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise


__all__ = [
    "DEFAULT_INDEX_FILENAME",
    "FILES_DIRNAME",
    "STAGING_DIRNAME",
    "StorageResource",
    "validate_resource_name",
]
