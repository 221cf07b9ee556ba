"""Deduplicating import pipeline."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Callable, Iterable, Optional
from uuid import UUID

from tractor.storage import ContainsError, PostError, StorageResource

from .discovery import DirectoryScanner
from .errors import ContainsFileError, CopyFileError, ImportPathNotFound
from .models import ImportOutcome, ImportReport

LOGGER = logging.getLogger(__name__)

OutcomeCallback = Callable[[ImportOutcome], None]
PathCallback = Callable[[Path], None]


class ImportPipeline:
    """Import files and directories into a storage resource, skipping known content."""

    def __init__(
        self,
        resource: StorageResource,
        scanner: DirectoryScanner | None = None,
        *,
        id_factory: Callable[[], UUID] = uuid.uuid4,
    ) -> None:
        self.resource = resource
        self.scanner = scanner or DirectoryScanner()
        self.id_factory = id_factory

    def run(
        self,
        paths: Iterable[Path],
        on_outcome: Optional[OutcomeCallback] = None,
        on_found: Optional[PathCallback] = None,
    ) -> ImportReport:
        """Import every path in order and return the collected outcomes.

        Args:
            paths: Files or directories to import.
            on_outcome: Called with each outcome as soon as it is decided.
            on_found: Called with each top-level path before it is processed.

        Returns:
            ImportReport: Outcomes in processing order.

        Raises:
            ImportPathNotFound: If a path does not exist.
            ReadImportsError: If a directory cannot be listed.
            ContainsFileError: If containment cannot be decided for a file.
            CopyFileError: If a file cannot be ingested.
        """
        report = ImportReport(resource=self.resource.name)

        def _record(outcome: ImportOutcome) -> None:
            report.outcomes.append(outcome)
            if on_outcome is not None:
                on_outcome(outcome)

        for path in paths:
            if on_found is not None:
                on_found(path)
            if not path.exists():
                raise ImportPathNotFound(path)

            if path.is_dir():
                for pending in self.scanner.scan(path):
                    _record(self.import_file(pending.path))
            elif path.is_file():
                _record(self.import_file(path))
            else:
                LOGGER.warning("Skipping %s: not a regular file or directory", path)

        LOGGER.info("Import into %s finished: %s", report.resource, report.counts())
        return report

    def import_file(self, path: Path) -> ImportOutcome:
        """Run the containment, format and ingestion steps for a single file."""
        try:
            contained = self.resource.contains(path)
        except ContainsError as exc:
            raise ContainsFileError(str(exc)) from exc

        if contained:
            LOGGER.debug("%s is already stored in %s", path, self.resource.name)
            return ImportOutcome(status="already_imported", source=path)

        if not self.resource.accepts(path):
            LOGGER.debug("%s does not have an accepted format", path)
            return ImportOutcome(status="invalid_format", source=path)

        file_id = self.id_factory()
        try:
            target = self.resource.ingest(file_id, path)
        except PostError as exc:
            raise CopyFileError(str(exc)) from exc

        return ImportOutcome(status="imported", source=path, target=target, file_id=file_id)


__all__ = ["ImportPipeline"]
