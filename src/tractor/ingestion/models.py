"""Data models produced while importing files."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

ImportStatus = Literal["imported", "already_imported", "invalid_format"]
IMPORT_STATUSES: tuple[ImportStatus, ...] = ("imported", "already_imported", "invalid_format")


class PendingFile(BaseModel):
    """A directory entry waiting to be offered to the importer.

    Attributes:
        path: Location of the file.
        size_bytes: File size reported by the filesystem.
        modified_at: Last modification time.
    """

    path: Path
    size_bytes: int
    modified_at: datetime


class ImportOutcome(BaseModel):
    """Decision taken for a single examined file.

    Attributes:
        status: What happened to the file.
        source: Path that was examined.
        target: Stored location when the file was imported.
        file_id: Identifier assigned when the file was imported.
    """

    status: ImportStatus
    source: Path
    target: Optional[Path] = None
    file_id: Optional[UUID] = None


class ImportReport(BaseModel):
    """Outcomes of a completed import run, in processing order."""

    resource: str
    outcomes: List[ImportOutcome] = Field(default_factory=list)

    @property
    def imported(self) -> List[ImportOutcome]:
        """Return outcomes for files that were newly stored."""
        return [outcome for outcome in self.outcomes if outcome.status == "imported"]

    def counts(self) -> Dict[str, int]:
        """Return the number of outcomes per status."""
        totals = {status: 0 for status in IMPORT_STATUSES}
        for outcome in self.outcomes:
            totals[outcome.status] += 1
        return totals


__all__ = ["IMPORT_STATUSES", "ImportOutcome", "ImportReport", "ImportStatus", "PendingFile"]
