"""Persistent models describing the contents of a storage resource."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ImportedFile(BaseModel):
    """A file stored in a resource under a generated identifier.

    Attributes:
        id: Random identifier assigned when the file was ingested.
        digest: SHA-256 hex digest of the stored content.
        path: Location of the stored copy, relative to the resource directory.
        source: Absolute path the file was imported from.
        size_bytes: Size of the stored content.
        image_format: Image format reported by the detector, when known.
        imported_at: Time of ingestion.
    """

    id: UUID
    digest: str
    path: str
    source: str
    size_bytes: int
    image_format: Optional[str] = None
    imported_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ResourceIndex(BaseModel):
    """Index of every file held by a resource, keyed by content digest."""

    name: str
    files: Dict[str, ImportedFile] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = ["ImportedFile", "ResourceIndex"]
