"""Errors that abort an import run."""

from __future__ import annotations

from pathlib import Path


class PipelineError(Exception):
    """Base exception for fatal import pipeline failures."""


class ImportPathNotFound(PipelineError):
    """Raised when a path given to the pipeline does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Import path not found: {path}")
        self.path = path


class ContainsFileError(PipelineError):
    """Raised when the resource cannot tell whether a file is already stored."""


class ReadImportsError(PipelineError):
    """Raised when a directory or one of its entries cannot be read."""


class CopyFileError(PipelineError):
    """Raised when a file cannot be ingested into the resource."""


__all__ = [
    "ContainsFileError",
    "CopyFileError",
    "ImportPathNotFound",
    "PipelineError",
    "ReadImportsError",
]
