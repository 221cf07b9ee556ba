"""Import pipeline that feeds files into storage resources."""

from .discovery import DirectoryScanner
from .errors import (
    ContainsFileError,
    CopyFileError,
    ImportPathNotFound,
    PipelineError,
    ReadImportsError,
)
from .models import ImportOutcome, ImportReport, PendingFile
from .pipeline import ImportPipeline

__all__ = [
    "ContainsFileError",
    "CopyFileError",
    "DirectoryScanner",
    "ImportOutcome",
    "ImportPipeline",
    "ImportPathNotFound",
    "ImportReport",
    "PendingFile",
    "PipelineError",
    "ReadImportsError",
]
