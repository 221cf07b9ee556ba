"""Storage resources that hold imported image files."""

from .detectors import HashComputer, TypeDetector
from .errors import ContainsError, PostError, ResourceError, StorageError
from .models import ImportedFile, ResourceIndex
from .resource import StorageResource, validate_resource_name

__all__ = [
    "ContainsError",
    "HashComputer",
    "ImportedFile",
    "PostError",
    "ResourceError",
    "ResourceIndex",
    "StorageError",
    "StorageResource",
    "TypeDetector",
    "validate_resource_name",
]
